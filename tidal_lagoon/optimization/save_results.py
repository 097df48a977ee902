"""
Save Optimization Results
=========================

Exports NSGA-II results to JSON and CSV formats.

- JSON: Run metadata, configs, Pareto front and convergence history
- CSV: Flat Pareto front table with one row per solution
"""

import csv
import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

import numpy as np


def _make_json_serializable(obj):
    """Recursively convert numpy types to native Python types for JSON."""
    if isinstance(obj, dict):
        return {k: _make_json_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_make_json_serializable(v) for v in obj]
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        obj = float(obj)
    if isinstance(obj, (np.bool_,)):
        return bool(obj)
    if isinstance(obj, float) and not np.isfinite(obj):
        return None
    return obj


def save_optimization_json(result, output_path, sim_config=None, optimizer_config=None):
    """
    Save full optimization results to a JSON file.

    Parameters
    ----------
    result : OptimizationResult
        Output from ``run_optimization()``.
    output_path : str or Path
        Destination JSON file path.
    sim_config : SimulationConfig or None
        Simulation settings used for the run.
    optimizer_config : OptimizerConfig or None
        NSGA-II settings used for the run.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "metadata": {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "generations_run": result.generations_run,
            "converged": result.converged,
            "termination_reason": result.termination_reason,
            "convergence_generation": result.convergence_generation,
            "elapsed_seconds": result.elapsed_seconds,
            "summary": result.summary,
            "seeds": result.seeds,
        },
        "config": {
            "simulation": asdict(sim_config) if sim_config is not None else None,
            "optimizer": asdict(optimizer_config) if optimizer_config is not None else None,
        },
        "pareto_front": [s.to_dict(result.gene_names) for s in result.pareto_front],
        "history": result.history,
    }

    data = _make_json_serializable(data)

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"      Saved JSON: {output_path}")


def save_optimization_csv(result, output_path):
    """
    Save the Pareto front to CSV (one row per solution, ordered by unit cost).

    Parameters
    ----------
    result : OptimizationResult
        Output from ``run_optimization()``.
    output_path : str or Path
        Destination CSV file path.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = list(result.gene_names) + [
        "unit_cost_gbp_per_mwh",
        "annual_energy_gwh",
        "levelized_cost_gbp_per_mwh",
        "energy_ci_low_gwh",
        "energy_ci_high_gwh",
    ]

    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()

        for solution in result.pareto_front:
            row = solution.to_dict(result.gene_names)
            writer.writerow({k: f"{v:.6g}" for k, v in row.items()})

    print(f"      Saved CSV:  {output_path}")


def save_optimization_results(result, output_dir, prefix="lagoon", sim_config=None,
                              optimizer_config=None):
    """
    Save both JSON and CSV optimization results.

    Files are written to ``output_dir``:

    - ``<prefix>_optimization_results.json``
    - ``<prefix>_pareto_front.csv``

    Returns
    -------
    (json_path, csv_path)
    """
    output_dir = Path(output_dir)
    json_path = output_dir / f"{prefix}_optimization_results.json"
    csv_path = output_dir / f"{prefix}_pareto_front.csv"

    save_optimization_json(result, json_path, sim_config, optimizer_config)
    save_optimization_csv(result, csv_path)
    return json_path, csv_path

"""
Hydraulic Functions
===================

Flow and power through the lagoon's turbines and sluices.

Includes:
    - Orifice flow Q = Cd × A × √(2 g h)
    - Turbine power P = η ρ g Q h, throttled at installed capacity
    - Orientation factors for ebb and flood flow
    - Level change of the basin for a given flow

All functions are vectorised and work on scalars or numpy arrays.
"""

import numpy as np

from ..config import GRAVITY, SEAWATER_DENSITY, WATTS_TO_MW


def orifice_flow(effective_area_m2, head_m):
    """
    Discharge through an orifice.

    Args:
        effective_area_m2: Discharge coefficient × flow area (m²)
        head_m: Water level difference across the structure (m, >= 0)

    Returns:
        Flow rate in m³/s
    """
    head = np.maximum(np.asarray(head_m, dtype=float), 0.0)
    return effective_area_m2 * np.sqrt(2.0 * GRAVITY * head)


def turbine_power_mw(flow_m3s, head_m, efficiency, capacity_mw):
    """
    Electrical power for a turbine flow, throttled at installed capacity.

    When the hydraulic power exceeds capacity the turbines are throttled:
    flow is reduced in proportion so the basin drains no faster than the
    generated power implies.

    Args:
        flow_m3s: Unthrottled turbine flow (m³/s)
        head_m: Operating head (m)
        efficiency: Water-to-wire efficiency (0-1)
        capacity_mw: Installed capacity (MW)

    Returns:
        (power_mw, flow_m3s) after throttling
    """
    flow = np.asarray(flow_m3s, dtype=float)
    power = efficiency * SEAWATER_DENSITY * GRAVITY * flow * head_m * WATTS_TO_MW
    throttle = np.where(power > capacity_mw, capacity_mw / np.maximum(power, 1e-12), 1.0)
    return power * throttle, flow * throttle


def orientation_factors(angle_deg, skew_deg):
    """
    Fraction of the turbine discharge available on ebb and on flood.

    Ebb and flood currents approach the powerhouse along axes ``skew_deg``
    either side of the basin axis. Turning the turbines by ``angle_deg``
    towards the ebb axis favours ebb generation at the expense of flood.

    Args:
        angle_deg: Turbine orientation relative to the basin axis (degrees)
        skew_deg: Half-angle between ebb and flood approach axes (degrees)

    Returns:
        (ebb_factor, flood_factor), each in [0, 1]
    """
    angle = np.asarray(angle_deg, dtype=float)
    ebb = np.cos(np.radians(angle - skew_deg))
    flood = np.cos(np.radians(angle + skew_deg))
    return np.clip(ebb, 0.0, 1.0), np.clip(flood, 0.0, 1.0)


def level_change(flow_m3s, dt_seconds, surface_area_m2):
    """Change in basin level (m) for a flow sustained over one time step."""
    return np.asarray(flow_m3s, dtype=float) * dt_seconds / surface_area_m2

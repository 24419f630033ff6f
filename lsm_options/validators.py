# lsm_options/validators.py
"""
Boundary checks shared by the engines.

Configuration problems raise ConfigurationError before any simulation work is
done; non-finite or negative money amounts raise NumericalInstability.
"""

import numpy as np

from .exceptions import ConfigurationError, NumericalInstability


def as_state_array(state_variables):
    """Return the path ensemble as a float array of shape (T+1, N, F)."""
    arr = np.asarray(state_variables, dtype=float)
    if arr.ndim == 2:
        arr = arr[:, :, None]
    if arr.ndim != 3:
        raise ConfigurationError(
            f"state_variables must be 2-D (time x path) or 3-D (time x path x factor), got shape {arr.shape}"
        )
    n_times, n_paths, n_factors = arr.shape
    if n_times < 2:
        raise ConfigurationError("state_variables needs at least two time rows (t=0 and one decision date)")
    if n_paths < 1:
        raise ConfigurationError("state_variables holds no simulated paths")
    if n_factors < 1:
        raise ConfigurationError("state_variables holds no state variable")
    check_finite("state_variables", arr)
    return arr


def as_path_matrix(name, matrix, shape):
    """Return a (T+1, N) float matrix aligned with the path ensemble."""
    arr = np.asarray(matrix, dtype=float)
    if arr.shape != tuple(shape):
        raise ConfigurationError(f"{name} has shape {arr.shape}, expected {tuple(shape)} (time x path)")
    check_finite(name, arr)
    return arr


def as_price_matrix(name, matrix, shape):
    """As as_path_matrix, for prices: every entry must also be non-negative."""
    arr = as_path_matrix(name, matrix, shape)
    if np.any(arr < 0.0):
        raise NumericalInstability(f"{name} contains negative prices")
    return arr


def as_capex_schedule(capex, n_times):
    """Scalar or per-time-index CAPEX -> float vector of length n_times."""
    arr = np.asarray(capex, dtype=float)
    if arr.ndim == 0:
        arr = np.full(n_times, float(arr))
    elif arr.ndim != 1 or arr.shape[0] != n_times:
        raise ConfigurationError(f"CAPEX must be a scalar or a vector of length {n_times}, got shape {arr.shape}")
    check_finite("CAPEX", arr)
    if np.any(arr < 0.0):
        raise NumericalInstability("CAPEX must be non-negative at every time index")
    return arr


def check_dt(dt):
    dt = float(dt)
    if not np.isfinite(dt) or dt <= 0.0:
        raise ConfigurationError(f"dt must be a positive finite number, got {dt}")
    return dt


def check_rate(rf):
    rf = float(rf)
    if not np.isfinite(rf):
        raise NumericalInstability(f"risk-free rate must be finite, got {rf}")
    return rf


def check_construction(construction):
    if int(construction) != construction or construction < 0:
        raise ConfigurationError(f"construction must be a non-negative integer number of time steps, got {construction}")
    return int(construction)


def check_finite(name, arr):
    if not np.all(np.isfinite(arr)):
        raise NumericalInstability(f"{name} contains non-finite values")


def check_outputs(**values):
    """Post-pass check on aggregate outputs."""
    bad = [k for k, v in values.items() if not np.isfinite(v)]
    if bad:
        raise NumericalInstability(f"valuation produced non-finite outputs: {', '.join(bad)}")

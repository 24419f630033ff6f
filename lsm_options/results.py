# lsm_options/results.py
"""
Result containers returned by the valuation engines.

Scalar fields are collected by summary() into a pandas Series for reporting;
per-time sequences stay numpy arrays, per-path traces are only filled when
requested (verbose / save_states).
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd


class _ResultMixin:

    def as_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def summary(self) -> pd.Series:
        """Scalar fields only."""
        scalars = {k: v for k, v in self.as_dict().items() if isinstance(v, (int, float)) and not isinstance(v, bool)}
        return pd.Series(scalars, name=type(self).__name__)


@dataclass(frozen=True)
class AmericanOptionResult(_ResultMixin):
    value: float
    standard_error: float
    expected_timing: float
    expected_timing_se: float
    exercise_probability: np.ndarray
    cumulative_exercise_probability: np.ndarray
    n_paths: int
    n_steps: int
    # verbose diagnostics
    exercise_time: Optional[np.ndarray] = None
    decisions: Optional[np.ndarray] = None
    cash_flows: Optional[np.ndarray] = None
    coefficients: Optional[list] = None


@dataclass(frozen=True)
class RealOptionResult(_ResultMixin):
    ROV: float
    NPV: float
    WOV: float
    ROV_se: float
    NPV_se: float
    WOV_se: float
    expected_timing: float
    expected_timing_se: float
    investment_probability: np.ndarray
    cumulative_investment_probability: np.ndarray
    n_paths: int
    n_steps: int
    # verbose diagnostics
    investment_time: Optional[np.ndarray] = None
    cash_flows: Optional[np.ndarray] = None


@dataclass(frozen=True)
class OperationalFlexibilityResult(_ResultMixin):
    ROV: float
    NPV: float
    WOV: float
    ROV_se: float
    NPV_se: float
    WOV_se: float
    expected_timing: float
    expected_timing_se: float
    investment_probability: np.ndarray
    cumulative_investment_probability: np.ndarray
    state_counts: pd.DataFrame
    state_proportions: pd.DataFrame
    n_paths: int
    n_steps: int
    degenerate_cells: int = 0
    # save_states diagnostics
    states: Optional[np.ndarray] = None
    cash_flows: Optional[np.ndarray] = None


def timing_statistics(event_time, dt):
    """
    Mean and standard error of the event time (years) over paths where the event
    happened (event_time >= 0). NaN when no path, SE NaN with a single path.
    """
    hit = event_time >= 0
    n_hit = int(hit.sum())
    if n_hit == 0:
        return float('nan'), float('nan')
    years = event_time[hit] * dt
    mean = float(np.mean(years))
    se = float(np.std(years, ddof=1) / np.sqrt(n_hit)) if n_hit > 1 else float('nan')
    return mean, se


def event_probabilities(event_time, n_times):
    """Per-time-index and cumulative proportion of paths whose event happened at t."""
    n_paths = event_time.shape[0]
    counts = np.bincount(event_time[event_time >= 0], minlength=n_times)[:n_times]
    prob = counts / float(n_paths)
    return prob, np.minimum(np.cumsum(prob), 1.0)


def mean_and_se(samples):
    samples = np.asarray(samples, dtype=float)
    n = samples.shape[0]
    mean = float(np.mean(samples))
    se = float(np.std(samples, ddof=1) / np.sqrt(n)) if n > 1 else 0.0
    return mean, se

# lsm_options/regression.py
"""
Cross-sectional least-squares regression of discounted realised values on a
basis matrix, restricted to an eligibility mask.

The basis carries its own intercept (the leading order-0 column); no column is
added here, so a degree-0 basis gives an intercept-less fit on the raw values.
Columns that are constant on the eligible set all span that one intercept: the
first non-zero one is kept, the others (and all-zero columns) are dropped and
get a zero coefficient.

fit_continuation() always returns a RegressionFit. When fewer than two paths are
eligible or the remaining basis is rank-deficient on them, the fit is flagged
degenerate and its fitted values are zero, so the caller falls back on immediate
payoffs.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .exceptions import DegenerateRegressionCondition

logger = logging.getLogger(__name__)

# relative spread under which a regressor is treated as constant on the eligible set
_CONSTANT_TOL = 1e-12


@dataclass(frozen=True)
class RegressionFit:
    fitted: np.ndarray
    coefficients: Optional[np.ndarray] = None
    degenerate: bool = False
    reason: str = ""
    n_eligible: int = 0

    @classmethod
    def fallback(cls, n_paths, reason, n_eligible=0):
        return cls(
            fitted=np.zeros(int(n_paths)),
            coefficients=None,
            degenerate=True,
            reason=reason,
            n_eligible=int(n_eligible),
        )


def _eligible_mask(eligible, n_paths):
    if eligible is None:
        return np.ones(n_paths, dtype=bool)
    mask = np.asarray(eligible, dtype=bool)
    if mask.shape != (n_paths,):
        raise ValueError(f"eligibility mask shape {mask.shape} does not match {n_paths} paths")
    return mask


def _design(Xe):
    """
    Pick the usable columns and their affine rescaling on the eligible rows.

    Returns (cols, offset, scale, intercept) where intercept is the position in
    cols of the kept constant column, or None.
    """
    center = Xe.mean(axis=0)
    spread = Xe.std(axis=0)
    constant = spread <= _CONSTANT_TOL * np.maximum(1.0, np.abs(center))
    nonzero_constant = np.flatnonzero(constant & (np.abs(center) > _CONSTANT_TOL))

    keep = ~constant
    if nonzero_constant.size:
        keep[nonzero_constant[0]] = True
    cols = np.flatnonzero(keep)
    if cols.size == 0:
        raise DegenerateRegressionCondition("no regressor varies or carries a constant on the eligible set")

    if nonzero_constant.size:
        # with an intercept present, centring the other columns leaves the span unchanged
        intercept = int(np.flatnonzero(cols == nonzero_constant[0])[0])
        offset = np.where(constant[cols], 0.0, center[cols])
        scale = np.where(constant[cols], center[cols], spread[cols])
    else:
        intercept = None
        offset = np.zeros(cols.size)
        scale = np.sqrt(np.mean(Xe[:, cols] ** 2, axis=0))
    return cols, offset, scale, intercept


def _solve(X, y, mask):
    n_eligible = int(mask.sum())
    if n_eligible == 0:
        raise DegenerateRegressionCondition("no eligible paths")
    if n_eligible < 2:
        raise DegenerateRegressionCondition("a single eligible path")

    cols, offset, scale, intercept = _design(X[mask])
    if n_eligible < cols.size:
        raise DegenerateRegressionCondition(
            f"{n_eligible} eligible paths for {cols.size} parameters"
        )
    Z = (X[:, cols] - offset) / scale
    beta, _, rank, _ = np.linalg.lstsq(Z[mask], y[mask], rcond=None)
    if rank < cols.size:
        raise DegenerateRegressionCondition(f"rank-deficient basis (rank {rank} < {cols.size})")
    return Z @ beta, _raw_coefficients(X.shape[1], cols, offset, scale, intercept, beta)


def _raw_coefficients(n_columns, cols, offset, scale, intercept, beta):
    """Coefficients on the raw basis columns; dropped columns get zero."""
    slopes = beta / scale
    coefficients = np.zeros(n_columns)
    coefficients[cols] = slopes
    if intercept is not None:
        # the centring shift is absorbed by the constant column (raw value = scale[intercept])
        coefficients[cols[intercept]] -= np.sum(slopes * offset) / scale[intercept]
    return coefficients


def fit_continuation(basis, target, eligible=None):
    """
    OLS fit of target on the basis columns over the eligible paths, predicted
    for all paths.

    Returns RegressionFit with one coefficient per basis column.
    """
    X = np.asarray(basis, dtype=float)
    y = np.asarray(target, dtype=float)
    n_paths = y.shape[0]
    if X.ndim != 2 or X.shape[0] != n_paths:
        raise ValueError(f"basis shape {X.shape} does not match target length {n_paths}")
    mask = _eligible_mask(eligible, n_paths)

    try:
        fitted, coefficients = _solve(X, y, mask)
    except DegenerateRegressionCondition as exc:
        logger.debug("degenerate regression, using zero continuation value: %s", exc)
        return RegressionFit.fallback(n_paths, str(exc), n_eligible=mask.sum())

    return RegressionFit(
        fitted=fitted,
        coefficients=coefficients,
        degenerate=False,
        reason="",
        n_eligible=int(mask.sum()),
    )


def expected_value(target, eligible=None):
    """Intercept-only estimate (sample mean), used where every path shares one state."""
    y = np.asarray(target, dtype=float)
    mask = _eligible_mask(eligible, y.shape[0])
    if not mask.any():
        return 0.0
    return float(np.mean(y[mask]))

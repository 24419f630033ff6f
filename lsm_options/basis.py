# lsm_options/basis.py
"""
Regression basis functions for LSM continuation values.

Functions:
- build_basis(values, family, degree, cross_product, jacobi_alpha, jacobi_beta)
- basis_width(n_factors, degree, cross_product)

The order-0 term of the family is shared by every factor, so it is emitted once,
as the leading column, and carries the regression intercept. Then, for each
state variable, the polynomial terms of orders 1..degree follow. With degree 0
only the raw values are emitted (no constant column), which makes the
regression intercept-less. Pairwise products of the raw state variables are
appended when cross_product is set and there is more than one factor.
"""

from itertools import combinations

import numpy as np
from scipy import special

from .exceptions import ConfigurationError


def _power(n, x, alpha, beta):
    return x ** n


POLYNOMIAL_FAMILIES = {
    'power': _power,
    'laguerre': lambda n, x, a, b: special.eval_laguerre(n, x),
    'legendre': lambda n, x, a, b: special.eval_legendre(n, x),
    'chebyshev': lambda n, x, a, b: special.eval_chebyt(n, x),
    'hermite': lambda n, x, a, b: special.eval_hermite(n, x),
    'jacobi': lambda n, x, a, b: special.eval_jacobi(n, a, b, x),
}


def basis_width(n_factors, degree, cross_product=True):
    """Number of columns build_basis produces for this configuration."""
    n_factors = int(n_factors)
    degree = int(degree)
    width = n_factors * max(degree, 1)
    if degree > 0:
        width += 1
    if cross_product and n_factors > 1:
        width += n_factors * (n_factors - 1) // 2
    return width


def build_basis(values, family='power', degree=2, cross_product=True, jacobi_alpha=1.0, jacobi_beta=1.0):
    """
    Build the path x K design matrix for one time slice.

    values: array (n_paths,) for a single state variable or (n_paths, n_factors).
    """
    key = str(family).strip().lower()
    if key not in POLYNOMIAL_FAMILIES:
        raise ConfigurationError(
            f"Unknown polynomial family '{family}'. Available: {sorted(POLYNOMIAL_FAMILIES)}"
        )
    if int(degree) != degree or degree < 0:
        raise ConfigurationError(f"degree must be a non-negative integer, got {degree}")
    degree = int(degree)

    x = np.asarray(values, dtype=float)
    if x.ndim == 1:
        x = x[:, None]
    if x.ndim != 2:
        raise ConfigurationError(f"basis values must be 1-D or 2-D, got shape {x.shape}")
    n_paths, n_factors = x.shape
    if n_factors == 0:
        raise ConfigurationError("at least one state variable is required to build a basis")

    poly = POLYNOMIAL_FAMILIES[key]
    cols = []
    if degree > 0:
        # order-0 term of the family (1 for every supported family)
        cols.append(poly(0, x[:, 0], jacobi_alpha, jacobi_beta))
    for f in range(n_factors):
        xf = x[:, f]
        if degree == 0:
            cols.append(xf)
            continue
        for n in range(1, degree + 1):
            cols.append(poly(n, xf, jacobi_alpha, jacobi_beta))

    if cross_product and n_factors > 1:
        for i, j in combinations(range(n_factors), 2):
            cols.append(x[:, i] * x[:, j])

    return np.column_stack(cols) if n_paths else np.empty((0, len(cols)))

# lsm_options/config.py
"""
Configuration for the LSM engines.

Defaults can be overridden through the environment:
- LSM_OPTIONS_BASIS          polynomial family (power, laguerre, legendre, chebyshev, hermite, jacobi)
- LSM_OPTIONS_DEGREE         maximum polynomial degree
- LSM_OPTIONS_CROSS_PRODUCT  include pairwise cross products of factors (true/false)
- LSM_OPTIONS_LOG_LEVEL      level used by configure_logging()
"""

import os
import logging
import math
from dataclasses import dataclass
from typing import Optional

from .basis import POLYNOMIAL_FAMILIES, build_basis, basis_width
from .exceptions import ConfigurationError


def _env_flag(name, default):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name, default):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


DEFAULT_BASIS_FAMILY = os.environ.get("LSM_OPTIONS_BASIS", "power").strip().lower()
DEFAULT_BASIS_DEGREE = _env_int("LSM_OPTIONS_DEGREE", 2)
DEFAULT_CROSS_PRODUCT = _env_flag("LSM_OPTIONS_CROSS_PRODUCT", True)
LOG_LEVEL = os.environ.get("LSM_OPTIONS_LOG_LEVEL", "WARNING").strip().upper()


def configure_logging(level=None):
    """Attach a basic stream handler for scripts; library code only uses getLogger."""
    level = level or LOG_LEVEL
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@dataclass(frozen=True)
class BasisConfig:
    family: str = DEFAULT_BASIS_FAMILY
    degree: int = DEFAULT_BASIS_DEGREE
    cross_product: bool = DEFAULT_CROSS_PRODUCT
    # only used by the jacobi family
    jacobi_alpha: float = 1.0
    jacobi_beta: float = 1.0

    def validate(self):
        if str(self.family).strip().lower() not in POLYNOMIAL_FAMILIES:
            raise ConfigurationError(
                f"Unknown polynomial family '{self.family}'. Available: {sorted(POLYNOMIAL_FAMILIES)}"
            )
        if int(self.degree) != self.degree or self.degree < 0:
            raise ConfigurationError(f"degree must be a non-negative integer, got {self.degree}")
        if self.jacobi_alpha <= -1.0 or self.jacobi_beta <= -1.0:
            raise ConfigurationError("jacobi_alpha and jacobi_beta must be > -1")
        return self

    @classmethod
    def from_options(cls, orthogonal=None, degree=None, cross_product=None, jacobi_alpha=1.0, jacobi_beta=1.0):
        """Keyword form used by the functional entry points; None keeps the module default."""
        return cls(
            family=DEFAULT_BASIS_FAMILY if orthogonal is None else orthogonal,
            degree=DEFAULT_BASIS_DEGREE if degree is None else degree,
            cross_product=DEFAULT_CROSS_PRODUCT if cross_product is None else cross_product,
            jacobi_alpha=jacobi_alpha,
            jacobi_beta=jacobi_beta,
        )

    def width(self, n_factors):
        return basis_width(n_factors, self.degree, self.cross_product)

    def build(self, values):
        return build_basis(
            values,
            family=self.family,
            degree=self.degree,
            cross_product=self.cross_product,
            jacobi_alpha=self.jacobi_alpha,
            jacobi_beta=self.jacobi_beta,
        )


def _disabled(cost):
    return cost is None or math.isinf(cost)


@dataclass(frozen=True)
class SwitchingCosts:
    """
    Costs of operational flexibility. A cost of None (or inf) removes the
    corresponding option from the decision set.

    suspend_capex: one-off cost of moving Operating -> Suspended
    suspend_opex:  cost per time step while suspended
    resume_capex:  one-off cost of moving Suspended -> Operating
    abandon_capex: one-off cost of moving Operating/Suspended -> Abandoned
    """
    suspend_capex: Optional[float] = None
    suspend_opex: Optional[float] = None
    resume_capex: Optional[float] = None
    abandon_capex: Optional[float] = None

    def validate(self):
        for name in ("suspend_capex", "suspend_opex", "resume_capex", "abandon_capex"):
            value = getattr(self, name)
            if value is None:
                continue
            value = float(value)
            if math.isnan(value) or value < 0.0:
                raise ConfigurationError(f"{name} must be a non-negative number or None, got {value}")
        return self

    @property
    def can_suspend(self):
        return not _disabled(self.suspend_capex) and not (
            self.suspend_opex is not None and math.isinf(self.suspend_opex)
        )

    @property
    def can_resume(self):
        return self.can_suspend and not _disabled(self.resume_capex)

    @property
    def can_abandon(self):
        return not _disabled(self.abandon_capex)

    @property
    def any_enabled(self):
        return self.can_suspend or self.can_abandon

    @property
    def opex(self):
        return 0.0 if self.suspend_opex is None else float(self.suspend_opex)

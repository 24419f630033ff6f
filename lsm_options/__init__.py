from .base import OPTION_TYPE, ProjectState, OptionPricingModel
from .config import BasisConfig, SwitchingCosts, configure_logging
from .exceptions import (
    LSMError,
    ConfigurationError,
    DegenerateRegressionCondition,
    NumericalInstability,
)
from .basis import build_basis, basis_width
from .regression import RegressionFit, fit_continuation
from .LongstaffSchwartz import LongstaffSchwartz, lsm_american_option
from .RealOption import LSMRealOption, lsm_real_option, learning_curve_capex
from .OperationalFlexibility import (
    OperationalFlexibility,
    OperatingPolicy,
    ForwardReplay,
    lsm_real_option_of,
    replay_policy,
)
from .results import AmericanOptionResult, RealOptionResult, OperationalFlexibilityResult
from .simulation import simulate_gbm_paths

__all__ = [
    "OPTION_TYPE",
    "ProjectState",
    "OptionPricingModel",
    "BasisConfig",
    "SwitchingCosts",
    "configure_logging",
    "LSMError",
    "ConfigurationError",
    "DegenerateRegressionCondition",
    "NumericalInstability",
    "build_basis",
    "basis_width",
    "RegressionFit",
    "fit_continuation",
    "LongstaffSchwartz",
    "lsm_american_option",
    "LSMRealOption",
    "lsm_real_option",
    "learning_curve_capex",
    "OperationalFlexibility",
    "OperatingPolicy",
    "ForwardReplay",
    "lsm_real_option_of",
    "replay_policy",
    "AmericanOptionResult",
    "RealOptionResult",
    "OperationalFlexibilityResult",
    "simulate_gbm_paths",
]

# lsm_options/exceptions.py
"""
Error taxonomy for the valuation engines.

- ConfigurationError: bad inputs detected before any backward-pass work.
- DegenerateRegressionCondition: an empty or rank-deficient regression at one
  (time, state) cell. Raised and caught inside the regression estimator, which
  substitutes a zero continuation value; never reaches the caller.
- NumericalInstability: non-finite or negative inputs where they make no sense,
  or non-finite aggregate outputs. Terminal for the valuation call.
"""


class LSMError(Exception):
    """Base class for lsm_options errors."""


class ConfigurationError(LSMError, ValueError):
    pass


class DegenerateRegressionCondition(LSMError):
    pass


class NumericalInstability(LSMError, ArithmeticError):
    pass

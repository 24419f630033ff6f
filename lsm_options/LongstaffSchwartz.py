"""
Longstaff-Schwartz implementation for American option pricing (Monte Carlo / least-squares)
on caller-supplied simulated paths.

The immediate payoff is max(U - K, 0) for calls and max(K - U, 0) for puts, where U is the
caller's underlying value matrix (e.g. the price, or the max of two assets). Exercise is
possible at every time index 1..T; t=0 is the valuation date and only discounts.
"""

import logging

import numpy as np

from .base import OptionPricingModel, normalize_option_type, step_discount_factor
from .config import BasisConfig
from .regression import fit_continuation
from .results import AmericanOptionResult, event_probabilities, mean_and_se, timing_statistics
from .validators import as_price_matrix, as_state_array, check_dt, check_outputs, check_rate

logger = logging.getLogger(__name__)


class LongstaffSchwartz(OptionPricingModel):
    """
    Longstaff-Schwartz pricing engine.

    Parameters:
    - state_variables: simulated paths, (T+1, N) or (T+1, N, F); row 0 is t=0
    - payoff: underlying value matrix (T+1, N) the strike is applied to
    - strike: strike K
    - rf: risk-free rate (annual, continuous)
    - dt: time step in years
    - basis: BasisConfig for the continuation value regression
    """

    def __init__(self, state_variables, payoff, strike, rf, dt, basis=None):
        self.states = as_state_array(state_variables)
        self.n_times, self.n_paths, self.n_factors = self.states.shape
        self.n_steps = self.n_times - 1
        self.underlying = as_price_matrix("payoff", payoff, (self.n_times, self.n_paths))
        self.K = float(strike)
        self.r = check_rate(rf)
        self.dt = check_dt(dt)
        self.basis = (basis or BasisConfig()).validate()

    def _intrinsic(self, option_type):
        if option_type == 'call':
            return np.maximum(self.underlying - self.K, 0.0)
        else:
            return np.maximum(self.K - self.underlying, 0.0)

    def price(self, option_type='put', verbose=False):
        """
        Run LSM and return an AmericanOptionResult (value, standard error, exercise timing).
        """
        option_type = normalize_option_type(option_type)
        immediate = self._intrinsic(option_type)
        steps = self.n_steps
        df = step_discount_factor(self.r, self.dt)

        # each path holds one cash flow: immediate[exercise_time] (or nothing, -1)
        exercise_time = np.full(self.n_paths, -1, dtype=np.int64)
        cashflow = np.zeros(self.n_paths)

        ex = immediate[steps] > 0
        exercise_time[ex] = steps
        cashflow[ex] = immediate[steps, ex]

        # realised future cash flow discounted to the current step
        future = cashflow.copy()
        coefficients = [None] * (steps + 1)
        degenerate = 0
        for t in range(steps - 1, 0, -1):  # backwards in time, exclude t=0 (valuation date)
            future = future * df
            immediate_ex = immediate[t]
            itm = immediate_ex > 0
            if not np.any(itm):
                continue

            X = self.basis.build(self.states[t])
            fit = fit_continuation(X, future, itm)
            degenerate += fit.degenerate
            coefficients[t] = fit.coefficients

            exercise_now = itm & (immediate_ex >= fit.fitted)
            exercise_time[exercise_now] = t
            cashflow[exercise_now] = immediate_ex[exercise_now]
            future[exercise_now] = immediate_ex[exercise_now]

        exercised = exercise_time >= 0
        discounted = np.where(exercised, cashflow * df ** np.maximum(exercise_time, 0), 0.0)
        value, se = mean_and_se(discounted)
        expected_timing, expected_timing_se = timing_statistics(exercise_time, self.dt)
        prob, cum_prob = event_probabilities(exercise_time, self.n_times)
        check_outputs(value=value, standard_error=se)
        logger.info(
            "LSM American %s: K=%.4f value=%.6f se=%.6f paths=%d steps=%d degenerate_steps=%d",
            option_type, self.K, value, se, self.n_paths, steps, degenerate,
        )

        trace = {}
        if verbose:
            decisions = np.zeros((self.n_times, self.n_paths), dtype=bool)
            cash_flows = np.zeros((self.n_times, self.n_paths))
            idx = np.nonzero(exercised)[0]
            decisions[exercise_time[idx], idx] = True
            cash_flows[exercise_time[idx], idx] = cashflow[idx]
            trace = dict(
                exercise_time=exercise_time,
                decisions=decisions,
                cash_flows=cash_flows,
                coefficients=coefficients,
            )

        return AmericanOptionResult(
            value=value,
            standard_error=se,
            expected_timing=expected_timing,
            expected_timing_se=expected_timing_se,
            exercise_probability=prob,
            cumulative_exercise_probability=cum_prob,
            n_paths=self.n_paths,
            n_steps=steps,
            **trace,
        )

    def _calculate_call_option_price(self):
        return self.price('call').value

    def _calculate_put_option_price(self):
        return self.price('put').value


def lsm_american_option(state_variables, payoff, strike, dt, rf, call=False, orthogonal=None,
                        degree=None, cross_product=None, verbose=False, jacobi_alpha=1.0, jacobi_beta=1.0):
    """Functional entry point; unspecified basis settings fall back to BasisConfig defaults."""
    basis = BasisConfig.from_options(orthogonal, degree, cross_product, jacobi_alpha, jacobi_beta)
    model = LongstaffSchwartz(state_variables, payoff, strike, rf, dt, basis=basis)
    return model.price('call' if call else 'put', verbose=verbose)

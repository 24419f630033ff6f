"""
Least-squares Monte Carlo valuation of the option to invest in a capital project.

At each decision date a path that has not invested compares the expected value of
investing now (discounted net cash flows from the end of construction onward, less the
CAPEX applicable at that date) with the expected value of waiting. Both expectations are
cross-sectional regressions on the basis built from the state variables; the realised
value of a path follows the pathwise cash flows of the decision it takes.

Outputs ROV (optimal investment timing), NPV (investment forced at t=0) and WOV = ROV - NPV.
"""

import logging

import numpy as np

from .base import step_discount_factor
from .config import BasisConfig
from .regression import expected_value, fit_continuation
from .results import RealOptionResult, event_probabilities, mean_and_se, timing_statistics
from .validators import (as_capex_schedule, as_path_matrix, as_state_array, check_construction,
                         check_dt, check_outputs, check_rate)

logger = logging.getLogger(__name__)


def learning_curve_capex(capex0, learning_rate, n_steps, dt):
    """CAPEX schedule decaying exponentially with a learning rate: capex0 * exp(-lr * t * dt)."""
    t = np.arange(int(n_steps) + 1)
    return float(capex0) * np.exp(-float(learning_rate) * t * float(dt))


def accumulate_ncf(ncf, df):
    """
    Value at each time index of the net cash flows from that index onward:
    A[t] = NCF[t] + df * A[t+1], A[T+1] = 0. Returns an array of shape (T+2, N).
    """
    n_times, n_paths = ncf.shape
    acc = np.zeros((n_times + 1, n_paths))
    for t in range(n_times - 1, -1, -1):
        acc[t] = ncf[t] + df * acc[t + 1]
    return acc


def investment_present_value(ncf, df, construction):
    """PV[t]: NCF from t + construction onward, discounted to t (zero past the horizon)."""
    n_times, n_paths = ncf.shape
    acc = accumulate_ncf(ncf, df)
    pv = np.zeros((n_times, n_paths))
    lag_df = df ** construction
    for t in range(n_times):
        if t + construction < n_times:
            pv[t] = lag_df * acc[t + construction]
    return pv


class LSMRealOption:
    """
    Real option (investment timing) engine.

    Parameters:
    - state_variables: simulated paths, (T+1, N) or (T+1, N, F)
    - ncf: net cash flow per time step of an operating project, (T+1, N)
    - capex: scalar or length T+1 investment cost schedule
    - rf: risk-free rate (annual, continuous)
    - dt: time step in years
    - construction: construction lag in time steps before NCF accrues
    - basis: BasisConfig for the regressions
    """

    def __init__(self, state_variables, ncf, capex, rf, dt, construction=0, basis=None):
        self.states = as_state_array(state_variables)
        self.n_times, self.n_paths, self.n_factors = self.states.shape
        self.n_steps = self.n_times - 1
        self.ncf = as_path_matrix("NCF", ncf, (self.n_times, self.n_paths))
        self.capex = as_capex_schedule(capex, self.n_times)
        self.r = check_rate(rf)
        self.dt = check_dt(dt)
        self.construction = check_construction(construction)
        self.basis = (basis or BasisConfig()).validate()

    def value(self, verbose=False):
        steps = self.n_steps
        df = step_discount_factor(self.r, self.dt)
        pv = investment_present_value(self.ncf, df, self.construction)
        all_paths = np.ones(self.n_paths, dtype=bool)

        invest_time = np.full(self.n_paths, -1, dtype=np.int64)
        # realised value at t of a path that has not invested before t
        waiting = np.zeros(self.n_paths)
        degenerate = 0
        for t in range(steps, 0, -1):
            X = self.basis.build(self.states[t])
            if t == steps:
                continuation = np.zeros(self.n_paths)
                target = waiting
            else:
                target = df * waiting
                fit = fit_continuation(X, target, all_paths)
                degenerate += fit.degenerate
                continuation = np.maximum(fit.fitted, 0.0)

            fit_pv = fit_continuation(X, pv[t], all_paths)
            degenerate += fit_pv.degenerate
            invest_value = fit_pv.fitted - self.capex[t]

            invest = invest_value > continuation
            waiting = np.where(invest, pv[t] - self.capex[t], target)
            invest_time[invest] = t

        # valuation date: one common state, expectations are sample means
        target = df * waiting
        wait_value = expected_value(target, all_paths)
        invest_now = pv[0] - self.capex[0]
        if expected_value(pv[0], all_paths) - self.capex[0] > wait_value:
            waiting = invest_now
            invest_time[:] = 0
        else:
            waiting = target

        rov, rov_se = mean_and_se(waiting)
        npv, npv_se = mean_and_se(invest_now)
        wov, wov_se = mean_and_se(waiting - invest_now)
        expected_timing, expected_timing_se = timing_statistics(invest_time, self.dt)
        prob, cum_prob = event_probabilities(invest_time, self.n_times)
        check_outputs(ROV=rov, NPV=npv, WOV=wov)
        logger.info(
            "LSM real option: ROV=%.6f NPV=%.6f WOV=%.6f paths=%d steps=%d degenerate_cells=%d",
            rov, npv, wov, self.n_paths, steps, degenerate,
        )

        trace = {}
        if verbose:
            trace = dict(
                investment_time=invest_time,
                cash_flows=self._cash_flow_trace(invest_time),
            )

        return RealOptionResult(
            ROV=rov,
            NPV=npv,
            WOV=wov,
            ROV_se=rov_se,
            NPV_se=npv_se,
            WOV_se=wov_se,
            expected_timing=expected_timing,
            expected_timing_se=expected_timing_se,
            investment_probability=prob,
            cumulative_investment_probability=cum_prob,
            n_paths=self.n_paths,
            n_steps=steps,
            **trace,
        )

    def _cash_flow_trace(self, invest_time):
        """Undiscounted cash flow per (time, path): -CAPEX at investment, NCF once construction ends."""
        t_idx = np.arange(self.n_times)[:, None]
        invested = invest_time >= 0
        paying = invested[None, :] & (t_idx == invest_time[None, :])
        producing = invested[None, :] & (t_idx >= (invest_time + self.construction)[None, :])
        cash_flows = np.where(producing, self.ncf, 0.0)
        cash_flows = cash_flows - np.where(paying, self.capex[:, None], 0.0)
        return cash_flows


def lsm_real_option(state_variables, ncf, capex, dt, rf, construction=0, orthogonal=None,
                    degree=None, cross_product=None, verbose=False, jacobi_alpha=1.0, jacobi_beta=1.0):
    """Functional entry point; unspecified basis settings fall back to BasisConfig defaults."""
    basis = BasisConfig.from_options(orthogonal, degree, cross_product, jacobi_alpha, jacobi_beta)
    model = LSMRealOption(state_variables, ncf, capex, rf, dt, construction=construction, basis=basis)
    return model.value(verbose=verbose)

"""
Least-squares Monte Carlo valuation of a capital project with operational flexibility.

Each simulated path occupies one of four states: UNINVESTED, OPERATING, SUSPENDED,
ABANDONED (absorbing). Valuation runs in two stages:

1. backward_pass(): for t = T..0 and every live state, regress the discounted realised
   value of each feasible successor state on the basis, choose per (state, path) the
   transition with the highest estimated value, and propagate the realised value of that
   choice. The result is an immutable OperatingPolicy (next state per time, state, path).
2. replay_policy(): walk t = 0..T applying the policy to each path's actual state, so that
   every path gets exactly one cash flow per time index and a causal state trajectory.

Timing convention: the decision at t picks the state for step t; switching costs are paid
at t and the chosen state's cash flow (NCF when operating, -suspend_opex when suspended)
accrues at t. Investing at t starts construction; NCF and further switching begin at
t + construction. Construction is reported as OPERATING.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .base import STATE_LABELS, ProjectState, step_discount_factor
from .config import BasisConfig, SwitchingCosts
from .regression import expected_value, fit_continuation
from .results import OperationalFlexibilityResult, event_probabilities, mean_and_se, timing_statistics
from .validators import (as_capex_schedule, as_path_matrix, as_state_array, check_construction,
                         check_dt, check_outputs, check_rate)

logger = logging.getLogger(__name__)

UNINVESTED = ProjectState.UNINVESTED
OPERATING = ProjectState.OPERATING
SUSPENDED = ProjectState.SUSPENDED
ABANDONED = ProjectState.ABANDONED


def feasible_transitions(state, costs):
    """Successor states reachable from `state` (first entry = no change). ABANDONED has none."""
    if state == UNINVESTED:
        return (UNINVESTED, OPERATING)
    if state == ABANDONED:
        return ()
    if state == OPERATING:
        succ = [OPERATING]
        if costs.can_suspend:
            succ.append(SUSPENDED)
    else:
        succ = [SUSPENDED]
        if costs.can_resume:
            succ.append(OPERATING)
    if costs.can_abandon:
        succ.append(ABANDONED)
    return tuple(succ)


def choose_transitions(candidates, n_paths):
    """
    Pick, per path, the candidate with the highest estimated value.

    candidates: sequence of (next_state, estimated_value, realised_value); the first one is
    the no-change option and wins ties. Values may be scalars or (n_paths,) arrays.
    Returns (next_state (n_paths,) int8, realised_value (n_paths,)).
    """
    codes = np.array([int(c[0]) for c in candidates], dtype=np.int8)
    est = np.vstack([np.broadcast_to(np.asarray(c[1], dtype=float), (n_paths,)) for c in candidates])
    real = np.vstack([np.broadcast_to(np.asarray(c[2], dtype=float), (n_paths,)) for c in candidates])
    pick = np.argmax(est, axis=0)
    cols = np.arange(n_paths)
    return codes[pick], real[pick, cols]


@dataclass(frozen=True)
class OperatingPolicy:
    next_state: np.ndarray          # (T+1, 4, N) int8
    path_values: np.ndarray         # realised value at t=0 of an uninvested path, (N,)
    npv_path_values: np.ndarray     # realised value at t=0 of investing immediately, (N,)
    degenerate_cells: int = 0


@dataclass(frozen=True)
class ForwardReplay:
    states: np.ndarray              # (T+1, N) int8, state after the decision at t
    cash_flows: np.ndarray          # (T+1, N) undiscounted
    investment_time: np.ndarray     # (N,) -1 when never invested


def _cost(value):
    return 0.0 if value is None else float(value)


def replay_policy(policy, ncf, capex, costs, construction):
    """Forward pass: realise each path's state trajectory and cash flows under `policy`."""
    n_times, n_paths = ncf.shape
    cols = np.arange(n_paths)
    suspend_capex = _cost(costs.suspend_capex)
    resume_capex = _cost(costs.resume_capex)
    abandon_capex = _cost(costs.abandon_capex)
    opex = costs.opex

    states = np.empty((n_times, n_paths), dtype=np.int8)
    cash_flows = np.zeros((n_times, n_paths))
    current = np.full(n_paths, int(UNINVESTED), dtype=np.int8)
    active_from = np.full(n_paths, n_times, dtype=np.int64)
    investment_time = np.full(n_paths, -1, dtype=np.int64)

    for t in range(n_times):
        cf = cash_flows[t]

        nxt = policy.next_state[t, current, cols]
        invest = (current == UNINVESTED) & (nxt == OPERATING)
        cf[invest] -= capex[t]
        current[invest] = OPERATING
        active_from[invest] = t + construction
        investment_time[invest] = t

        active = ((current == OPERATING) | (current == SUSPENDED)) & (active_from <= t)
        nxt = policy.next_state[t, current, cols]
        cf[active & (current == OPERATING) & (nxt == SUSPENDED)] -= suspend_capex
        cf[active & (current == SUSPENDED) & (nxt == OPERATING)] -= resume_capex
        cf[active & (nxt == ABANDONED)] -= abandon_capex
        operating = active & (nxt == OPERATING)
        cf[operating] += ncf[t, operating]
        cf[active & (nxt == SUSPENDED)] -= opex

        current[active] = nxt[active]
        states[t] = current

    return ForwardReplay(states=states, cash_flows=cash_flows, investment_time=investment_time)


class OperationalFlexibility:
    """
    Real option engine with suspension, resumption and abandonment.

    Parameters:
    - state_variables: simulated paths, (T+1, N) or (T+1, N, F)
    - ncf: net cash flow per time step of an operating project, (T+1, N)
    - capex: scalar or length T+1 investment cost schedule
    - rf: risk-free rate (annual, continuous)
    - dt: time step in years
    - construction: construction lag in time steps
    - costs: SwitchingCosts; flexibility whose cost is None/inf is unavailable
    - basis: BasisConfig for the regressions
    """

    def __init__(self, state_variables, ncf, capex, rf, dt, construction=0, costs=None, basis=None):
        self.states = as_state_array(state_variables)
        self.n_times, self.n_paths, self.n_factors = self.states.shape
        self.n_steps = self.n_times - 1
        self.ncf = as_path_matrix("NCF", ncf, (self.n_times, self.n_paths))
        self.capex = as_capex_schedule(capex, self.n_times)
        self.r = check_rate(rf)
        self.dt = check_dt(dt)
        self.construction = check_construction(construction)
        self.costs = (costs or SwitchingCosts()).validate()
        self.basis = (basis or BasisConfig()).validate()

    # -----------------------
    # Stage 1: backward values
    # -----------------------
    def backward_pass(self):
        n, steps, lag = self.n_paths, self.n_steps, self.construction
        costs = self.costs
        df = step_discount_factor(self.r, self.dt)
        lag_df = df ** lag
        suspend_capex = _cost(costs.suspend_capex)
        resume_capex = _cost(costs.resume_capex)
        abandon_capex = _cost(costs.abandon_capex)
        opex = costs.opex
        live = np.ones(n, dtype=bool)

        next_state = np.empty((self.n_times, len(ProjectState), n), dtype=np.int8)
        for s in ProjectState:
            next_state[:, s, :] = s

        # realised values before the decision at t; row T+1 is past the horizon
        w_operating = np.zeros((self.n_times + 1, n))
        w_suspended = np.zeros(n)
        w_uninvested = np.zeros(n)
        degenerate = 0

        def estimate(X, target, t):
            nonlocal degenerate
            if t == 0:
                return expected_value(target, live)
            fit = fit_continuation(X, target, live)
            if fit.degenerate:
                degenerate += 1
                logger.debug("t=%d: zero continuation fallback (%s)", t, fit.reason)
            return fit.fitted

        for t in range(steps, -1, -1):
            X = self.basis.build(self.states[t]) if t > 0 else None
            ncf_t = self.ncf[t]
            last = t == steps
            tgt_operating = df * w_operating[t + 1]
            tgt_suspended = df * w_suspended
            tgt_uninvested = df * w_uninvested

            # operating and suspended first: with no construction lag, investing at t lands in OPERATING at t
            if costs.any_enabled:
                zeros = np.zeros(n)
                c_operating = zeros if last else estimate(X, tgt_operating, t)
                c_suspended = zeros if (last or not costs.can_suspend) else estimate(X, tgt_suspended, t)
                options = {
                    OPERATING: (ncf_t + c_operating, ncf_t + tgt_operating),
                    SUSPENDED: (-opex + c_suspended, -opex + tgt_suspended),
                    ABANDONED: (np.full(n, -abandon_capex), np.full(n, -abandon_capex)),
                }
                switch_in = {SUSPENDED: suspend_capex, OPERATING: resume_capex}

                for origin in (OPERATING, SUSPENDED):
                    if origin == SUSPENDED and not costs.can_suspend:
                        continue
                    candidates = []
                    for succ in feasible_transitions(origin, costs):
                        est, real = options[succ]
                        fee = switch_in.get(succ, 0.0) if succ != origin else 0.0
                        candidates.append((succ, est - fee, real - fee))
                    chosen, realised = choose_transitions(candidates, n)
                    next_state[t, origin] = chosen
                    if origin == OPERATING:
                        w_operating[t] = realised
                    else:
                        w_suspended = realised
            else:
                w_operating[t] = ncf_t + tgt_operating

            # uninvested: wait, or invest and operate from t + construction
            if last:
                c_uninvested = np.zeros(n)
                wait_real = tgt_uninvested
            elif t == 0:
                c_uninvested = expected_value(tgt_uninvested, live)
                wait_real = tgt_uninvested
            else:
                c_uninvested = np.maximum(estimate(X, tgt_uninvested, t), 0.0)
                wait_real = tgt_uninvested

            if t + lag <= steps:
                invest_target = lag_df * w_operating[t + lag]
                invest_est = estimate(X, invest_target, t) - self.capex[t]
            else:
                invest_target = np.zeros(n)
                invest_est = np.zeros(n) - self.capex[t]
            invest_real = invest_target - self.capex[t]

            chosen, realised = choose_transitions(
                [(UNINVESTED, c_uninvested, wait_real), (OPERATING, invest_est, invest_real)], n
            )
            next_state[t, UNINVESTED] = chosen
            w_uninvested = realised
            if t == 0:
                npv_path_values = invest_real

        next_state.setflags(write=False)
        return OperatingPolicy(
            next_state=next_state,
            path_values=w_uninvested,
            npv_path_values=npv_path_values,
            degenerate_cells=degenerate,
        )

    # -----------------------
    # Stage 2: forward replay
    # -----------------------
    def replay(self, policy):
        return replay_policy(policy, self.ncf, self.capex, self.costs, self.construction)

    def value(self, save_states=False):
        policy = self.backward_pass()
        replay = self.replay(policy)

        df = step_discount_factor(self.r, self.dt)
        discount = df ** np.arange(self.n_times)
        path_values = discount @ replay.cash_flows
        rov, rov_se = mean_and_se(path_values)
        npv, npv_se = mean_and_se(policy.npv_path_values)
        wov, wov_se = mean_and_se(path_values - policy.npv_path_values)
        check_outputs(ROV=rov, NPV=npv, WOV=wov)
        logger.debug("backward ROV estimate %.6f, forward replay ROV %.6f", np.mean(policy.path_values), rov)

        counts = np.stack([(replay.states == s).sum(axis=1) for s in ProjectState], axis=1)
        state_counts = pd.DataFrame(counts, columns=STATE_LABELS)
        state_counts.index.name = "time_index"
        state_proportions = state_counts / float(self.n_paths)

        expected_timing, expected_timing_se = timing_statistics(replay.investment_time, self.dt)
        prob, cum_prob = event_probabilities(replay.investment_time, self.n_times)
        logger.info(
            "LSM real option with OF: ROV=%.6f NPV=%.6f WOV=%.6f paths=%d steps=%d degenerate_cells=%d",
            rov, npv, wov, self.n_paths, self.n_steps, policy.degenerate_cells,
        )

        trace = {}
        if save_states:
            trace = dict(states=replay.states, cash_flows=replay.cash_flows)

        return OperationalFlexibilityResult(
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
            state_counts=state_counts,
            state_proportions=state_proportions,
            n_paths=self.n_paths,
            n_steps=self.n_steps,
            degenerate_cells=policy.degenerate_cells,
            **trace,
        )


def lsm_real_option_of(state_variables, ncf, capex, dt, rf, construction=0, orthogonal=None,
                       degree=None, cross_product=None, suspend_capex=None, suspend_opex=None,
                       resume_capex=None, abandon_capex=None, save_states=False, jacobi_alpha=1.0,
                       jacobi_beta=1.0):
    """Functional entry point; unspecified basis settings fall back to BasisConfig defaults."""
    basis = BasisConfig.from_options(orthogonal, degree, cross_product, jacobi_alpha, jacobi_beta)
    costs = SwitchingCosts(
        suspend_capex=suspend_capex,
        suspend_opex=suspend_opex,
        resume_capex=resume_capex,
        abandon_capex=abandon_capex,
    )
    model = OperationalFlexibility(
        state_variables, ncf, capex, rf, dt,
        construction=construction, costs=costs, basis=basis,
    )
    return model.value(save_states=save_states)

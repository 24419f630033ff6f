#lsm_options/tests/test_lsm_sanity.py
import numpy as np
import pytest

from lsm_options import BasisConfig, LongstaffSchwartz, simulate_gbm_paths


def test_lsm_price_between_zero_and_max_payoff():
    S = 100.0
    K = 100.0
    r = 0.01
    sigma = 0.2
    T = 0.25
    # short test paths and low degree for speed
    paths = simulate_gbm_paths(S, r, sigma, T, 30, 2000, seed=42)
    lsm = LongstaffSchwartz(paths, paths, K, r, T / 30, basis=BasisConfig('power', 2, False))
    res = lsm.price('put')
    assert res.value >= 0.0
    assert res.value <= np.max(np.maximum(K - paths, 0.0))
    assert res.standard_error > 0.0


def test_lsm_reproduces_published_put_value():
    # Longstaff & Schwartz (2001), Table 1: S0=36, sigma=0.2, T=1 -> 4.472
    paths = simulate_gbm_paths(36.0, 0.06, 0.2, 1.0, 50, 20000, seed=7, antithetic=True)
    lsm = LongstaffSchwartz(paths, paths, 40.0, 0.06, 1.0 / 50, basis=BasisConfig('laguerre', 3, False))
    res = lsm.price('put')
    assert abs(res.value - 4.472) < 0.1
    assert res.standard_error < 0.05


def test_single_path_exercises_at_first_in_the_money_date():
    # one path leaves every regression degenerate: continuation falls back to zero
    path = np.array([[40.0], [38.0], [39.0], [41.0]])
    r, dt = 0.05, 0.5
    res = LongstaffSchwartz(path, path, 40.0, r, dt).price('put', verbose=True)
    assert res.value == pytest.approx(2.0 * np.exp(-r * dt))
    assert res.exercise_time.tolist() == [1]
    assert res.standard_error == 0.0
    assert np.isnan(res.expected_timing_se)

#lsm_options/tests/test_regression.py
import numpy as np
import pytest

from lsm_options import build_basis, fit_continuation
from lsm_options.regression import RegressionFit, expected_value


def test_exact_polynomial_is_recovered():
    x = np.linspace(0.5, 3.0, 40)
    y = 1.0 + 2.0 * x + 3.0 * x ** 2
    fit = fit_continuation(build_basis(x, degree=2), y)
    assert not fit.degenerate
    assert fit.n_eligible == 40
    np.testing.assert_allclose(fit.fitted, y, rtol=1e-9)
    np.testing.assert_allclose(fit.coefficients, [1.0, 2.0, 3.0], rtol=1e-7)


def test_fit_uses_eligible_paths_but_predicts_all():
    x = np.linspace(1.0, 10.0, 30)
    y = 4.0 - 0.5 * x
    eligible = x < 6.0
    # values outside the eligible set must not influence the fit
    y_noisy = np.where(eligible, y, 1e6)
    fit = fit_continuation(build_basis(x, degree=1), y_noisy, eligible)
    assert fit.n_eligible == int(eligible.sum())
    np.testing.assert_allclose(fit.fitted, y, rtol=1e-9, atol=1e-9)


def test_empty_eligible_set_falls_back_to_zero():
    x = np.linspace(1.0, 2.0, 10)
    fit = fit_continuation(build_basis(x, degree=2), x, np.zeros(10, dtype=bool))
    assert fit.degenerate
    assert fit.coefficients is None
    np.testing.assert_array_equal(fit.fitted, np.zeros(10))


def test_single_eligible_path_falls_back_to_zero():
    x = np.linspace(1.0, 2.0, 10)
    eligible = np.zeros(10, dtype=bool)
    eligible[3] = True
    fit = fit_continuation(build_basis(x, degree=2), 5.0 * x, eligible)
    assert fit.degenerate
    assert fit.n_eligible == 1
    np.testing.assert_array_equal(fit.fitted, np.zeros(10))


def test_fewer_paths_than_parameters_is_degenerate():
    x = np.array([1.0, 2.0, 3.0])
    fit = fit_continuation(build_basis(x, degree=3), x)
    assert fit.degenerate


def test_degree_zero_basis_is_intercept_less():
    x = np.linspace(1.0, 4.0, 25)
    fit = fit_continuation(build_basis(x, degree=0), 3.0 * x)
    assert not fit.degenerate
    assert fit.coefficients.shape == (1,)
    np.testing.assert_allclose(fit.coefficients, [3.0])
    # no intercept: a shifted target is not fitted exactly
    shifted = fit_continuation(build_basis(x, degree=0), 3.0 * x + 5.0)
    assert np.max(np.abs(shifted.fitted - (3.0 * x + 5.0))) > 0.1


def test_constant_column_acts_as_intercept():
    t = np.linspace(0.0, 1.0, 20)
    X = np.column_stack([t, np.full(20, 7.0)])
    fit = fit_continuation(X, 2.0 + 3.0 * t)
    assert not fit.degenerate
    np.testing.assert_allclose(fit.fitted, 2.0 + 3.0 * t, rtol=1e-9)
    np.testing.assert_allclose(fit.coefficients, [3.0, 2.0 / 7.0], rtol=1e-9)


def test_constant_second_factor_is_dropped_not_degenerate():
    x = np.linspace(0.5, 3.0, 40)
    y = 1.0 + 2.0 * x + 3.0 * x ** 2
    rate = np.full(40, 0.04)
    one = fit_continuation(build_basis(x, family='laguerre', degree=2), y)
    two = fit_continuation(
        build_basis(np.column_stack([x, rate]), family='laguerre', degree=2, cross_product=False), y
    )
    assert not two.degenerate
    np.testing.assert_allclose(two.fitted, one.fitted, rtol=1e-9)
    np.testing.assert_allclose(two.fitted, y, rtol=1e-9)
    # the rate terms carry no coefficient
    np.testing.assert_array_equal(two.coefficients[3:], 0.0)


def test_all_zero_basis_is_degenerate():
    fit = fit_continuation(np.zeros((6, 2)), np.arange(6.0))
    assert fit.degenerate
    np.testing.assert_array_equal(fit.fitted, np.zeros(6))


def test_collinear_basis_is_degenerate():
    x = np.linspace(0.0, 1.0, 20)
    X = np.column_stack([x, x])
    fit = fit_continuation(X, x ** 2)
    assert fit.degenerate
    assert "rank" in fit.reason


def test_fallback_constructor():
    fit = RegressionFit.fallback(4, "no eligible paths")
    assert fit.degenerate
    assert fit.fitted.shape == (4,)


def test_mismatched_shapes_raise():
    with pytest.raises(ValueError):
        fit_continuation(np.ones((5, 2)), np.ones(4))
    with pytest.raises(ValueError):
        fit_continuation(np.random.default_rng(0).normal(size=(5, 2)), np.ones(5), np.ones(3, dtype=bool))


def test_expected_value_is_masked_mean():
    y = np.array([1.0, 2.0, 3.0, 10.0])
    assert expected_value(y) == pytest.approx(4.0)
    assert expected_value(y, np.array([True, True, True, False])) == pytest.approx(2.0)
    assert expected_value(y, np.zeros(4, dtype=bool)) == 0.0

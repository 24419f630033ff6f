#lsm_options/tests/test_basis.py
import numpy as np
import pytest

from lsm_options import BasisConfig, ConfigurationError, basis_width, build_basis

x = np.array([0.1, 0.5, 1.3, 2.0, 3.7])


def test_power_basis_columns():
    X = build_basis(x, family='power', degree=3)
    assert X.shape == (5, 4)
    np.testing.assert_allclose(X[:, 0], 1.0)
    np.testing.assert_allclose(X[:, 1], x)
    np.testing.assert_allclose(X[:, 2], x ** 2)
    np.testing.assert_allclose(X[:, 3], x ** 3)


def test_degree_zero_is_raw_value_only():
    X = build_basis(x, family='laguerre', degree=0)
    assert X.shape == (5, 1)
    np.testing.assert_allclose(X[:, 0], x)
    values = np.column_stack([x, 2.0 * x])
    np.testing.assert_allclose(build_basis(values, degree=0, cross_product=False), values)


@pytest.mark.parametrize("family,first,second", [
    ('laguerre', lambda v: 1.0 - v, lambda v: 0.5 * (v ** 2 - 4.0 * v + 2.0)),
    ('hermite', lambda v: 2.0 * v, lambda v: 4.0 * v ** 2 - 2.0),
    ('chebyshev', lambda v: v, lambda v: 2.0 * v ** 2 - 1.0),
    ('legendre', lambda v: v, lambda v: 0.5 * (3.0 * v ** 2 - 1.0)),
])
def test_orthogonal_families_first_two_orders(family, first, second):
    X = build_basis(x, family=family, degree=2)
    np.testing.assert_allclose(X[:, 0], 1.0)
    np.testing.assert_allclose(X[:, 1], first(x))
    np.testing.assert_allclose(X[:, 2], second(x))


def test_jacobi_with_zero_parameters_is_legendre():
    jac = build_basis(x, family='jacobi', degree=3, jacobi_alpha=0.0, jacobi_beta=0.0)
    leg = build_basis(x, family='legendre', degree=3)
    np.testing.assert_allclose(jac, leg)


def test_family_name_is_case_insensitive():
    np.testing.assert_allclose(
        build_basis(x, family='Laguerre', degree=2),
        build_basis(x, family='laguerre', degree=2),
    )


def test_cross_products_appended_for_multiple_factors():
    values = np.column_stack([x, 2.0 * x + 1.0, np.sqrt(x)])
    X = build_basis(values, family='power', degree=2, cross_product=True)
    # shared constant + 3 factors x 2 orders + 3 pairs
    assert X.shape == (5, 10)
    np.testing.assert_allclose(X[:, 7], values[:, 0] * values[:, 1])
    np.testing.assert_allclose(X[:, 8], values[:, 0] * values[:, 2])
    np.testing.assert_allclose(X[:, 9], values[:, 1] * values[:, 2])

    X_no_cross = build_basis(values, family='power', degree=2, cross_product=False)
    assert X_no_cross.shape == (5, 7)


def test_single_factor_ignores_cross_product_flag():
    assert build_basis(x, degree=2, cross_product=True).shape == (5, 3)


@pytest.mark.parametrize("n_factors,degree,cross", [
    (1, 0, True), (1, 3, False), (2, 2, True), (2, 2, False), (4, 1, True), (3, 0, True),
])
def test_basis_width_matches_built_matrix(n_factors, degree, cross):
    values = np.random.default_rng(3).uniform(0.5, 2.0, size=(7, n_factors))
    X = build_basis(values, family='chebyshev', degree=degree, cross_product=cross)
    assert X.shape == (7, basis_width(n_factors, degree, cross))
    assert BasisConfig(family='chebyshev', degree=degree, cross_product=cross).width(n_factors) == X.shape[1]


def test_constant_column_is_emitted_once():
    values = np.random.default_rng(0).uniform(1.0, 3.0, size=(50, 2))
    X = build_basis(values, family='legendre', degree=4, cross_product=True)
    np.testing.assert_allclose(X[:, 0], 1.0)
    assert np.all(X[:, 1:].std(axis=0) > 0)


def test_basis_config_build_delegates():
    cfg = BasisConfig(family='hermite', degree=2, cross_product=False)
    np.testing.assert_allclose(cfg.build(x), build_basis(x, family='hermite', degree=2, cross_product=False))


@pytest.mark.parametrize("kwargs", [
    dict(family='power', degree=-1),
    dict(family='fourier', degree=2),
    dict(family='power', degree=1.5),
])
def test_invalid_configuration_raises(kwargs):
    with pytest.raises(ConfigurationError):
        build_basis(x, **kwargs)
    with pytest.raises(ConfigurationError):
        BasisConfig(**kwargs).validate()


def test_zero_factors_raises():
    with pytest.raises(ConfigurationError):
        build_basis(np.empty((5, 0)), family='power', degree=2)

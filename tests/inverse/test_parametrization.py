import re
from contextlib import nullcontext as does_not_raise

import numpy as np
import pytest
from pyadjadj.inverse import (
    EllipseParametrization,
    ExponentialParametrization,
    IdentityParametrization,
    TanhParametrization,
)
from pyadjadj.inverse.parametrization import Parametrization
from scipy.special import expit

x = np.random.default_rng(2024).uniform(-0.7, 0.7, size=(20, 2))


class WrongJacobianParametrization(IdentityParametrization):
    def _jacobian_vector_product(self, theta, x, cotangent):
        return 2.0 * cotangent


@pytest.mark.parametrize(
    "parametrization, theta",
    [
        (IdentityParametrization(), np.linspace(0.1, 1.0, 20)),
        (ExponentialParametrization(), np.linspace(-1.0, 1.0, 20)),
        (TanhParametrization(), np.linspace(-2.0, 2.0, 20)),
        (EllipseParametrization(), np.array([0.0, 0.0, 0.5, 0.5, 0.5, 0.0, -1.0])),
        (EllipseParametrization(), np.array([0.1, -0.2, 0.3, 0.4, 0.6, 1.5, 3.0])),
    ],
)
def test_jacobian_vector_product(parametrization: Parametrization, theta) -> None:
    parametrization.test_parametrization(theta, x)

    values = parametrization(theta, x)
    assert values.shape == (20,)
    jvp = parametrization.jacobian_vector_product(theta, x, np.ones(20))
    assert jvp.shape == theta.shape


def test_wrong_jacobian_vector_product() -> None:
    with pytest.raises(
        ValueError,
        match="The jacobian vector product does not match the finite difference",
    ):
        WrongJacobianParametrization().test_parametrization(np.ones(20), x)


@pytest.mark.parametrize(
    "parametrization, expected_values",
    [
        (IdentityParametrization(0.3), np.full(20, 0.3)),
        (ExponentialParametrization(2.0), np.full(20, 2.0)),
        (TanhParametrization(0.8), np.full(20, 0.8)),
    ],
)
def test_initial_values(parametrization: Parametrization, expected_values) -> None:
    theta = parametrization.get_initial_values(x)
    np.testing.assert_allclose(parametrization(theta, x), expected_values)


def test_ellipse_parametrization() -> None:
    param = EllipseParametrization()
    np.testing.assert_array_equal(
        param.get_initial_values(x), [0.0, 0.0, 0.5, 0.5, 0.5, 0.0, -1.0]
    )
    assert param.get_n_params(1000) == 7

    # sharp interface: 1 - sigmoid(rho) inside and sigmoid(rho) outside
    theta = np.array([0.2, -0.1, 0.0, 0.3, 0.5, 2.0, 200.0])
    points = np.array([[0.2, -0.1], [0.4, -0.1], [0.2, 0.3], [0.9, 0.9]])
    np.testing.assert_allclose(
        param(theta, points),
        [1.0 - expit(2.0), 1.0 - expit(2.0), 1.0 - expit(2.0), expit(2.0)],
        rtol=1e-6,
    )
    # on the interface, the value is the mean
    np.testing.assert_allclose(param(theta, np.array([[0.5, -0.1]])), 0.5)


@pytest.mark.parametrize(
    "theta, coords, expected_exception",
    [
        (np.ones(7), x, does_not_raise()),
        (
            np.ones(3),
            x,
            pytest.raises(
                ValueError,
                match=re.escape("Expected 7 parameters for 20 points, got 3!"),
            ),
        ),
        (
            np.ones((7, 1)),
            x,
            pytest.raises(ValueError, match="The parameter vector must be 1D!"),
        ),
        (
            np.ones(7),
            np.ones((20, 3)),
            pytest.raises(
                ValueError,
                match=re.escape(
                    "Coordinates must be an array with shape (n_points, 2)!"
                ),
            ),
        ),
    ],
)
def test_input_errors(theta, coords, expected_exception) -> None:
    with expected_exception:
        EllipseParametrization()(theta, coords)


def test_cotangent_shape_error() -> None:
    with pytest.raises(
        ValueError,
        match=re.escape("The cotangent vector must have shape (20,), got (19,)!"),
    ):
        IdentityParametrization().jacobian_vector_product(
            np.ones(20), x, np.ones(19)
        )


@pytest.mark.parametrize(
    "cls, init_value, expected_exception",
    [
        (ExponentialParametrization, 0.5, does_not_raise()),
        (
            ExponentialParametrization,
            0.0,
            pytest.raises(ValueError, match="must be strictly positive"),
        ),
        (TanhParametrization, 0.5, does_not_raise()),
        (
            TanhParametrization,
            1.0,
            pytest.raises(ValueError, match=re.escape("must be in ]0, 1[!")),
        ),
    ],
)
def test_init_value_errors(cls, init_value, expected_exception) -> None:
    with expected_exception:
        cls(init_value)


def test_ellipse_wrong_number_of_initial_values() -> None:
    with pytest.raises(ValueError, match="Expected 7 initial values!"):
        EllipseParametrization((0.0, 0.0))

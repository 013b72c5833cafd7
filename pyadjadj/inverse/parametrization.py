"""
Provide parametrizations of the coefficient field.

A parametrization maps a parameter vector theta and the coordinates of the
coefficient dofs to the coefficient values. The gradient of an objective with
respect to theta is obtained from the gradient with respect to the coefficient
values through :meth:`Parametrization.jacobian_vector_product`.

.. autosummary::
   :toctree: _autosummary

    Parametrization
    IdentityParametrization
    ExponentialParametrization
    TanhParametrization
    EllipseParametrization
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

import numdifftools as nd
import numpy as np
import numpy.typing as npt
from scipy.special import expit

from pyadjadj.utils.types import NDArrayFloat


def _as_coordinates(x: npt.ArrayLike) -> NDArrayFloat:
    _x = np.asarray(x, dtype=np.float64)
    if _x.ndim != 2 or _x.shape[1] != 2:
        raise ValueError("Coordinates must be an array with shape (n_points, 2)!")
    return _x


class Parametrization(ABC):
    """
    This an abstract class for the parametrization of the coefficient field.

    Child classes implement `_evaluate`, `_jacobian_vector_product`,
    `get_n_params` and `get_initial_values`. The public methods check the
    dimensions of their inputs before calling them.
    """

    def evaluate(self, theta: npt.ArrayLike, x: npt.ArrayLike) -> NDArrayFloat:
        """
        Return the coefficient values at the given coordinates.

        Parameters
        ----------
        theta : npt.ArrayLike
            Parameter vector with shape (n_params,).
        x : npt.ArrayLike
            Coordinates with shape (n_points, 2).

        Returns
        -------
        NDArrayFloat
            Coefficient values with shape (n_points,).
        """
        _theta, _x = self._check_inputs(theta, x)
        return self._evaluate(_theta, _x)

    def jacobian_vector_product(
        self, theta: npt.ArrayLike, x: npt.ArrayLike, cotangent: npt.ArrayLike
    ) -> NDArrayFloat:
        """
        Return the product of the transposed jacobian with a vector.

        This is the gradient with respect to theta of an objective whose gradient
        with respect to the coefficient values is `cotangent`.

        Parameters
        ----------
        theta : npt.ArrayLike
            Parameter vector with shape (n_params,).
        x : npt.ArrayLike
            Coordinates with shape (n_points, 2).
        cotangent : npt.ArrayLike
            Vector with shape (n_points,).

        Returns
        -------
        NDArrayFloat
            Vector with shape (n_params,).
        """
        _theta, _x = self._check_inputs(theta, x)
        _cotangent = np.asarray(cotangent, dtype=np.float64)
        if _cotangent.shape != (_x.shape[0],):
            raise ValueError(
                f"The cotangent vector must have shape ({_x.shape[0]},), "
                f"got {_cotangent.shape}!"
            )
        return self._jacobian_vector_product(_theta, _x, _cotangent)

    def __call__(self, theta: npt.ArrayLike, x: npt.ArrayLike) -> NDArrayFloat:
        """Call the parametrization."""
        return self.evaluate(theta, x)

    def _check_inputs(self, theta: npt.ArrayLike, x: npt.ArrayLike):
        _theta = np.asarray(theta, dtype=np.float64)
        _x = _as_coordinates(x)
        if _theta.ndim != 1:
            raise ValueError("The parameter vector must be 1D!")
        n_params = self.get_n_params(_x.shape[0])
        if _theta.size != n_params:
            raise ValueError(
                f"Expected {n_params} parameters for {_x.shape[0]} points, "
                f"got {_theta.size}!"
            )
        return _theta, _x

    @abstractmethod
    def _evaluate(self, theta: NDArrayFloat, x: NDArrayFloat) -> NDArrayFloat:
        """Return the coefficient values."""
        ...  # pragma: no cover

    @abstractmethod
    def _jacobian_vector_product(
        self, theta: NDArrayFloat, x: NDArrayFloat, cotangent: NDArrayFloat
    ) -> NDArrayFloat:
        """Return the product of the transposed jacobian with a vector."""
        ...  # pragma: no cover

    @abstractmethod
    def get_n_params(self, n_points: int) -> int:
        """Return the number of parameters for the given number of points."""
        ...  # pragma: no cover

    @abstractmethod
    def get_initial_values(self, x: npt.ArrayLike) -> NDArrayFloat:
        """Return the initial parameter vector for the given coordinates."""
        ...  # pragma: no cover

    def test_parametrization(
        self,
        theta: npt.ArrayLike,
        x: npt.ArrayLike,
        rtol: float = 1e-5,
        eps: Optional[float] = None,
        random_state: int = 2024,
    ) -> None:
        """
        Test if the jacobian vector product matches its FD approximation.

        This is a development tool.

        Parameters
        ----------
        theta : npt.ArrayLike
            Parameter vector at which the derivative is checked.
        x : npt.ArrayLike
            Coordinates with shape (n_points, 2).
        rtol : float, optional
            Relative tolerance, by default 1e-5.
        eps : Optional[float], optional
            The epsilon for the computation of the approximated jacobian by finite
            difference. By default None.
        random_state : int
            Seed of the random cotangent vector. The default is 2024.

        Raises
        ------
        ValueError
            If the jacobian vector product is incorrect.
        """
        _theta, _x = self._check_inputs(theta, x)
        cotangent = np.random.default_rng(random_state).normal(size=_x.shape[0])
        jac = np.reshape(
            nd.Jacobian(lambda t: self.evaluate(t, _x), step=eps)(_theta),
            (_x.shape[0], _theta.size),
        )
        try:
            np.testing.assert_allclose(
                self.jacobian_vector_product(_theta, _x, cotangent),
                jac.T @ cotangent,
                rtol=rtol,
                atol=rtol * max(1.0, float(np.max(np.abs(jac.T @ cotangent)))),
            )
        except AssertionError as e:
            raise ValueError(
                "The jacobian vector product does not match the finite difference "
                "approximation!"
            ) from e


class IdentityParametrization(Parametrization):
    """One parameter per coefficient dof: m = theta."""

    def __init__(self, init_value: float = 0.5) -> None:
        """
        Initialize the instance.

        Parameters
        ----------
        init_value : float, optional
            Initial coefficient value, by default 0.5.
        """
        self.init_value: float = init_value

    def _evaluate(self, theta: NDArrayFloat, x: NDArrayFloat) -> NDArrayFloat:
        return theta.copy()

    def _jacobian_vector_product(
        self, theta: NDArrayFloat, x: NDArrayFloat, cotangent: NDArrayFloat
    ) -> NDArrayFloat:
        return cotangent.copy()

    def get_n_params(self, n_points: int) -> int:
        return n_points

    def get_initial_values(self, x: npt.ArrayLike) -> NDArrayFloat:
        return np.full(_as_coordinates(x).shape[0], self.init_value)


class ExponentialParametrization(Parametrization):
    """One parameter per coefficient dof: m = exp(theta) (positive coefficient)."""

    def __init__(self, init_value: float = 0.5) -> None:
        if init_value <= 0.0:
            raise ValueError("The initial value must be strictly positive!")
        self.init_value: float = init_value

    def _evaluate(self, theta: NDArrayFloat, x: NDArrayFloat) -> NDArrayFloat:
        return np.exp(theta)

    def _jacobian_vector_product(
        self, theta: NDArrayFloat, x: NDArrayFloat, cotangent: NDArrayFloat
    ) -> NDArrayFloat:
        return np.exp(theta) * cotangent

    def get_n_params(self, n_points: int) -> int:
        return n_points

    def get_initial_values(self, x: npt.ArrayLike) -> NDArrayFloat:
        return np.full(_as_coordinates(x).shape[0], np.log(self.init_value))


class TanhParametrization(Parametrization):
    """One parameter per coefficient dof: m = 0.5 tanh(theta) + 0.5, in ]0, 1[."""

    def __init__(self, init_value: float = 0.5) -> None:
        if not 0.0 < init_value < 1.0:
            raise ValueError("The initial value must be in ]0, 1[!")
        self.init_value: float = init_value

    def _evaluate(self, theta: NDArrayFloat, x: NDArrayFloat) -> NDArrayFloat:
        return 0.5 * np.tanh(theta) + 0.5

    def _jacobian_vector_product(
        self, theta: NDArrayFloat, x: NDArrayFloat, cotangent: NDArrayFloat
    ) -> NDArrayFloat:
        return 0.5 * (1.0 - np.tanh(theta) ** 2) * cotangent

    def get_n_params(self, n_points: int) -> int:
        return n_points

    def get_initial_values(self, x: npt.ArrayLike) -> NDArrayFloat:
        return np.full(
            _as_coordinates(x).shape[0], np.arctanh(2.0 * self.init_value - 1.0)
        )


class EllipseParametrization(Parametrization):
    r"""
    Two-region coefficient field separated by a smoothed ellipse.

    The seven parameters are :math:`\theta = (\mu_1, \mu_2, r, a, b, \rho, z)`:
    the center, the rotation angle and the half axes of the ellipse, the logit of
    the inner value and the steepness of the interface. With :math:`\sigma` the
    logistic function,

    .. math::

        q(x) = \dfrac{u^2}{a^2} + \dfrac{w^2}{b^2} \quad
        u = (x_1 - \mu_1) \cos r + (x_2 - \mu_2) \sin r \quad
        w = (x_1 - \mu_1) \sin r - (x_2 - \mu_2) \cos r

        m(x) = \sigma(z (q - 1)) \sigma(\rho)
        + (1 - \sigma(z (q - 1))) (1 - \sigma(\rho))
    """

    N_PARAMS: int = 7

    def __init__(
        self, init_values: Sequence[float] = (0.0, 0.0, 0.5, 0.5, 0.5, 0.0, -1.0)
    ) -> None:
        if len(init_values) != self.N_PARAMS:
            raise ValueError(f"Expected {self.N_PARAMS} initial values!")
        self.init_values: NDArrayFloat = np.array(init_values, dtype=np.float64)

    @staticmethod
    def _get_local_coordinates(theta: NDArrayFloat, x: NDArrayFloat):
        mu1, mu2, r = theta[:3]
        dx = x[:, 0] - mu1
        dy = x[:, 1] - mu2
        u = dx * np.cos(r) + dy * np.sin(r)
        w = dx * np.sin(r) - dy * np.cos(r)
        return u, w

    def _evaluate(self, theta: NDArrayFloat, x: NDArrayFloat) -> NDArrayFloat:
        a, b, rho, z = theta[3:]
        u, w = self._get_local_coordinates(theta, x)
        sig_s = expit(z * (u**2 / a**2 + w**2 / b**2 - 1.0))
        sig_rho = expit(rho)
        return sig_s * sig_rho + (1.0 - sig_s) * (1.0 - sig_rho)

    def _jacobian_vector_product(
        self, theta: NDArrayFloat, x: NDArrayFloat, cotangent: NDArrayFloat
    ) -> NDArrayFloat:
        r, a, b, rho, z = theta[2:]
        u, w = self._get_local_coordinates(theta, x)
        q = u**2 / a**2 + w**2 / b**2
        sig_s = expit(z * (q - 1.0))
        sig_rho = expit(rho)

        dm_ds = sig_s * (1.0 - sig_s) * (2.0 * sig_rho - 1.0)
        dm_dq = dm_ds * z

        jac = np.empty((x.shape[0], self.N_PARAMS))
        jac[:, 0] = dm_dq * (-2.0 * u * np.cos(r) / a**2 - 2.0 * w * np.sin(r) / b**2)
        jac[:, 1] = dm_dq * (-2.0 * u * np.sin(r) / a**2 + 2.0 * w * np.cos(r) / b**2)
        jac[:, 2] = dm_dq * 2.0 * u * w * (1.0 / b**2 - 1.0 / a**2)
        jac[:, 3] = dm_dq * (-2.0 * u**2 / a**3)
        jac[:, 4] = dm_dq * (-2.0 * w**2 / b**3)
        jac[:, 5] = sig_rho * (1.0 - sig_rho) * (2.0 * sig_s - 1.0)
        jac[:, 6] = dm_ds * (q - 1.0)
        return jac.T @ cotangent

    def get_n_params(self, n_points: int) -> int:
        return self.N_PARAMS

    def get_initial_values(self, x: npt.ArrayLike) -> NDArrayFloat:
        return self.init_values.copy()

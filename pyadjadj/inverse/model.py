"""Provide a model class to store the inversion data and results."""

from __future__ import annotations

from typing import List, Optional

import numpy as np
import numpy.typing as npt

from pyadjadj.exceptions import DimensionError
from pyadjadj.forward import ForwardModel
from pyadjadj.inverse.parametrization import IdentityParametrization, Parametrization
from pyadjadj.utils.types import NDArrayFloat


class InverseModel:
    """
    Class holding the inversion data and history.

    Attributes
    ----------
    fwd_model: ForwardModel
        The forward model being inverted.
    d_obs: NDArrayFloat
        Observed measurements with shape (n_excitations, n_extractions).
    std_obs: NDArrayFloat
        Uncertainties on the observed measurements (same shape as `d_obs`).
    parametrization: Parametrization
        Map from the adjusted parameters to the coefficient dofs.
    loss_ls_history: List[float]
        List of successive objective functions computed while optimizing.
    list_d_pred: List[NDArrayFloat]
        List of the successive predicted measurements computed while optimizing.
    list_theta: List[NDArrayFloat]
        List of the successive adjusted parameter vectors.
    grad_adj_history: List[NDArrayFloat]
        List of the successive gradients computed with the adjoint-adjoint method.
    grad_fd_history: List[NDArrayFloat]
        List of the successive gradients computed by finite differences.
    nb_g_calls: int
        Number of gradient evaluations.
    """

    __slots__ = [
        "fwd_model",
        "d_obs",
        "std_obs",
        "parametrization",
        "nb_g_calls",
        "loss_ls_history",
        "list_d_pred",
        "list_theta",
        "grad_adj_history",
        "grad_fd_history",
    ]

    def __init__(
        self,
        fwd_model: ForwardModel,
        d_obs: npt.ArrayLike,
        parametrization: Optional[Parametrization] = None,
        std_obs: Optional[npt.ArrayLike] = None,
    ) -> None:
        """
        Initialize the instance.

        Parameters
        ----------
        fwd_model : ForwardModel
            The forward model being inverted.
        d_obs : npt.ArrayLike
            Observed measurements with shape (n_excitations, n_extractions).
        parametrization : Optional[Parametrization], optional
            Map from the adjusted parameters to the coefficient dofs. If None,
            the coefficient dofs are directly adjusted. The default is None.
        std_obs : Optional[npt.ArrayLike], optional
            Uncertainties on the observed measurements. If None, they are all one.
            The default is None.

        Raises
        ------
        DimensionError
            If the observations do not match the measurements of the model.
        """
        self.fwd_model: ForwardModel = fwd_model
        self.d_obs: NDArrayFloat = np.array(d_obs, dtype=np.float64)
        if self.d_obs.shape != (fwd_model.n_excitations, fwd_model.n_extractions):
            raise DimensionError(
                f"The observations have shape {self.d_obs.shape} but the model "
                f"measurements have shape ({fwd_model.n_excitations}, "
                f"{fwd_model.n_extractions})!"
            )
        if std_obs is None:
            self.std_obs: NDArrayFloat = np.ones_like(self.d_obs)
        else:
            self.std_obs = np.broadcast_to(
                np.asarray(std_obs, dtype=np.float64), self.d_obs.shape
            ).copy()
        if np.any(self.std_obs <= 0.0):
            raise ValueError("Uncertainties must be strictly positive!")
        self.parametrization: Parametrization = (
            parametrization
            if parametrization is not None
            else IdentityParametrization()
        )

        # Initialize the internal state (lists, comptors, etc.)
        self.init_state()

    def init_state(self) -> None:
        """Initialize internal state."""
        self.nb_g_calls: int = 0
        self.loss_ls_history: List[float] = []
        self.list_d_pred: List[NDArrayFloat] = []
        self.list_theta: List[NDArrayFloat] = []
        self.grad_adj_history: List[NDArrayFloat] = []
        self.grad_fd_history: List[NDArrayFloat] = []

    @property
    def nb_f_calls(self) -> int:
        """Return the number of times the objective function has been called."""
        return len(self.loss_ls_history)

    @property
    def nb_obs_values(self) -> int:
        """Return the number of observation values in the inversion."""
        return int(self.d_obs.size)

    @property
    def coordinates(self) -> NDArrayFloat:
        """Return the coordinates of the coefficient dofs."""
        return self.fwd_model.coefficient_coordinates

    @property
    def nb_adjusted_values(self) -> int:
        """Return the number of adjusted values in the inversion."""
        return self.parametrization.get_n_params(self.fwd_model.n_params)

    def get_initial_values(self) -> NDArrayFloat:
        """Return the initial adjusted values given by the parametrization."""
        return self.parametrization.get_initial_values(self.coordinates)

    def get_coefficient(self, theta: npt.ArrayLike) -> NDArrayFloat:
        """Return the coefficient dofs for the adjusted values `theta`."""
        return self.parametrization(theta, self.coordinates)

    def clear_history(self) -> None:
        """Clear the history."""
        self.init_state()

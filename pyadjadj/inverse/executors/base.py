"""Implement the interface for inversion executors."""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar

import numpy as np
import numpy.typing as npt

from pyadjadj.exceptions import DimensionError, SolveError
from pyadjadj.forward import ForwardModel
from pyadjadj.inverse.gradient import (
    compute_adjoint_adjoint_gradient,
    get_gradient_summary,
)
from pyadjadj.inverse.loss_function import (
    eval_loss_ls,
    eval_loss_ls_gradient,
    eval_objective,
)
from pyadjadj.inverse.model import InverseModel
from pyadjadj.utils import finite_gradient, is_all_close, register_params_ds
from pyadjadj.utils.types import NDArrayFloat

base_solver_config_params_ds = """is_check_gradient: bool
        Whether the gradient is checked by finite difference at each gradient
        evaluation. This is expensive but very useful. The default is False.
    fd_eps: Optional[float]
        The epsilon for the computation of the approximated gradient by finite
        difference. If None, it is automatically inferred. The default is None.
    fd_accuracy: int
        Number of points to use for the finite difference approximation.
        Possible values are 0 (2 points), 1 (4 points), 2 (6 points),
        3 (8 points). The default is 0.
    fd_max_workers: int
        Number of workers used for the gradient approximation by finite
        differences. If different from one, the calculation relies on
        multi-processing. The default is 1.
    gradient_check_rtol: float
        Relative tolerance used to compare the adjoint and the finite differences
        gradients. The default is 1e-3.
    is_boundary_sensitivity: bool
        Whether to include the sensitivity of the Nitsche boundary term in the
        gradient. The default is True.
    bounds: Optional[NDArrayFloat]
        Bounds on the adjusted values with shape (n_params, 2). If None, the
        adjusted values are not bounded. The default is None.
    """


@register_params_ds(base_solver_config_params_ds)
@dataclass
class BaseSolverConfig:
    """
    Base class for solver configuration.

    Attributes
    ----------
    """

    is_check_gradient: bool = False
    fd_eps: Optional[float] = None
    fd_accuracy: int = 0
    fd_max_workers: int = 1
    gradient_check_rtol: float = 1e-3
    is_boundary_sensitivity: bool = True
    bounds: Optional[NDArrayFloat] = None


_BaseSolverConfig = TypeVar("_BaseSolverConfig", bound=BaseSolverConfig)


class BaseInversionExecutor(ABC, Generic[_BaseSolverConfig]):
    """
    Base class Executor for the gradient-based inversion.

    This is an abstract class.
    """

    __slots__ = ["fwd_model", "inv_model", "solver_config", "theta_init"]

    def __init__(
        self,
        fwd_model: ForwardModel,
        inv_model: InverseModel,
        solver_config: _BaseSolverConfig,
        theta_init: Optional[npt.ArrayLike] = None,
    ) -> None:
        """
        Initialize the executor.

        Parameters
        ----------
        fwd_model : ForwardModel
            The forward model to optimize.
        inv_model : InverseModel
            The observations, the parametrization and the inversion history.
        solver_config : _BaseSolverConfig
            Configuration for the solver and the inversion.
        theta_init: Optional[npt.ArrayLike]
            Initial adjusted values. If None, they are given by the
            parametrization of the inverse model. The default is None.

        Note
        ----
        The fwd and inverse model passed to the executor will be modified by the
        executor while optimizing.
        """
        self.fwd_model: ForwardModel = fwd_model
        self.inv_model: InverseModel = inv_model
        self.solver_config: _BaseSolverConfig = solver_config

        if inv_model.fwd_model is not fwd_model:
            raise ValueError("The inverse model must wrap the given forward model!")

        if theta_init is None:
            self.theta_init: NDArrayFloat = inv_model.get_initial_values()
        else:
            self.theta_init = self.validate_theta_init(theta_init)

        # Initialize the solver (this is to be defined in child classes)
        self._init_solver(self.theta_init)

    @property
    def n_params(self) -> int:
        """Return the number of adjusted values."""
        return self.theta_init.size

    def validate_theta_init(self, theta_init: npt.ArrayLike) -> NDArrayFloat:
        """Check if theta init has the correct size."""
        _theta_init = np.asarray(theta_init, dtype=np.float64).ravel()
        if _theta_init.size != self.inv_model.nb_adjusted_values:
            raise DimensionError(
                f"theta_init must be a vector of size {self.inv_model.nb_adjusted_values}"
                f", got {_theta_init.size} values!"
            )
        return _theta_init

    def get_bounds(self) -> Optional[NDArrayFloat]:
        """Return the bounds of the adjusted values with shape (n_params, 2)."""
        if self.solver_config.bounds is None:
            return None
        bounds = np.asarray(self.solver_config.bounds, dtype=np.float64)
        if bounds.shape != (self.n_params, 2):
            raise DimensionError(
                f"Bounds must have shape ({self.n_params}, 2), got {bounds.shape}!"
            )
        return bounds

    @abstractmethod
    def _init_solver(self, theta_init: NDArrayFloat) -> None:
        """Initiate a solver with its args."""

    @abstractmethod
    def _get_solver_name(self) -> str:
        """Return the solver name."""
        return "unknown"

    def get_display_dict(self) -> Dict[str, Any]:
        return {}

    def _initial_display(self) -> None:
        """Display basic info about the inversion."""
        DISPLAY_TOP_LEN = 80
        DISPLAY_SHIFT = 50

        logging.info(f"{' Inversion Parameters ':=^{DISPLAY_TOP_LEN}}")

        # display specific to the solver
        display_dict = {
            "Method": self._get_solver_name(),
            "": "",  # space
            "Parametrization": type(self.inv_model.parametrization).__name__,
            "Number of unknowns (adjusted values)": self.n_params,
            "Number of coefficient dofs": self.fwd_model.n_params,
            "Number of excitations": self.fwd_model.n_excitations,
            "Number of extractions": self.fwd_model.n_extractions,
            "Number of observation data points (values)": self.inv_model.nb_obs_values,
            "Check gradient by finite difference": self.solver_config.is_check_gradient,
            **self.get_display_dict(),
        }

        for k, v in display_dict.items():
            if k == "":
                logging.info("")
            else:
                logging.info(f"{k: <{DISPLAY_SHIFT}}: {v}")

        # End of display
        logging.info(f"{'':=^{DISPLAY_TOP_LEN}}")

    def _run_forward_model(
        self, theta: NDArrayFloat, run_n: int, is_save_state: bool = True
    ) -> NDArrayFloat:
        """
        Run the forward model and returns the predicted measurements.

        Parameters
        ----------
        theta : NDArrayFloat
            Adjusted values as a 1D vector.
        run_n: int
            Run number.
        is_save_state: bool
            Whether the predictions must be stored or not. The default is True.
        """
        logging.info("- Running forward model # %s", run_n)

        d_pred = self.fwd_model.evaluate(self.inv_model.get_coefficient(theta))
        self._check_nans_in_predictions(d_pred, run_n)

        if is_save_state:
            self.inv_model.list_d_pred.append(d_pred.copy())
            self.inv_model.list_theta.append(np.array(theta, dtype=np.float64))

        logging.info("- Run # %s over", run_n)
        return d_pred

    def eval_loss(self, theta: NDArrayFloat, is_save_state: bool = True) -> float:
        """
        Compute the model loss function.

        Parameters
        ----------
        theta: NDArrayFloat
            1D vector of adjusted values.
        is_save_state: bool
            Whether to save the loss function and the predictions.
            The default is True.
        """
        loss_ls = eval_loss_ls(
            self.inv_model.d_obs,
            self._run_forward_model(
                theta, self.inv_model.nb_f_calls + 1, is_save_state=is_save_state
            ),
            self.inv_model.std_obs,
        )

        logging.info(f"Loss (obs fit)        = {loss_ls}")
        logging.info(
            f"Loss (obs fit) / Nobs = {loss_ls / self.inv_model.nb_obs_values}\n"
        )

        if is_save_state:
            self.inv_model.loss_ls_history.append(loss_ls)

        return loss_ls

    def compute_fd_gradient(self, theta: NDArrayFloat) -> NDArrayFloat:
        """
        Return the gradient of the loss w.r.t. theta by finite differences.

        Warning
        -------
        The forward model is not updated (a copy is used instead).
        """
        return finite_gradient(
            np.asarray(theta, dtype=np.float64),
            eval_objective,
            fm_args=(
                copy.deepcopy(self.fwd_model),
                self.inv_model.parametrization,
                self.inv_model.d_obs,
                self.inv_model.std_obs,
            ),
            eps=self.solver_config.fd_eps,
            accuracy=self.solver_config.fd_accuracy,
            max_workers=self.solver_config.fd_max_workers,
        )

    def eval_loss_gradient(
        self, theta: NDArrayFloat, is_save_state: bool = True
    ) -> NDArrayFloat:
        """
        Return the gradient of the objective function with regard to `theta`.

        Parameters
        ----------
        theta: NDArrayFloat
            1D vector of adjusted values.
        is_save_state; bool
            Whether to save gradients. The default is True.

        Returns
        -------
        objective : NDArrayFloat
            The gradient vector. Note that the dimension is the same as for theta.

        """
        logging.info("- Running gradient # %s", self.inv_model.nb_g_calls + 1)

        x = self.inv_model.coordinates
        p = self.inv_model.get_coefficient(theta)
        # no solve if the loss has just been evaluated for theta
        d_pred = self.fwd_model.evaluate(p)
        grad_m = compute_adjoint_adjoint_gradient(
            self.fwd_model,
            p,
            eval_loss_ls_gradient(self.inv_model.d_obs, d_pred, self.inv_model.std_obs),
            is_boundary_sensitivity=self.solver_config.is_boundary_sensitivity,
        )
        adj_grad = self.inv_model.parametrization.jacobian_vector_product(
            theta, x, grad_m
        )

        if self.solver_config.is_check_gradient:
            fd_grad = self.compute_fd_gradient(theta)
            if is_save_state:
                self.inv_model.grad_fd_history.append(fd_grad)
            if not is_all_close(
                adj_grad, fd_grad, rtol=self.solver_config.gradient_check_rtol
            ):
                logging.warning("The adjoint gradient is not correct!")
            else:
                logging.info("The adjoint gradient seems correct!")
            for k, v in get_gradient_summary(adj_grad, fd_grad).items():
                logging.info(f"{k: <15}: {v}")

        logging.info("- Gradient eval # %s over\n", self.inv_model.nb_g_calls + 1)

        if is_save_state:
            self.inv_model.grad_adj_history.append(adj_grad.copy())
            self.inv_model.nb_g_calls += 1

        return adj_grad

    @abstractmethod
    def run(self) -> Any:
        """Run the inversion."""
        self._initial_display()

        # clear the history of previous runs
        self.inv_model.clear_history()
        self.fwd_model.solve_stats.reset()
        return ()

    @staticmethod
    def _check_nans_in_predictions(d_pred: NDArrayFloat, run_n: int) -> None:
        """
        Check and raise an exception if there is any NaNs in the predictions.

        Raises
        ------
        SolveError
            Raised if NaNs are found.
        """
        if not np.isnan(d_pred).any():
            return  # -> no issue found
        raise SolveError(
            "Something went wrong with NaN values"
            f" are found in predictions for simulation {run_n} !"
        )

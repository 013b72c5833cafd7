"""Provide the least-square loss of the measurements and its gradients."""

from __future__ import annotations

from typing import Optional

import numpy as np
import numpy.typing as npt

from pyadjadj.forward import ForwardModel
from pyadjadj.inverse.gradient import compute_adjoint_adjoint_gradient
from pyadjadj.inverse.parametrization import Parametrization
from pyadjadj.utils.types import NDArrayFloat


def _get_std(d_obs: NDArrayFloat, std: Optional[npt.ArrayLike]) -> NDArrayFloat:
    if std is None:
        return np.ones_like(d_obs)
    _std = np.broadcast_to(np.asarray(std, dtype=np.float64), d_obs.shape)
    if np.any(_std <= 0.0):
        raise ValueError("Uncertainties on observed values must be strictly positive!")
    return _std


def eval_loss_ls(
    d_obs: npt.ArrayLike, d_calc: npt.ArrayLike, std: Optional[npt.ArrayLike] = None
) -> float:
    r"""
    Return the least-square objective function.

    .. math::
        \mathcal{J} = \sum_{i, j}
        \left(\dfrac{d_{\mathrm{calc}}^{ij}
        - d_{\mathrm{obs}}^{ij}}{\sigma^{ij}} \right)^{2}

    Parameters
    ----------
    d_obs: npt.ArrayLike
        Observed measurements with shape (n_excitations, n_extractions).
    d_calc: npt.ArrayLike
        Calculated measurements with the same shape.
    std: Optional[npt.ArrayLike]
        Uncertainties on observed values, broadcastable to the measurements shape.
        If None, all uncertainties are one. The default is None.

    Returns
    -------
    objective : float
        The value of the objective function.
    """
    _d_obs = np.asarray(d_obs, dtype=np.float64)
    _d_calc = np.asarray(d_calc, dtype=np.float64)
    if _d_obs.shape != _d_calc.shape:
        raise ValueError(
            f"Observed {_d_obs.shape} and calculated {_d_calc.shape} measurements "
            "must have the same shape!"
        )
    return float(np.sum(np.square((_d_calc - _d_obs) / _get_std(_d_obs, std))))


def eval_loss_ls_gradient(
    d_obs: npt.ArrayLike, d_calc: npt.ArrayLike, std: Optional[npt.ArrayLike] = None
) -> NDArrayFloat:
    """Return the gradient of :func:`eval_loss_ls` with respect to `d_calc`."""
    _d_obs = np.asarray(d_obs, dtype=np.float64)
    _d_calc = np.asarray(d_calc, dtype=np.float64)
    if _d_obs.shape != _d_calc.shape:
        raise ValueError(
            f"Observed {_d_obs.shape} and calculated {_d_calc.shape} measurements "
            "must have the same shape!"
        )
    return 2.0 * (_d_calc - _d_obs) / np.square(_get_std(_d_obs, std))


def eval_model_loss_ls(
    model: ForwardModel,
    d_obs: npt.ArrayLike,
    p: npt.ArrayLike,
    std: Optional[npt.ArrayLike] = None,
) -> float:
    """
    Return the least-square loss of the model for the given coefficient dofs.

    Parameters
    ----------
    model : ForwardModel
        The forward model.
    d_obs : npt.ArrayLike
        Observed measurements with shape (n_excitations, n_extractions).
    p : npt.ArrayLike
        Coefficient dofs.
    std : Optional[npt.ArrayLike], optional
        Uncertainties on observed values, by default None.
    """
    return eval_loss_ls(d_obs, model.evaluate(p), std)


def eval_model_loss_ls_gradient(
    model: ForwardModel,
    d_obs: npt.ArrayLike,
    p: npt.ArrayLike,
    std: Optional[npt.ArrayLike] = None,
    is_boundary_sensitivity: bool = True,
) -> NDArrayFloat:
    """Return the gradient of :func:`eval_model_loss_ls` w.r.t. the coefficient dofs."""
    return compute_adjoint_adjoint_gradient(
        model,
        p,
        eval_loss_ls_gradient(d_obs, model.evaluate(p), std),
        is_boundary_sensitivity=is_boundary_sensitivity,
    )


def eval_objective(
    theta: npt.ArrayLike,
    model: ForwardModel,
    parametrization: Parametrization,
    d_obs: npt.ArrayLike,
    std: Optional[npt.ArrayLike] = None,
) -> float:
    """
    Return the least-square loss for the parameter vector `theta`.

    The coefficient dofs are given by the parametrization evaluated at the
    coordinates of the coefficient dofs.
    """
    p = parametrization(theta, model.coefficient_coordinates)
    return eval_model_loss_ls(model, d_obs, p, std)


def eval_objective_gradient(
    theta: npt.ArrayLike,
    model: ForwardModel,
    parametrization: Parametrization,
    d_obs: npt.ArrayLike,
    std: Optional[npt.ArrayLike] = None,
    is_boundary_sensitivity: bool = True,
) -> NDArrayFloat:
    """
    Return the gradient of :func:`eval_objective` with respect to `theta`.

    The adjoint-adjoint gradient with respect to the coefficient dofs is chained
    through the jacobian of the parametrization.
    """
    x = model.coefficient_coordinates
    p = parametrization(theta, x)
    return parametrization.jacobian_vector_product(
        theta,
        x,
        eval_model_loss_ls_gradient(
            model, d_obs, p, std, is_boundary_sensitivity=is_boundary_sensitivity
        ),
    )

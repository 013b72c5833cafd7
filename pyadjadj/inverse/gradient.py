# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 Antoine COLLET

r"""
Compute the gradient of a measurement loss with the adjoint-adjoint method.

The measurements are :math:`D = B^{T} \Lambda` with :math:`A^{T} \Lambda = -C`.
For a loss :math:`L(D)` and the upstream gradient
:math:`G = \partial L / \partial D`, differentiating the adjoint system gives

.. math::

    \dfrac{\partial L}{\partial m_k} = \sum_{j}
    \dot{a}(\bar{u}_j, \lambda_j; m, \phi_k)
    \quad \mathrm{with} \quad A \bar{U} = -B G

so that a single additional batch of solves is required, whatever the number of
coefficient dofs.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, Optional

import numpy as np
import numpy.typing as npt

from pyadjadj.exceptions import DimensionError
from pyadjadj.fem import Function, TestFunction, assemble_linear, project_functional
from pyadjadj.forward import ForwardModel, dot_a
from pyadjadj.utils import finite_gradient, is_all_close
from pyadjadj.utils.types import NDArrayFloat

LossFunction = Callable[[NDArrayFloat], float]
LossGradient = Callable[[NDArrayFloat], NDArrayFloat]


def compute_adjoint_adjoint_gradient(
    model: ForwardModel,
    p: npt.ArrayLike,
    upstream_grad: npt.ArrayLike,
    is_l2_riesz: bool = False,
    is_boundary_sensitivity: bool = True,
) -> NDArrayFloat:
    r"""
    Return the gradient of a loss with respect to the coefficient dofs.

    The accumulated functional
    :math:`g_k = \sum_j \dot{a}(\bar{u}_j, \lambda_j; \varphi_k)` is returned
    as is by default: it is the derivative of the loss with respect to the dofs,
    the quantity compared with finite differences and fed to the optimizers.
    The gradient field of the full adjoint-adjoint algorithm, i.e. the L2
    projection of this functional onto M (solve of :math:`M_{L2} x = g` with the
    mass matrix), is obtained with `is_l2_riesz=True`.

    Parameters
    ----------
    model : ForwardModel
        The forward model. It is made current for `p` if needed.
    p : npt.ArrayLike
        Coefficient dofs with shape (n_dofs(M),).
    upstream_grad : npt.ArrayLike
        Gradient of the loss with respect to the measurements, with shape
        (n_excitations, n_extractions).
    is_l2_riesz : bool, optional
        Whether to return the L2 Riesz representative of the derivative (obtained
        with a mass matrix solve over M) instead of the derivative itself.
        The default is False.
    is_boundary_sensitivity : bool, optional
        Whether to include the sensitivity of the Nitsche boundary term,
        see :func:`~pyadjadj.forward.dot_a`. The default is True.

    Returns
    -------
    NDArrayFloat
        The gradient with shape (n_dofs(M),).

    Raises
    ------
    DimensionError
        If the upstream gradient does not match the measurements.
    SolveError
        If one of the linear solves fails. No partial result is returned.
    """
    _upstream_grad = np.asarray(upstream_grad, dtype=np.float64)
    if _upstream_grad.shape != (model.n_excitations, model.n_extractions):
        raise DimensionError(
            f"The upstream gradient has shape {_upstream_grad.shape} but the "
            f"measurements have shape ({model.n_excitations}, {model.n_extractions})!"
        )

    model.ensure_current(p)

    # adjoint solutions of the same evaluation are reused
    adj_states = model.get_cached_adjoint_solutions()
    if adj_states is None:
        adj_states = model.solve_adjoint_states()

    # second adjoint: A @ bar_U = - B @ G
    bar_states = model.solve_operator(-(model.B @ _upstream_grad))
    model.store_gradient_solutions(bar_states)

    dot_m = TestFunction(model.M)
    grad = np.zeros(model.M.n_dofs, dtype=np.float64)
    for j in range(model.n_extractions):
        grad += assemble_linear(
            dot_a(
                Function(model.U, bar_states[:, j]),
                Function(model.V, adj_states[:, j]),
                model.m,
                dot_m,
                model.pars,
                is_boundary_sensitivity=is_boundary_sensitivity,
            ),
            model.M,
        )

    if is_l2_riesz:
        return project_functional(model.M, grad, model.pars.dx.degree)
    return grad


# short alias
gradient = compute_adjoint_adjoint_gradient


def _local_fun(
    p: NDArrayFloat, model: ForwardModel, loss_fn: LossFunction
) -> float:
    """Return the loss of the measurements for the coefficient dofs p."""
    return loss_fn(model.measure_adjoint(p))


def compute_fd_gradient(
    model: ForwardModel,
    p: npt.ArrayLike,
    loss_fn: LossFunction,
    eps: Optional[float] = None,
    accuracy: int = 0,
    max_workers: int = 1,
) -> NDArrayFloat:
    """
    Compute the gradient of the loss by finite difference approximation.

    Warning
    -------
    This function does not update the model (a copy is used instead). It costs
    2 x (accuracy + 1) x n_dofs(M) evaluations of the model.

    Parameters
    ----------
    model: ForwardModel
        The forward model.
    p : npt.ArrayLike
        Coefficient dofs at which the gradient is approximated.
    loss_fn: LossFunction
        Function mapping the measurements to a scalar loss. It must be picklable
        if `max_workers` is greater than one.
    eps: float, optional
        The epsilon for the computation of the approximated gradient by finite
        difference. If None, it is automatically inferred. The default is None.
    accuracy : int, optional
        Number of points to use for the finite difference approximation.
        Possible values are 0 (2 points), 1 (4 points), 2 (6 points),
        3 (8 points). The default is 0.
    max_workers: int
        Number of workers used to approximate the gradient. If different from one,
        the calculation relies on multi-processing. The default is 1.
    """
    _model = copy.deepcopy(model)
    return finite_gradient(
        np.asarray(p, dtype=np.float64),
        _local_fun,
        fm_args=(_model, loss_fn),
        eps=eps,
        accuracy=accuracy,
        max_workers=max_workers,
    )


def is_adjoint_gradient_correct(
    model: ForwardModel,
    p: npt.ArrayLike,
    loss_fn: LossFunction,
    loss_grad_fn: LossGradient,
    eps: Optional[float] = None,
    accuracy: int = 0,
    max_workers: int = 1,
    rtol: float = 1e-5,
    atol: float = 1e-8,
    is_boundary_sensitivity: bool = True,
) -> bool:
    """
    Check if the adjoint-adjoint gradient is equal to its FD approximation.

    Parameters
    ----------
    model : ForwardModel
        The forward model.
    p : npt.ArrayLike
        Coefficient dofs at which the gradient is checked.
    loss_fn : LossFunction
        Function mapping the measurements to a scalar loss.
    loss_grad_fn : LossGradient
        Gradient of `loss_fn` with respect to the measurements.
    eps: float, optional
        The epsilon for the finite differences. The default is None.
    accuracy : int, optional
        Accuracy of the finite differences stencil. The default is 0.
    max_workers: int
        Number of workers used for the finite differences. The default is 1.
    rtol : float, optional
        Relative tolerance, by default 1e-5.
    atol : float, optional
        Absolute tolerance, by default 1e-8.
    is_boundary_sensitivity : bool, optional
        Whether to include the sensitivity of the Nitsche boundary term.
        The default is True.

    Returns
    -------
    bool
        True if the adjoint gradient is correct.
    """
    d_pred = model.evaluate(p)
    adj_grad = compute_adjoint_adjoint_gradient(
        model,
        p,
        loss_grad_fn(d_pred),
        is_boundary_sensitivity=is_boundary_sensitivity,
    )
    fd_grad = compute_fd_gradient(
        model, p, loss_fn, eps=eps, accuracy=accuracy, max_workers=max_workers
    )
    is_ok = is_all_close(adj_grad, fd_grad, rtol=rtol, atol=atol)
    if not is_ok:
        logging.debug(
            "Max abs difference between adjoint and FD gradients: "
            f"{np.max(np.abs(adj_grad - fd_grad))}"
        )
    return is_ok


def get_gradient_summary(
    adj_grad: NDArrayFloat, fd_grad: NDArrayFloat
) -> Dict[str, Any]:
    """Return statistics comparing an adjoint gradient with its FD approximation."""
    diff = adj_grad - fd_grad
    scale = max(float(np.max(np.abs(fd_grad))), np.finfo(np.float64).tiny)
    return {
        "max_abs_error": float(np.max(np.abs(diff))),
        "max_rel_error": float(np.max(np.abs(diff)) / scale),
        "correlation": float(np.corrcoef(adj_grad, fd_grad)[0, 1])
        if adj_grad.size > 1
        else 1.0,
    }


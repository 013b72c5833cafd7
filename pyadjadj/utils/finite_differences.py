"""
Provide finite difference approximations of gradients and jacobians.

These are mostly used to check the adjoint gradients and the derivatives of the
parametrizations.
"""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from pyadjadj.utils.types import NDArrayFloat

# Central difference stencils (offsets and coefficients) for accuracy 0 to 3.
_STENCILS: Dict[int, Tuple[Sequence[int], Sequence[float]]] = {
    0: ((-1, 1), (-1.0 / 2.0, 1.0 / 2.0)),
    1: ((-2, -1, 1, 2), (1.0 / 12.0, -2.0 / 3.0, 2.0 / 3.0, -1.0 / 12.0)),
    2: (
        (-3, -2, -1, 1, 2, 3),
        (-1.0 / 60.0, 3.0 / 20.0, -3.0 / 4.0, 3.0 / 4.0, -3.0 / 20.0, 1.0 / 60.0),
    ),
    3: (
        (-4, -3, -2, -1, 1, 2, 3, 4),
        (
            1.0 / 280.0,
            -4.0 / 105.0,
            1.0 / 5.0,
            -4.0 / 5.0,
            4.0 / 5.0,
            -1.0 / 5.0,
            4.0 / 105.0,
            -1.0 / 280.0,
        ),
    ),
}


def _get_default_eps(x: NDArrayFloat) -> NDArrayFloat:
    """Return a step adapted to the magnitude of each value."""
    return np.cbrt(np.finfo(np.float64).eps) * np.maximum(1.0, np.abs(x))


def _eval_shifted(
    x: NDArrayFloat,
    index: int,
    step: float,
    fm: Callable,
    fm_args: Sequence[Any],
    fm_kwargs: Dict[str, Any],
) -> NDArrayFloat:
    _x = x.copy()
    _x.flat[index] += step
    return np.asarray(fm(_x, *fm_args, **fm_kwargs), dtype=np.float64)


def finite_jacobian(
    x: npt.ArrayLike,
    fm: Callable,
    fm_args: Optional[Sequence[Any]] = None,
    fm_kwargs: Optional[Dict[str, Any]] = None,
    eps: Optional[float] = None,
    accuracy: int = 0,
    max_workers: int = 1,
) -> NDArrayFloat:
    """
    Approximate the jacobian of `fm` at `x` with central finite differences.

    Parameters
    ----------
    x : npt.ArrayLike
        Point at which the jacobian is evaluated.
    fm : Callable
        Function ``fm(x, *fm_args, **fm_kwargs)`` returning a scalar or an array.
    fm_args : Optional[Sequence[Any]], optional
        Positional arguments for `fm`. The default is None.
    fm_kwargs : Optional[Dict[str, Any]], optional
        Keyword arguments for `fm`. The default is None.
    eps : Optional[float], optional
        The step. If None, it is the cubic root of the machine epsilon scaled by
        the magnitude of each value. The default is None.
    accuracy : int, optional
        Number of points to use for the finite difference approximation.
        Possible values are 0 (2 points), 1 (4 points), 2 (6 points),
        3 (8 points). The default is 0.
    max_workers : int, optional
        Number of processes used. If different from one, the calculation relies on
        multi-processing and `fm` must be picklable. The default is 1.

    Returns
    -------
    NDArrayFloat
        Jacobian with shape (output shape + input shape).
    """
    if accuracy not in _STENCILS:
        raise ValueError("The accuracy should be 0, 1, 2 or 3!")
    _x = np.array(x, dtype=np.float64)
    if fm_args is None:
        fm_args = ()
    if fm_kwargs is None:
        fm_kwargs = {}

    if eps is None:
        steps = _get_default_eps(_x).ravel()
    else:
        steps = np.full(_x.size, eps)

    offsets, coefs = _STENCILS[accuracy]
    tasks = [
        (index, offset) for index in range(_x.size) for offset in offsets
    ]

    if max_workers > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(
                    _eval_shifted,
                    _x,
                    index,
                    offset * steps[index],
                    fm,
                    fm_args,
                    fm_kwargs,
                )
                for index, offset in tasks
            ]
            values = [future.result() for future in futures]
    else:
        values = [
            _eval_shifted(_x, index, offset * steps[index], fm, fm_args, fm_kwargs)
            for index, offset in tasks
        ]

    n_pts = len(offsets)
    derivatives = []
    for index in range(_x.size):
        _vals = values[index * n_pts : (index + 1) * n_pts]
        derivatives.append(
            sum(coef * val for coef, val in zip(coefs, _vals)) / steps[index]
        )

    out_shape = derivatives[0].shape
    return np.moveaxis(np.array(derivatives), 0, -1).reshape(out_shape + _x.shape)


def finite_gradient(
    x: npt.ArrayLike,
    fm: Callable,
    fm_args: Optional[Sequence[Any]] = None,
    fm_kwargs: Optional[Dict[str, Any]] = None,
    eps: Optional[float] = None,
    accuracy: int = 0,
    max_workers: int = 1,
) -> NDArrayFloat:
    """
    Approximate the gradient of the scalar function `fm` at `x`.

    See :func:`finite_jacobian` for the parameters. The returned gradient has the
    shape of `x`.
    """
    grad = finite_jacobian(
        x,
        fm,
        fm_args=fm_args,
        fm_kwargs=fm_kwargs,
        eps=eps,
        accuracy=accuracy,
        max_workers=max_workers,
    )
    if grad.shape != np.shape(x):
        raise ValueError("The function fm must return a scalar value!")
    return grad


def is_all_close(
    v1: npt.ArrayLike, v2: npt.ArrayLike, rtol: float = 1e-5, atol: float = 1e-8
) -> bool:
    """
    Return whether two arrays have the same shape and close values.

    The absolute tolerance is relative to the largest absolute value of `v2` so
    that the check does not depend on the scale of the compared quantities.
    """
    _v1 = np.asarray(v1, dtype=np.float64)
    _v2 = np.asarray(v2, dtype=np.float64)
    if _v1.shape != _v2.shape:
        return False
    scale = max(float(np.max(np.abs(_v2), initial=0.0)), 1.0)
    return bool(np.allclose(_v1, _v2, rtol=rtol, atol=atol * scale))


def is_gradient_correct(
    x: npt.ArrayLike,
    fm: Callable,
    grad: Callable,
    fm_args: Optional[Sequence[Any]] = None,
    fm_kwargs: Optional[Dict[str, Any]] = None,
    eps: Optional[float] = None,
    accuracy: int = 0,
    max_workers: int = 1,
    rtol: float = 1e-5,
    atol: float = 1e-6,
) -> bool:
    """
    Return whether the gradient function matches the finite differences.

    `grad` is called with the same arguments as `fm`.
    """
    if fm_args is None:
        fm_args = ()
    if fm_kwargs is None:
        fm_kwargs = {}
    _x = np.array(x, dtype=np.float64)
    return is_all_close(
        grad(_x, *fm_args, **fm_kwargs),
        finite_gradient(
            _x,
            fm,
            fm_args=fm_args,
            fm_kwargs=fm_kwargs,
            eps=eps,
            accuracy=accuracy,
            max_workers=max_workers,
        ),
        rtol=rtol,
        atol=atol,
    )


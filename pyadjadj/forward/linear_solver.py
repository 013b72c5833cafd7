# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 Antoine COLLET

"""
Solve sparse linear systems with several right hand sides.

Two strategies are available:

- direct: one sparse LU factorization per batch, reused for all columns,
- iterative: one preconditioned GMRES per column with a budget of matrix-vector
  products proportional to the size of the system.

Failures are never silent: a singular matrix, a non converged column or a non
finite solution raise a :class:`~pyadjadj.exceptions.SolveError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np
import numpy.typing as npt
from scipy.sparse import csc_array, csc_matrix
from scipy.sparse.linalg import gmres, splu

from pyadjadj.exceptions import DimensionError, SolveError
from pyadjadj.utils.callbacks import Callback
from pyadjadj.utils.dataclass import register_params_ds
from pyadjadj.utils.enum import StrEnum
from pyadjadj.utils.operators import get_super_ilu_preconditioner
from pyadjadj.utils.types import NDArrayFloat, as_column_matrix


class LinearSolverType(StrEnum):
    DIRECT = "direct"
    ITERATIVE = "iterative"


linear_solver_config_params_ds = """
    solver_type: LinearSolverType
        Direct (sparse LU) or iterative (GMRES + ILU) solver.
        The default is direct.
    rtol: float
        Relative tolerance of the iterative solver. The default is 1e-10.
    max_mv_products_factor: float
        The iterative solver may perform at most
        `max_mv_products_factor` x n_cols(A) matrix-vector products per column.
        The default is 2.0.
    restart: int
        Number of inner iterations between GMRES restarts. The default is 50.
    ilu_drop_tol: float
        Drop tolerance of the incomplete LU preconditioner. The default is 1e-6.
    ilu_fill_factor: float
        Fill factor of the incomplete LU preconditioner. The default is 20.
    """


@register_params_ds(linear_solver_config_params_ds)
@dataclass
class LinearSolverConfig:
    """
    Configuration of the linear solves.

    Parameters
    ----------
    """

    solver_type: LinearSolverType = LinearSolverType.DIRECT
    rtol: float = 1e-10
    max_mv_products_factor: float = 2.0
    restart: int = 50
    ilu_drop_tol: float = 1e-6
    ilu_fill_factor: float = 20.0


def _check_solution(res: NDArrayFloat) -> NDArrayFloat:
    if not np.all(np.isfinite(res)):
        raise SolveError("The solution of the linear system is not finite!")
    return res


def solve_direct(mat: Union[csc_array, csc_matrix], rhs: NDArrayFloat) -> NDArrayFloat:
    """Solve mat @ X = rhs with a single sparse LU factorization."""
    try:
        lu = splu(csc_matrix(mat))
    except RuntimeError as err:  # The Factor is exactly singular
        raise SolveError(f"The matrix is singular: {err}") from err
    return _check_solution(lu.solve(rhs))


def get_gmres_limits(n: int, config: LinearSolverConfig) -> Tuple[int, int, int]:
    """
    Return the matrix-vector products budget, the restart and the max cycles.

    Each GMRES cycle performs one product for its residual plus one per inner
    iteration, so that `maxiter * (restart + 1)` never exceeds the budget (except
    for budgets below two products, where a single minimal cycle is allowed).
    """
    max_mv_products = max(1, int(config.max_mv_products_factor * n))
    restart = max(1, min(config.restart, n, max_mv_products - 1))
    maxiter = max(1, max_mv_products // (restart + 1))
    return max_mv_products, restart, maxiter


def solve_iterative(
    mat: Union[csc_array, csc_matrix],
    rhs: NDArrayFloat,
    config: LinearSolverConfig,
) -> NDArrayFloat:
    """Solve mat @ X = rhs column by column with GMRES."""
    super_ilu, preconditioner = get_super_ilu_preconditioner(
        mat, drop_tol=config.ilu_drop_tol, fill_factor=config.ilu_fill_factor
    )
    if super_ilu is None:
        raise SolveError("SuperILU: the matrix is singular!")

    # gmres maxiter counts restart cycles
    max_mv_products, restart, maxiter = get_gmres_limits(mat.shape[1], config)

    res = np.zeros_like(rhs)
    callback = Callback()
    for j in range(rhs.shape[1]):
        callback.clear()
        res[:, j], exit_code = gmres(
            mat,
            rhs[:, j],
            x0=super_ilu.solve(rhs[:, j]),
            M=preconditioner,
            rtol=config.rtol,
            atol=0.0,
            restart=restart,
            maxiter=maxiter,
            callback=callback,
            callback_type="pr_norm",
        )
        logging.debug(f"Number of it for gmres (column {j}) {callback.itercount()}")
        if exit_code > 0:
            raise SolveError(
                f"GMRES did not converge for column {j} within {max_mv_products} "
                f"matrix-vector products (rtol={config.rtol})!"
            )
        if exit_code < 0:
            raise SolveError(f"GMRES: illegal input or breakdown for column {j}!")
    return _check_solution(res)


def solve_linear_system(
    mat: Union[csc_array, csc_matrix],
    rhs: npt.ArrayLike,
    config: LinearSolverConfig,
) -> NDArrayFloat:
    """
    Solve mat @ X = rhs for a matrix of right hand sides.

    Parameters
    ----------
    mat : Union[csc_array, csc_matrix]
        Square sparse matrix.
    rhs : npt.ArrayLike
        Right hand sides with shape (n,) or (n, n_cols).
    config : LinearSolverConfig
        Solver configuration.

    Returns
    -------
    NDArrayFloat
        Solutions with shape (n, n_cols).

    Raises
    ------
    DimensionError
        If the matrix is not square or does not match the right hand sides.
    SolveError
        If the system cannot be solved.
    """
    _rhs = as_column_matrix(rhs)
    if mat.shape[0] != mat.shape[1]:
        raise DimensionError(f"The matrix must be square, got shape {mat.shape}!")
    if _rhs.shape[0] != mat.shape[0]:
        raise DimensionError(
            f"The right hand sides have {_rhs.shape[0]} rows but the matrix has "
            f"shape {mat.shape}!"
        )
    if config.solver_type == LinearSolverType.DIRECT:
        return solve_direct(mat, _rhs)
    return solve_iterative(mat, _rhs, config)

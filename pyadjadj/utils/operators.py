"""Provide preconditioning operators for sparse linear systems."""

from typing import Optional, Tuple, Union

from scipy.sparse import csc_array, csc_matrix
from scipy.sparse.linalg import LinearOperator, SuperLU, spilu

from pyadjadj.utils.types import NDArrayFloat


def get_super_ilu_preconditioner(
    mat: Union[csc_array, csc_matrix], **kwargs
) -> Tuple[Optional[SuperLU], Optional[LinearOperator]]:
    """
    Get an incomplete LU preconditioner for the given sparse matrix.

    Parameters
    ----------
    mat : Union[csc_array, csc_matrix]
        Square sparse matrix to precondition.
    kwargs: Any
        Keyword arguments passed to :func:`scipy.sparse.linalg.spilu`, typically
        `drop_tol` and `fill_factor`.

    Returns
    -------
    Tuple[Optional[SuperLU], Optional[LinearOperator]]
        The incomplete factorization and the operator applying its inverse.
        Both are None if the factor is exactly singular.

    Note
    ----
    For a typical sparse matrix, the LU factors can be much less sparse than the
    original matrix (fill-in). An incomplete factorization A ≈ LU keeps the
    sparsity under control and LU is used as a preconditioner for GMRES. When
    the drop tolerance is small, ``op.solve(b)`` is also a very good initial
    guess.
    """
    try:
        op = spilu(csc_matrix(mat), **kwargs)
    except RuntimeError:  # The Factor is exactly singular
        return None, None

    def super_ilu(_x: NDArrayFloat) -> NDArrayFloat:
        return op.solve(_x)

    return op, LinearOperator(mat.shape, super_ilu)

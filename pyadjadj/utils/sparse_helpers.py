"""Helpers to compare sparse matrices."""

from typing import Union

import numpy as np
from scipy.sparse import csc_array, csc_matrix, find, sparray, spmatrix


def assert_allclose_sparse(A, B, atol=1e-8, rtol=1e-8) -> None:
    """Assert that two sparse matrices or arrays are almost equal."""
    # If you want to check matrix shapes as well
    assert np.array_equal(A.shape, B.shape)
    r1, c1, v1 = find(A)
    r2, c2, v2 = find(B)
    np.testing.assert_equal(r1, r2)
    np.testing.assert_equal(c1, c2)
    np.testing.assert_allclose(v1, v2, atol=atol, rtol=rtol)


def is_sparse_bit_identical(
    A: Union[csc_array, csc_matrix], B: Union[csc_array, csc_matrix]
) -> bool:
    """
    Return whether two compressed sparse matrices are stored identically.

    Shapes, structure (indices and pointers) and values must match exactly,
    no tolerance is applied.
    """
    if not isinstance(A, (sparray, spmatrix)) or not isinstance(B, (sparray, spmatrix)):
        raise ValueError("Both inputs must be scipy sparse matrices or arrays!")
    if A.format != B.format or A.shape != B.shape:
        return False
    return (
        np.array_equal(A.indptr, B.indptr)
        and np.array_equal(A.indices, B.indices)
        and np.array_equal(A.data, B.data)
    )

# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 Antoine COLLET

"""Provide type aliases and small conversion helpers for arrays."""

from collections.abc import Iterable
from typing import Callable, List, TypeVar, Union

import numpy as np
import numpy.typing as npt

NDArrayFloat = npt.NDArray[np.float64]
NDArrayInt = npt.NDArray[np.int64]
NDArrayBool = npt.NDArray[np.bool_]

# A scalar field given as a function of the coordinates, evaluated on arrays of
# shape (..., 2) and returning an array of shape (...).
ScalarField = Callable[[NDArrayFloat], Union[float, NDArrayFloat]]

_Object = TypeVar("_Object", bound=object)


def object_or_object_sequence_to_list(
    _input: Union[_Object, Iterable[_Object]],
) -> List[_Object]:
    """Convert a singleton or an iterable of this object to a list of object."""
    if isinstance(_input, Iterable):
        return list(_input)
    return [_input]


def as_column_matrix(arr: npt.ArrayLike) -> NDArrayFloat:
    """
    Return the input as a 2D float array with one column per vector.

    A 1D input of size n becomes an array of shape (n, 1).
    """
    _arr = np.asarray(arr, dtype=np.float64)
    if _arr.ndim == 1:
        return _arr.reshape(-1, 1)
    if _arr.ndim != 2:
        raise ValueError(
            f"Expected a 1D vector or a 2D matrix, got an array with {_arr.ndim} dims!"
        )
    return _arr

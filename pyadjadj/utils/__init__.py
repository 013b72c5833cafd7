"""
pyadjadj submodule providing tools and utilities for other submodules.

.. currentmodule:: pyadjadj.utils.dataclass

Working with dataclasses
^^^^^^^^^^^^^^^^^^^^^^^^

Utilities for python dataclasses.

.. autosummary::
   :toctree: _autosummary

    register_params_ds

.. currentmodule:: pyadjadj.utils.enum

Working string enums
^^^^^^^^^^^^^^^^^^^^

Provide a str enum class.

.. autosummary::
   :toctree: _autosummary

    StrEnum

.. currentmodule:: pyadjadj.utils.finite_differences

Finite differences
^^^^^^^^^^^^^^^^^^

Approximation of gradients and jacobians used to check the adjoint gradients.

.. autosummary::
   :toctree: _autosummary

    finite_gradient
    finite_jacobian
    is_all_close
    is_gradient_correct

.. currentmodule:: pyadjadj.utils.operators

Operators
^^^^^^^^^

.. autosummary::
   :toctree: _autosummary

    get_super_ilu_preconditioner

.. currentmodule:: pyadjadj.utils.sparse_helpers

Sparse matrices
^^^^^^^^^^^^^^^

.. autosummary::
   :toctree: _autosummary

    assert_allclose_sparse
    is_sparse_bit_identical

.. currentmodule:: pyadjadj.utils.types

Types
^^^^^

.. autosummary::
   :toctree: _autosummary

    NDArrayFloat
    NDArrayInt
    NDArrayBool
    ScalarField
    object_or_object_sequence_to_list
    as_column_matrix

.. currentmodule:: pyadjadj.utils

Others
^^^^^^

.. autosummary::
   :toctree: _autosummary

    Callback
    show_versions

"""

from pyadjadj.utils.callbacks import Callback
from pyadjadj.utils.dataclass import register_params_ds
from pyadjadj.utils.enum import StrEnum
from pyadjadj.utils.finite_differences import (
    finite_gradient,
    finite_jacobian,
    is_all_close,
    is_gradient_correct,
)
from pyadjadj.utils.operators import get_super_ilu_preconditioner
from pyadjadj.utils.sparse_helpers import (
    assert_allclose_sparse,
    is_sparse_bit_identical,
)
from pyadjadj.utils.types import (
    NDArrayBool,
    NDArrayFloat,
    NDArrayInt,
    ScalarField,
    as_column_matrix,
    object_or_object_sequence_to_list,
)
from pyadjadj.utils.versions import show_versions

__all__ = [
    "Callback",
    "register_params_ds",
    "StrEnum",
    "finite_gradient",
    "finite_jacobian",
    "is_all_close",
    "is_gradient_correct",
    "get_super_ilu_preconditioner",
    "assert_allclose_sparse",
    "is_sparse_bit_identical",
    "NDArrayBool",
    "NDArrayFloat",
    "NDArrayInt",
    "ScalarField",
    "as_column_matrix",
    "object_or_object_sequence_to_list",
    "show_versions",
]

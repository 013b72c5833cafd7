# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 Antoine COLLET

"""
Exceptions raised by pyadjadj.

All three are fatal for the call that raised them: nothing is retried and no
partial result is returned to the caller.
"""


class SetupError(ValueError):
    """
    Raised when a model cannot be built or updated.

    Typical causes are a malformed or unreadable mesh, incompatible function
    spaces, or a parameter vector whose length does not match the coefficient
    space.
    """


class DimensionError(ValueError):
    """Raised when arrays or forms do not match the operator or the spaces."""


class SolveError(RuntimeError):
    """
    Raised when a linear system cannot be solved.

    The matrix is singular, the iterative solver did not reach its tolerance
    within the allowed number of matrix-vector products, or the solution is not
    finite.
    """

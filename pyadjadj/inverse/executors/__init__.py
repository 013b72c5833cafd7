# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 Antoine COLLET

"""
Provide interfaces to gradient-based optimizers.

The following functionalities are directly provided on module-level.

.. currentmodule:: pyadjadj.inverse.executors

Classes
=======

Inversion executors
^^^^^^^^^^^^^^^^^^^

Two executors are provided (scipy and l-bfgs-b). Both use the adjoint-adjoint
gradient.

.. autosummary::
   :toctree: _autosummary

    BaseInversionExecutor
    BaseSolverConfig
    LBFGSBInversionExecutor
    LBFGSBSolverConfig
    ScipyInversionExecutor
    ScipySolverConfig

"""

from pyadjadj.inverse.executors.base import BaseInversionExecutor, BaseSolverConfig
from pyadjadj.inverse.executors.lbfgsb import (
    LBFGSBInversionExecutor,
    LBFGSBSolverConfig,
)
from pyadjadj.inverse.executors.scipy import (
    ScipyInversionExecutor,
    ScipySolverConfig,
)

__all__ = [
    "BaseInversionExecutor",
    "BaseSolverConfig",
    "LBFGSBInversionExecutor",
    "LBFGSBSolverConfig",
    "ScipyInversionExecutor",
    "ScipySolverConfig",
]

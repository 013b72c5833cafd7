"""
Implement an interface to solve the inverse problem with the pure python L-BFGS-B.

The `lbfgsb` package is a python reimplementation of the fortran 778 algorithm
giving access to the line search parameters and to a logger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np
from lbfgsb import minimize_lbfgsb
from scipy.optimize import OptimizeResult as ScipyOptimizeResult

from pyadjadj.inverse.executors.base import (
    BaseInversionExecutor,
    BaseSolverConfig,
    base_solver_config_params_ds,
)
from pyadjadj.utils import register_params_ds
from pyadjadj.utils.types import NDArrayFloat

lbfgsb_solver_config_params_ds = r"""maxcor: int
        The maximum number of variable metric corrections used to define the limited
        memory matrix. The default is 10.
    ftarget: Optional[float]
        Stop when the objective function is below this value. The default is None.
    ftol: float
        Stop when the relative reduction of the objective function is below this
        value. The default is 1e-5.
    gtol: float
        Stop when the max norm of the projected gradient is below this value.
        The default is 1e-5.
    maxiter: int
        Maximum number of iterations. The default is 50.
    maxfun: int
        Maximum number of objective function evaluations. The default is 100.
    iprint: int
        Verbosity of the solver. The default is -1.
    maxls: int
        Maximum number of line search steps per iteration. The default is 20.
    ftol_linesearch: float
        Specify a nonnegative tolerance for the sufficient decrease condition
        (Armijo condition) of the line search. The default is 1e-4.
    gtol_linesearch: float
        Specify a nonnegative tolerance for the curvature condition of the line
        search. The default is 0.9.
    max_steplength: float
        Maximum steplength allowed. The default is 1e8.
    xtol_linesearch: float
        Specify a nonnegative relative tolerance for an acceptable step in the line
        search procedure. The default is 1e-5.
    eps_SY: float
        Parameter used for updating the L-BFGS matrices. The default is 2.2e-16.
    """


@register_params_ds(lbfgsb_solver_config_params_ds)
@register_params_ds(base_solver_config_params_ds)
@dataclass
class LBFGSBSolverConfig(BaseSolverConfig):
    r"""
    Configuration for the pure python L-BFGS-B.

    Parameters
    ----------
    """

    maxcor: int = 10
    ftarget: Optional[float] = None
    ftol: float = 1e-5
    gtol: float = 1e-5
    maxiter: int = 50
    maxfun: int = 100
    iprint: int = -1
    maxls: int = 20
    ftol_linesearch: float = 1e-4
    gtol_linesearch: float = 0.9
    max_steplength: float = 1e8
    xtol_linesearch: float = 1e-5
    eps_SY: float = 2.2e-16


class LBFGSBInversionExecutor(BaseInversionExecutor[LBFGSBSolverConfig]):
    """Represent a inversion executor instance using the pure python L-BFGS-B."""

    def _init_solver(self, theta_init: NDArrayFloat) -> None:
        """Nothing to initialize for L-BFGS-B."""

    def _get_solver_name(self) -> str:
        """Return the solver name."""
        return "L-BFGS-B (lbfgsb)"

    def get_display_dict(self) -> Dict[str, Any]:
        return {
            "Number of gradient kept in memory": self.solver_config.maxcor,
            "Maximum number of iterations": self.solver_config.maxiter,
            "Maximum number of forward calls": self.solver_config.maxfun,
        }

    def get_bounds(self) -> NDArrayFloat:
        """Return the bounds, unbounded (+/- inf) if none are configured."""
        bounds = super().get_bounds()
        if bounds is None:
            return np.repeat(np.array([[-np.inf, np.inf]]), self.n_params, axis=0)
        return bounds

    def run(self) -> ScipyOptimizeResult:
        """Run the inversion and return the optimization result."""
        super().run()
        return minimize_lbfgsb(
            x0=self.theta_init,
            fun=self.eval_loss,
            jac=self.eval_loss_gradient,  # type: ignore
            bounds=self.get_bounds(),
            maxcor=self.solver_config.maxcor,
            ftarget=self.solver_config.ftarget,
            ftol=self.solver_config.ftol,
            gtol=self.solver_config.gtol,
            maxiter=self.solver_config.maxiter,
            maxfun=self.solver_config.maxfun,
            iprint=self.solver_config.iprint,
            maxls=self.solver_config.maxls,
            max_steplength=self.solver_config.max_steplength,
            ftol_linesearch=self.solver_config.ftol_linesearch,
            gtol_linesearch=self.solver_config.gtol_linesearch,
            xtol_linesearch=self.solver_config.xtol_linesearch,
            eps_SY=self.solver_config.eps_SY,
            logger=logging.getLogger("L-BFGS-B"),
        )

"""
Implement the interface for the scipy inversion executor.

See https://docs.scipy.org/doc/scipy/reference/generated/scipy.optimize.minimize.html
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Dict, Optional

from scipy.optimize import OptimizeResult as ScipyOptimizeResult
from scipy.optimize import minimize as scipy_minimize

from pyadjadj.inverse.executors.base import (
    BaseInversionExecutor,
    BaseSolverConfig,
    base_solver_config_params_ds,
)
from pyadjadj.utils import register_params_ds
from pyadjadj.utils.types import NDArrayFloat

scipy_solver_config_params_ds = r"""solver_name: str = "L-BFGS-B"
        Name of the `scipy.optimize.minimize` method to use. It must be a
        gradient-based method. The default is "L-BFGS-B".
    solver_options: Optional[Dict[str, Any]]
        Options passed to scipy.optimize.minimize. The default is None.
    """


@register_params_ds(scipy_solver_config_params_ds)
@register_params_ds(base_solver_config_params_ds)
@dataclass
class ScipySolverConfig(BaseSolverConfig):
    """
    Configuration for Scipy solvers.

    Parameters
    ----------
    """

    solver_name: str = "L-BFGS-B"
    solver_options: Optional[Dict[str, Any]] = None


class ScipyInversionExecutor(BaseInversionExecutor[ScipySolverConfig]):
    """Represent a inversion executor instance using scipy's solvers."""

    def _init_solver(self, theta_init: NDArrayFloat) -> None:
        """Nothing to initialize for scipy."""

    def _get_solver_name(self) -> str:
        """Return the solver name."""
        return self.solver_config.solver_name

    def get_display_dict(self) -> Dict[str, Any]:
        return {"Solver options": self._get_options_dict()}

    def _get_options_dict(self) -> Dict[str, Any]:
        if self.solver_config.solver_options is not None:
            return copy.deepcopy(self.solver_config.solver_options)
        return {}

    def run(self) -> ScipyOptimizeResult:
        """Run the inversion and return the scipy optimization result."""
        super().run()
        return scipy_minimize(
            self.eval_loss,
            self.theta_init,
            bounds=self.get_bounds(),
            method=self.solver_config.solver_name,
            jac=self.eval_loss_gradient,
            options=self._get_options_dict(),
        )

# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 Antoine COLLET

r"""
Provide the forward model: the discrete Nitsche-Poisson operator and its solves.

With :math:`A(m)` the operator assembled from :func:`~pyadjadj.forward.a`,
:math:`B` the excitation matrix (one column per excitation) and :math:`C` the
extraction matrix (one column per extraction), the model provides

- forward solutions :math:`X` with :math:`A X = -B`,
- adjoint solutions :math:`\Lambda` with :math:`A^{T} \Lambda = -C`,
- measurements :math:`D = B^{T} \Lambda = X^{T} C`, with shape
  (n_excitations, n_extractions).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import numpy as np
import numpy.typing as npt
from scipy.sparse import csc_array

from pyadjadj.exceptions import DimensionError, SetupError
from pyadjadj.fem import (
    Function,
    FunctionSpace,
    TestFunction,
    TriMesh,
    TrialFunction,
    assemble_bilinear,
    assemble_linear,
    get_cell_volumes,
    load_mesh,
    make_space,
    project,
)
from pyadjadj.forward.linear_solver import LinearSolverConfig, solve_linear_system
from pyadjadj.forward.weak_forms import NitscheParameters, a, b, c, get_nitsche_parameters
from pyadjadj.utils.enum import StrEnum
from pyadjadj.utils.types import (
    NDArrayFloat,
    ScalarField,
    object_or_object_sequence_to_list,
)


class ModelState(StrEnum):
    STALE = "stale"
    CURRENT = "current"


@dataclass
class SolveStats:
    """
    Counters of the linear solves performed by a model.

    A batch is one call to the linear solver with a matrix of right hand sides,
    whatever the number of columns.
    """

    n_operator_batches: int = 0
    n_transposed_batches: int = 0
    n_operator_columns: int = 0
    n_transposed_columns: int = 0
    n_assemblies: int = 0

    @property
    def n_batches(self) -> int:
        """Return the total number of solve batches."""
        return self.n_operator_batches + self.n_transposed_batches

    def reset(self) -> None:
        """Reset all counters to zero."""
        self.n_operator_batches = 0
        self.n_transposed_batches = 0
        self.n_operator_columns = 0
        self.n_transposed_columns = 0
        self.n_assemblies = 0


def _read_only(arr: Optional[NDArrayFloat]) -> Optional[NDArrayFloat]:
    if arr is None:
        return None
    view = arr.view()
    view.flags.writeable = False
    return view


class ForwardModel:
    """
    Represent the forward operator mapping coefficient dofs to measurements.

    A model is mutable shared state: a single coefficient field is current at a
    time and calls must be serialized by the caller.

    Attributes
    ----------
    mesh: TriMesh
        The mesh of the domain.
    U: FunctionSpace
        Trial space of the state (P1, H1).
    V: FunctionSpace
        Test space of the state. It is the same object as `U`.
    M: FunctionSpace
        Coefficient space (P0, L2 by default).
    m: Function
        Current coefficient field.
    pars: NitscheParameters
        Integration context of the weak forms.
    A: csc_array
        Operator assembled from the current coefficient field.
    AT: csc_array
        Exact transpose of `A`.
    B: NDArrayFloat
        Excitation matrix with shape (n_dofs(V), n_excitations).
    C: NDArrayFloat
        Extraction matrix with shape (n_dofs(V), n_extractions).
    state: ModelState
        STALE until the first call to `set_params`, CURRENT afterwards.
    solver_config: LinearSolverConfig
        Configuration of the linear solves.
    solve_stats: SolveStats
        Counters of the linear solves.
    """

    __slots__ = [
        "mesh",
        "U",
        "V",
        "M",
        "m",
        "pars",
        "A",
        "AT",
        "B",
        "C",
        "state",
        "solver_config",
        "solve_stats",
        "_params",
        "_last_forward_solutions",
        "_last_adjoint_solutions",
        "_last_gradient_solutions",
    ]

    def __init__(
        self,
        mesh: Union[TriMesh, str, Path],
        excitations: Union[ScalarField, Sequence[ScalarField]],
        extractions: Union[ScalarField, Sequence[ScalarField]],
        m_order: int = 0,
        quadrature_degree: int = 2,
        penalty: float = 10.0,
        solver_config: Optional[LinearSolverConfig] = None,
    ) -> None:
        """
        Initialize the instance.

        Parameters
        ----------
        mesh : Union[TriMesh, str, Path]
            The mesh or the path to a mesh file readable by meshio.
        excitations : Union[ScalarField, Sequence[ScalarField]]
            Dirichlet data of each excitation.
        extractions : Union[ScalarField, Sequence[ScalarField]]
            Weight function of each extraction.
        m_order : int, optional
            Order of the coefficient space: 0 (P0, L2) or 1 (P1, H1).
            The default is 0.
        quadrature_degree : int, optional
            Degree of the quadrature rules, by default 2.
        penalty : float, optional
            Dimensionless Nitsche penalty, by default 10.0.
        solver_config : Optional[LinearSolverConfig], optional
            Configuration of the linear solves. If None, the default direct solver
            is used. The default is None.

        Raises
        ------
        SetupError
            If the mesh cannot be loaded or the spaces are incompatible.
        DimensionError
            If there is no excitation or no extraction, or if the assembled
            matrices do not match the operator.
        """
        if isinstance(mesh, (str, Path)):
            mesh = load_mesh(mesh)
        excitations = object_or_object_sequence_to_list(excitations)
        extractions = object_or_object_sequence_to_list(extractions)
        if len(excitations) == 0:
            raise DimensionError("At least one excitation must be provided!")
        if len(extractions) == 0:
            raise DimensionError("At least one extraction must be provided!")

        self.mesh: TriMesh = mesh
        self.U: FunctionSpace = make_space(mesh, "lagrangian", 1, "H1")
        self.V: FunctionSpace = self.U
        self.M: FunctionSpace = make_space(
            mesh, "lagrangian", m_order, "L2" if m_order == 0 else "H1"
        )
        if self.M.mesh is not self.U.mesh:
            raise SetupError("The coefficient and state spaces must share the mesh!")

        self.pars: NitscheParameters = get_nitsche_parameters(
            mesh, quadrature_degree, penalty
        )
        self.solver_config: LinearSolverConfig = (
            solver_config if solver_config is not None else LinearSolverConfig()
        )
        self.solve_stats: SolveStats = SolveStats()

        self._params: NDArrayFloat = np.ones(self.M.n_dofs)
        self.m: Function = Function(self.M, self._params)
        self._assemble_operator()

        v = TestFunction(self.V)
        self.B: NDArrayFloat = np.column_stack(
            [assemble_linear(b(v, self.m, g, self.pars), self.V) for g in excitations]
        )
        self.C: NDArrayFloat = np.column_stack(
            [assemble_linear(c(v, self.m, mu, self.pars), self.V) for mu in extractions]
        )
        self._check_dimensions()

        self.state: ModelState = ModelState.STALE
        self._clear_solutions()

    def _check_dimensions(self) -> None:
        if self.A.shape != (self.V.n_dofs, self.U.n_dofs):
            raise DimensionError(
                f"The operator has shape {self.A.shape} but the spaces have "
                f"({self.V.n_dofs}, {self.U.n_dofs}) dofs!"
            )
        if self.B.shape[0] != self.A.shape[0]:
            raise DimensionError(
                f"The excitation matrix has {self.B.shape[0]} rows but the operator "
                f"has shape {self.A.shape}!"
            )
        if self.C.shape[0] != self.A.shape[1]:
            raise DimensionError(
                f"The extraction matrix has {self.C.shape[0]} rows but the operator "
                f"has shape {self.A.shape}!"
            )

    def _assemble_operator(self) -> None:
        self.A: csc_array = assemble_bilinear(
            a(TrialFunction(self.U), TestFunction(self.V), self.m, self.pars),
            self.U,
            self.V,
        )
        self.AT: csc_array = csc_array(self.A.T)
        self.AT.sort_indices()
        self.solve_stats.n_assemblies += 1

    def _clear_solutions(self) -> None:
        self._last_forward_solutions: Optional[NDArrayFloat] = None
        self._last_adjoint_solutions: Optional[NDArrayFloat] = None
        self._last_gradient_solutions: Optional[NDArrayFloat] = None

    @property
    def n_excitations(self) -> int:
        """Return the number of excitations."""
        return self.B.shape[1]

    @property
    def n_extractions(self) -> int:
        """Return the number of extractions."""
        return self.C.shape[1]

    @property
    def n_params(self) -> int:
        """Return the number of coefficient dofs."""
        return self.M.n_dofs

    @property
    def params(self) -> NDArrayFloat:
        """Return a copy of the current coefficient dofs."""
        return self._params.copy()

    @property
    def coefficient_coordinates(self) -> NDArrayFloat:
        """Return the coordinates of the coefficient dofs with shape (n_params, 2)."""
        return self.M.dof_coordinates

    @property
    def last_forward_solutions(self) -> Optional[NDArrayFloat]:
        """Return the last forward solutions X (read-only) or None."""
        return _read_only(self._last_forward_solutions)

    @property
    def last_adjoint_solutions(self) -> Optional[NDArrayFloat]:
        """Return the last adjoint solutions Lambda (read-only) or None."""
        return _read_only(self._last_adjoint_solutions)

    @property
    def last_gradient_solutions(self) -> Optional[NDArrayFloat]:
        """Return the last second-adjoint solutions (read-only) or None."""
        return _read_only(self._last_gradient_solutions)

    def set_params(self, p: npt.ArrayLike) -> None:
        """
        Set the coefficient dofs and reassemble the operator and its transpose.

        Calling it twice with the same `p` gives bit-identical matrices. All cached
        solutions are dropped.

        Raises
        ------
        SetupError
            If `p` is not a vector of size n_dofs(M).
        """
        _p = np.asarray(p, dtype=np.float64)
        if _p.shape != (self.M.n_dofs,):
            raise SetupError(
                f"The parameter vector must have shape ({self.M.n_dofs},), got "
                f"{_p.shape}!"
            )
        if not np.all(np.isfinite(_p)):
            raise SetupError("The parameter vector contains non finite values!")
        self._params = _p.copy()
        self.m.values[:] = self._params
        self._assemble_operator()
        self._clear_solutions()
        self.state = ModelState.CURRENT

    def is_current_for(self, p: npt.ArrayLike) -> bool:
        """Return whether the operator has been assembled for `p`."""
        return self.state == ModelState.CURRENT and np.array_equal(
            np.asarray(p, dtype=np.float64), self._params
        )

    def ensure_current(self, p: npt.ArrayLike) -> None:
        """Call `set_params` unless the model is already current for `p`."""
        if not self.is_current_for(p):
            self.set_params(p)

    def _check_current(self) -> None:
        if self.state != ModelState.CURRENT:
            raise SetupError("Parameters must be set before solving the model!")

    def solve_operator(self, rhs: npt.ArrayLike) -> NDArrayFloat:
        """Solve A @ X = rhs (one batch) for the current coefficient field."""
        self._check_current()
        res = solve_linear_system(self.A, rhs, self.solver_config)
        self.solve_stats.n_operator_batches += 1
        self.solve_stats.n_operator_columns += res.shape[1]
        return res

    def solve_transposed_operator(self, rhs: npt.ArrayLike) -> NDArrayFloat:
        """Solve A^T @ X = rhs (one batch) for the current coefficient field."""
        self._check_current()
        res = solve_linear_system(self.AT, rhs, self.solver_config)
        self.solve_stats.n_transposed_batches += 1
        self.solve_stats.n_transposed_columns += res.shape[1]
        return res

    def solve_forward_states(self) -> NDArrayFloat:
        """Solve A X = -B for the current coefficient field and cache X."""
        self._last_forward_solutions = self.solve_operator(-self.B)
        return self._last_forward_solutions

    def solve_adjoint_states(self) -> NDArrayFloat:
        """Solve A^T Lambda = -C for the current coefficient field and cache it."""
        self._last_adjoint_solutions = self.solve_transposed_operator(-self.C)
        return self._last_adjoint_solutions

    def get_cached_adjoint_solutions(self) -> Optional[NDArrayFloat]:
        """Return the adjoint solutions of the current field if already solved."""
        if self.state != ModelState.CURRENT:
            return None
        return self._last_adjoint_solutions

    def store_gradient_solutions(self, solutions: NDArrayFloat) -> None:
        """Keep the second-adjoint solutions for inspection."""
        self._last_gradient_solutions = solutions

    def forward(self, p: npt.ArrayLike) -> NDArrayFloat:
        """
        Return the forward solutions X with A(p) X = -B.

        Returns
        -------
        NDArrayFloat
            Array with shape (n_dofs(U), n_excitations).
        """
        self.set_params(p)
        return self.solve_forward_states().copy()

    def adjoint(self, p: npt.ArrayLike) -> NDArrayFloat:
        """
        Return the adjoint solutions Lambda with A(p)^T Lambda = -C.

        Returns
        -------
        NDArrayFloat
            Array with shape (n_dofs(V), n_extractions).
        """
        self.set_params(p)
        return self.solve_adjoint_states().copy()

    def measure_forward(self, p: npt.ArrayLike) -> NDArrayFloat:
        """Return the measurements X^T C computed from the forward solutions."""
        return self.forward(p).T @ self.C

    def measure_adjoint(self, p: npt.ArrayLike) -> NDArrayFloat:
        """Return the measurements B^T Lambda computed from the adjoint solutions."""
        return self.B.T @ self.adjoint(p)

    @property
    def is_adjoint_path_cheaper(self) -> bool:
        """Return whether there are no more extractions than excitations."""
        return self.n_extractions <= self.n_excitations

    def evaluate(self, p: npt.ArrayLike) -> NDArrayFloat:
        """
        Return the measurements for the coefficient dofs `p`.

        The adjoint path (n_extractions columns) is used unless there are less
        excitations than extractions. The operator is only reassembled if `p`
        differs from the current parameters, and solutions already computed for the
        current parameters are reused. The adjoint solutions are then available to
        the gradient computation without any additional solve.

        Returns
        -------
        NDArrayFloat
            Measurements with shape (n_excitations, n_extractions).
        """
        self.ensure_current(p)
        if self.is_adjoint_path_cheaper:
            if self._last_adjoint_solutions is None:
                self.solve_adjoint_states()
            return self.B.T @ self._last_adjoint_solutions
        if self._last_forward_solutions is None:
            self.solve_forward_states()
        return self._last_forward_solutions.T @ self.C

    def __call__(self, p: npt.ArrayLike) -> NDArrayFloat:
        return self.evaluate(p)

    def to_functions(self, solutions: NDArrayFloat) -> List[Function]:
        """Wrap the columns of a solution matrix as discrete functions of U."""
        return [Function(self.U, solutions[:, j]) for j in range(solutions.shape[1])]

    def get_cell_volumes(self) -> NDArrayFloat:
        """Return the area of each cell."""
        return get_cell_volumes(self.mesh)

    def interpolate_coefficient(
        self, f: Union[float, Callable[[NDArrayFloat], npt.ArrayLike]]
    ) -> NDArrayFloat:
        """Return the coefficient dofs interpolating `f`."""
        return self.M.interpolate(f)

    def project_coefficient(
        self, f: Union[float, Callable[[NDArrayFloat], npt.ArrayLike]]
    ) -> NDArrayFloat:
        """Return the coefficient dofs of the L2 projection of `f`."""
        return project(f, self.M, self.pars.dx.degree)

    def log_summary(self, logger: Optional[logging.Logger] = None) -> None:
        """Display the dimensions of the model."""
        _logger = logger if logger is not None else logging.getLogger()
        _logger.info(f"Number of nodes         = {self.mesh.n_nodes}")
        _logger.info(f"Number of cells         = {self.mesh.n_cells}")
        _logger.info(f"Number of coef dofs     = {self.M.n_dofs}")
        _logger.info(f"Number of excitations   = {self.n_excitations}")
        _logger.info(f"Number of extractions   = {self.n_extractions}")
        _logger.info(f"Nitsche penalty alpha_h = {self.pars.alpha_h}")

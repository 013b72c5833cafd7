# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 Antoine COLLET

"""
Assemble weak forms into sparse matrices, vectors and scalars.

For a bilinear form :math:`a(u, v)` with trial space U and test space V, the
assembled matrix has shape (n_dofs(V), n_dofs(U)) and its entry (i, j) is
:math:`a(\\phi_j, \\psi_i)`. Assembly is deterministic: assembling the same form
twice gives bit-identical arrays.
"""

from __future__ import annotations

from typing import Callable, Union

import numpy as np
from scipy.sparse import coo_array, csc_array
from scipy.sparse.linalg import splu

from pyadjadj.exceptions import DimensionError, SetupError
from pyadjadj.fem.forms import (
    TEST,
    TRIAL,
    Arguments,
    Expr,
    Form,
    TestFunction,
    TrialFunction,
    as_expression,
)
from pyadjadj.fem.measures import CellMeasure, Measure
from pyadjadj.fem.spaces import FunctionSpace
from pyadjadj.utils.types import NDArrayFloat, NDArrayInt


def _check_arguments(form: Form, expected: Arguments) -> None:
    for integrand, _ in form.terms:
        args = integrand.arguments
        if args.keys() != expected.keys():
            raise DimensionError(
                f"Form term depends on {sorted(args.keys())} but "
                f"{sorted(expected.keys())} was expected!"
            )
        for role, space in expected.items():
            if args[role] is not space:
                raise DimensionError(
                    f"The {role} function of the form is not defined on the "
                    "given function space!"
                )


def _integrate_term(
    integrand: Expr, measure: Measure, n_test: int, n_trial: int
) -> NDArrayFloat:
    """Return the local contributions with shape (n_entities, n_test, n_trial)."""
    values = integrand.evaluate(measure)
    values = np.broadcast_to(
        values, (measure.n_entities, measure.n_quad_points, n_test, n_trial)
    )
    return np.einsum("eqij,eq->eij", values, measure.weights)


def _get_local_dofs(space: FunctionSpace, measure: Measure) -> NDArrayInt:
    if space.mesh is not measure.mesh:
        raise DimensionError("Form measure and function space meshes differ!")
    return space.cell_dofs[measure.cells]


def assemble_bilinear(
    form: Form, trial_space: FunctionSpace, test_space: FunctionSpace
) -> csc_array:
    """
    Assemble a bilinear form into a sparse matrix.

    Parameters
    ----------
    form : Form
        Form linear with respect to a trial function of `trial_space` and a test
        function of `test_space`.
    trial_space : FunctionSpace
        Space of the columns.
    test_space : FunctionSpace
        Space of the rows.

    Returns
    -------
    csc_array
        Matrix with shape (n_dofs(test_space), n_dofs(trial_space)), in canonical
        format (sorted indices, no duplicates).

    Raises
    ------
    DimensionError
        If the form arguments do not match the given spaces.
    """
    _check_arguments(form, {TEST: test_space, TRIAL: trial_space})

    rows, cols, data = [], [], []
    for integrand, measure in form.terms:
        local = _integrate_term(
            integrand, measure, test_space.n_local_dofs, trial_space.n_local_dofs
        )
        test_dofs = _get_local_dofs(test_space, measure)
        trial_dofs = _get_local_dofs(trial_space, measure)
        rows.append(np.broadcast_to(test_dofs[:, :, np.newaxis], local.shape).ravel())
        cols.append(np.broadcast_to(trial_dofs[:, np.newaxis, :], local.shape).ravel())
        data.append(local.ravel())

    mat = coo_array(
        (np.concatenate(data), (np.concatenate(rows), np.concatenate(cols))),
        shape=(test_space.n_dofs, trial_space.n_dofs),
    ).tocsc()
    mat.sum_duplicates()
    mat.sort_indices()
    return mat


def assemble_linear(form: Form, test_space: FunctionSpace) -> NDArrayFloat:
    """
    Assemble a linear form into a dense vector of size n_dofs(test_space).

    Raises
    ------
    DimensionError
        If the form does not depend (only) on a test function of `test_space`.
    """
    _check_arguments(form, {TEST: test_space})

    vec = np.zeros(test_space.n_dofs, dtype=np.float64)
    for integrand, measure in form.terms:
        local = _integrate_term(integrand, measure, test_space.n_local_dofs, 1)
        vec += np.bincount(
            _get_local_dofs(test_space, measure).ravel(),
            weights=local[:, :, 0].ravel(),
            minlength=test_space.n_dofs,
        )
    return vec


def assemble_scalar(form: Form) -> float:
    """Integrate a form without test nor trial function."""
    _check_arguments(form, {})
    return float(
        sum(
            np.sum(_integrate_term(integrand, measure, 1, 1))
            for integrand, measure in form.terms
        )
    )


def get_mass_matrix(space: FunctionSpace, degree: int = 2) -> csc_array:
    r"""Return the L2 mass matrix :math:`\int u v \, d\Omega` of the space."""
    dx = CellMeasure(space.mesh, degree)
    return assemble_bilinear(
        TrialFunction(space) * TestFunction(space) * dx, space, space
    )


def project_functional(
    space: FunctionSpace, functional: NDArrayFloat, degree: int = 2
) -> NDArrayFloat:
    r"""
    Return the L2 Riesz representative of a linear functional over the space.

    Solve :math:`M y = f` with :math:`M` the mass matrix and :math:`f` the
    assembled functional.

    Raises
    ------
    SetupError
        If the mass matrix cannot be factorized. It is symmetric positive definite
        for the supported spaces so that a failure means a broken setup.
    """
    _functional = np.asarray(functional, dtype=np.float64)
    if _functional.shape[0] != space.n_dofs:
        raise DimensionError(
            f"The functional has {_functional.shape[0]} values but the space has "
            f"{space.n_dofs} dofs!"
        )
    try:
        res = splu(get_mass_matrix(space, degree)).solve(_functional)
    except RuntimeError as err:
        raise SetupError(f"The mass matrix of {space} is singular!") from err
    if not np.all(np.isfinite(res)):
        raise SetupError(f"The L2 projection on {space} is not finite!")
    return res


def project(
    f: Union[float, Callable[[NDArrayFloat], NDArrayFloat], Expr],
    space: FunctionSpace,
    degree: int = 2,
) -> NDArrayFloat:
    """
    Return the dof values of the L2 projection of a field on the space.

    Parameters
    ----------
    f : Union[float, Callable[[NDArrayFloat], NDArrayFloat], Expr]
        A constant, a function of the coordinates or a scalar expression without
        test nor trial function.
    space : FunctionSpace
        Target space.
    degree : int, optional
        Quadrature degree, by default 2.
    """
    expr = as_expression(f)
    if expr is None:
        raise SetupError(f"Cannot project an object of type {type(f)}!")
    dx = CellMeasure(space.mesh, degree)
    return project_functional(
        space, assemble_linear(expr * TestFunction(space) * dx, space), degree
    )


"""Tests for the weak form language and the assembly."""

import numpy as np
import pytest
from pyadjadj.exceptions import DimensionError, SetupError
from pyadjadj.fem import (
    BoundaryMeasure,
    CellMeasure,
    Coefficient,
    Constant,
    FacetNormal,
    Function,
    TestFunction,
    TrialFunction,
    assemble_bilinear,
    assemble_linear,
    assemble_scalar,
    get_mass_matrix,
    grad,
    inner,
    make_disk_mesh,
    make_space,
    project,
    project_functional,
)
from pyadjadj.utils import is_sparse_bit_identical

mesh = make_disk_mesh(4)
P1 = make_space(mesh, "lagrangian", 1, "H1")
P0 = make_space(mesh, "lagrangian", 0, "L2")
dx = CellMeasure(mesh)
ds = BoundaryMeasure(mesh)


@pytest.mark.parametrize("space", [P0, P1])
def test_mass_matrix(space) -> None:
    mat = get_mass_matrix(space)
    assert mat.shape == (space.n_dofs, space.n_dofs)
    np.testing.assert_allclose(mat.sum(), mesh.area)
    np.testing.assert_allclose((mat - mat.T).toarray(), 0.0, atol=1e-15)
    assert mat.has_canonical_format


def test_stiffness_matrix() -> None:
    u, v = TrialFunction(P1), TestFunction(P1)
    mat = assemble_bilinear(inner(grad(u), grad(v)) * dx, P1, P1)
    # constants are in the kernel
    np.testing.assert_allclose(mat @ np.ones(P1.n_dofs), 0.0, atol=1e-12)
    np.testing.assert_allclose((mat - mat.T).toarray(), 0.0, atol=1e-12)
    # energy of a linear field
    f = P1.interpolate(lambda x: x[..., 0] + 2.0 * x[..., 1])
    np.testing.assert_allclose(f @ (mat @ f), 5.0 * mesh.area)


def test_mixed_space_matrix() -> None:
    u, q = TrialFunction(P1), TestFunction(P0)
    mat = assemble_bilinear(u * q * dx, P1, P0)
    assert mat.shape == (P0.n_dofs, P1.n_dofs)
    # each row integrates over one cell
    np.testing.assert_allclose(mat @ np.ones(P1.n_dofs), mesh.cell_areas)


def test_assembly_is_deterministic() -> None:
    m = Function(P0, np.linspace(0.1, 1.0, P0.n_dofs))
    u, v = TrialFunction(P1), TestFunction(P1)
    form = m * inner(grad(u), grad(v)) * dx + 10.0 * u * v * ds
    assert is_sparse_bit_identical(
        assemble_bilinear(form, P1, P1), assemble_bilinear(form, P1, P1)
    )


def test_assemble_linear() -> None:
    v = TestFunction(P1)
    np.testing.assert_allclose(np.sum(assemble_linear(v * dx, P1)), mesh.area)
    np.testing.assert_allclose(
        np.sum(assemble_linear(v * ds, P1)), np.sum(mesh.boundary_lengths)
    )
    vec = assemble_linear(1.0 * TestFunction(P0) * dx, P0)
    np.testing.assert_allclose(vec, mesh.cell_areas)


def test_boundary_integrals() -> None:
    n = FacetNormal()
    # divergence theorem: int_Gamma x n_x = |Omega|
    x_coord = Coefficient(lambda x: x[..., 0])
    np.testing.assert_allclose(
        assemble_scalar(x_coord * inner(n, Constant([1.0, 0.0])) * ds), mesh.area
    )
    # int_Gamma n = 0
    np.testing.assert_allclose(
        assemble_scalar(inner(n, Constant([0.0, 1.0])) * ds), 0.0, atol=1e-14
    )
    # normal derivative of a linear field: int_Gamma grad(f).n = 0
    f = Function(P1, P1.interpolate(lambda x: 3.0 * x[..., 0] - x[..., 1]))
    np.testing.assert_allclose(
        assemble_scalar(inner(grad(f), n) * ds), 0.0, atol=1e-12
    )


def test_form_operations() -> None:
    u, v = TrialFunction(P1), TestFunction(P1)
    form = u * v * dx
    np.testing.assert_allclose(
        assemble_bilinear(form - form, P1, P1).toarray(), 0.0, atol=1e-15
    )
    np.testing.assert_allclose(
        assemble_bilinear(2.0 * form, P1, P1).toarray(),
        assemble_bilinear(form + form, P1, P1).toarray(),
    )
    np.testing.assert_allclose(
        assemble_bilinear(-form, P1, P1).toarray(),
        -get_mass_matrix(P1).toarray(),
    )
    # numpy scalars are handled as constants
    np.testing.assert_allclose(
        assemble_bilinear(np.float64(2.0) * u * v * dx, P1, P1).toarray(),
        assemble_bilinear(2.0 * form, P1, P1).toarray(),
    )


def test_form_errors() -> None:
    u, v = TrialFunction(P1), TestFunction(P1)

    with pytest.raises(SetupError, match="not linear with respect to the test"):
        v * v
    with pytest.raises(SetupError, match="do not depend on the same test"):
        u * v + v
    with pytest.raises(DimensionError, match="Use inner"):
        grad(u) * grad(v)
    with pytest.raises(DimensionError, match="Integrands must be scalar"):
        grad(u) * dx
    with pytest.raises(SetupError, match="The gradient is only available"):
        grad(Constant(1.0))
    with pytest.raises(SetupError, match="only defined on boundary measures"):
        assemble_scalar(inner(FacetNormal(), Constant([1.0, 0.0])) * dx)

    # spaces do not match the form
    with pytest.raises(DimensionError, match="not defined on the given function"):
        assemble_bilinear(u * v * dx, P0, P1)
    with pytest.raises(DimensionError, match="was expected"):
        assemble_linear(u * v * dx, P1)

    # measure from another mesh
    other_dx = CellMeasure(make_disk_mesh(2))
    with pytest.raises(DimensionError):
        assemble_bilinear(u * v * other_dx, P1, P1)


def test_project() -> None:
    def field(x):
        return 1.0 + x[..., 0] - 2.0 * x[..., 1]

    # linear fields are in P1
    np.testing.assert_allclose(project(field, P1), P1.interpolate(field), atol=1e-10)
    np.testing.assert_allclose(project(2.5, P0), 2.5)
    # P0 projection is the mean over each cell: exact at centroids for linear fields
    np.testing.assert_allclose(project(field, P0), P0.interpolate(field), atol=1e-12)


def test_project_functional() -> None:
    values = np.linspace(0.0, 1.0, P1.n_dofs)
    np.testing.assert_allclose(
        project_functional(P1, get_mass_matrix(P1) @ values), values, atol=1e-10
    )
    with pytest.raises(DimensionError, match="The functional has 3 values"):
        project_functional(P1, np.ones(3))

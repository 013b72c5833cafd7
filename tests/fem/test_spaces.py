import re
from contextlib import nullcontext as does_not_raise

import numpy as np
import pytest
from pyadjadj.exceptions import DimensionError, SetupError
from pyadjadj.fem import (
    CellMeasure,
    Function,
    assemble_scalar,
    grad,
    inner,
    make_disk_mesh,
    make_space,
    num_dofs,
)

mesh = make_disk_mesh(4)


def linear_field(x):
    return 1.0 + x[..., 0] - 2.0 * x[..., 1]


@pytest.mark.parametrize(
    "kind, order, conformity, expected_n_dofs, expected_exception",
    [
        ("lagrangian", 1, "H1", mesh.n_nodes, does_not_raise()),
        ("lagrangian", 0, "L2", mesh.n_cells, does_not_raise()),
        (
            "lagrangian",
            0,
            "H1",
            None,
            pytest.raises(
                SetupError,
                match=re.escape("Unsupported lagrangian space of order 0 with H1"),
            ),
        ),
        (
            "lagrangian",
            2,
            "H1",
            None,
            pytest.raises(SetupError, match="Unsupported lagrangian space of order 2"),
        ),
        (
            "nedelec",
            1,
            "H1",
            None,
            pytest.raises(SetupError, match="Unsupported element kind 'nedelec'"),
        ),
    ],
)
def test_make_space(
    kind, order, conformity, expected_n_dofs, expected_exception
) -> None:
    with expected_exception:
        space = make_space(mesh, kind, order, conformity)
        assert num_dofs(space) == expected_n_dofs
        assert space.dof_coordinates.shape == (expected_n_dofs, 2)
        assert space.cell_dofs.shape == (mesh.n_cells, space.n_local_dofs)


def test_interpolate() -> None:
    P1 = make_space(mesh, "lagrangian", 1, "H1")
    P0 = make_space(mesh, "lagrangian", 0, "L2")

    np.testing.assert_allclose(P1.interpolate(linear_field), linear_field(mesh.points))
    np.testing.assert_allclose(
        P0.interpolate(linear_field), linear_field(mesh.cell_centroids)
    )
    np.testing.assert_allclose(P0.interpolate(2.0), np.full(mesh.n_cells, 2.0))


def test_evaluate_field() -> None:
    P1 = make_space(mesh, "lagrangian", 1, "H1")
    P0 = make_space(mesh, "lagrangian", 0, "L2")
    points = np.array([[0.0, 0.0], [0.1, -0.3], [-0.45, 0.2], [2.0, 2.0]])

    # P1 reproduces linear fields
    res = P1.evaluate_field(P1.interpolate(linear_field), points)
    np.testing.assert_allclose(res[:3], linear_field(points[:3]))
    assert np.isnan(res[3])

    res = P0.evaluate_field(P0.interpolate(3.5), points)
    np.testing.assert_allclose(res[:3], 3.5)
    assert np.isnan(res[3])

    with pytest.raises(DimensionError, match="dof values"):
        P1.evaluate_field(np.ones(3), points)


def test_function_gradient() -> None:
    P1 = make_space(mesh, "lagrangian", 1, "H1")
    f = Function(P1, P1.interpolate(linear_field))
    dx = CellMeasure(mesh)

    # |grad f|^2 = 1 + 4
    np.testing.assert_allclose(
        assemble_scalar(inner(grad(f), grad(f)) * dx), 5.0 * mesh.area
    )
    # the domain is centered on the origin
    np.testing.assert_allclose(assemble_scalar(f * dx), mesh.area)
    np.testing.assert_allclose(assemble_scalar((f - 1.0) * dx), 0.0, atol=1e-12)


def test_function_wrong_size() -> None:
    P0 = make_space(mesh, "lagrangian", 0, "L2")
    with pytest.raises(DimensionError, match=f"Expected {mesh.n_cells} dof values"):
        Function(P0, np.ones(mesh.n_nodes))


def test_function_copies_values() -> None:
    P0 = make_space(mesh, "lagrangian", 0, "L2")
    values = np.ones(P0.n_dofs)
    f = Function(P0, values)
    values[0] = 2.0
    assert f.values[0] == 1.0

"""Tests for the triangular meshes."""

import re
from contextlib import nullcontext as does_not_raise

import numpy as np
import pytest
from pyadjadj.exceptions import SetupError
from pyadjadj.fem import (
    TriMesh,
    get_cell_volumes,
    load_mesh,
    make_disk_mesh,
    save_mesh,
)
from pyadjadj.fem.mesh import get_signed_areas


@pytest.mark.parametrize("n_rings", [1, 2, 3, 8])
def test_make_disk_mesh(n_rings) -> None:
    mesh = make_disk_mesh(n_rings)

    assert mesh.n_cells == 6 * n_rings**2
    assert mesh.n_nodes == 1 + 3 * n_rings * (n_rings + 1)
    assert mesh.n_boundary_edges == 6 * n_rings

    # all cells are counter-clockwise
    assert np.all(get_signed_areas(mesh.points, mesh.triangles) > 0.0)

    # the domain is the regular polygon inscribed in the unit circle
    n_sides = 6 * n_rings
    np.testing.assert_allclose(
        mesh.area, 0.5 * n_sides * np.sin(2.0 * np.pi / n_sides), rtol=1e-12
    )
    np.testing.assert_allclose(
        np.linalg.norm(mesh.points[mesh.boundary_nodes], axis=1), 1.0
    )
    np.testing.assert_allclose(
        np.sum(mesh.boundary_lengths), n_sides * 2.0 * np.sin(np.pi / n_sides)
    )
    np.testing.assert_allclose(mesh.mesh_size, np.sqrt(mesh.area / mesh.n_cells))


def test_boundary_normals_are_outward() -> None:
    mesh = make_disk_mesh(4)
    midpoints = 0.5 * (
        mesh.points[mesh.boundary_edges[:, 0]] + mesh.points[mesh.boundary_edges[:, 1]]
    )
    np.testing.assert_allclose(np.linalg.norm(mesh.boundary_normals, axis=1), 1.0)
    assert np.all(np.sum(midpoints * mesh.boundary_normals, axis=1) > 0.0)
    # normals are orthogonal to the edges
    tangents = (
        mesh.points[mesh.boundary_edges[:, 1]] - mesh.points[mesh.boundary_edges[:, 0]]
    )
    np.testing.assert_allclose(
        np.sum(tangents * mesh.boundary_normals, axis=1), 0.0, atol=1e-14
    )


def test_disk_mesh_rotation_invariance() -> None:
    n_rings = 3
    mesh = make_disk_mesh(n_rings)
    angle = np.pi / 3.0
    rot = np.array([[np.cos(angle), -np.sin(angle)], [np.sin(angle), np.cos(angle)]])

    # node k of ring i is mapped to node k + i of the same ring
    perm = [0]
    offset = 1
    for i in range(1, n_rings + 1):
        perm.extend(offset + (np.arange(6 * i) + i) % (6 * i))
        offset += 6 * i
    np.testing.assert_allclose(
        mesh.points @ rot.T, mesh.points[np.array(perm)], atol=1e-14
    )


def test_clockwise_cells_are_reoriented() -> None:
    points = [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]]
    mesh = TriMesh(points, [[0, 2, 1], [1, 2, 3]])
    assert np.all(get_signed_areas(mesh.points, mesh.triangles) > 0.0)
    np.testing.assert_allclose(mesh.cell_areas, [0.5, 0.5])
    assert mesh.n_boundary_edges == 4
    np.testing.assert_array_equal(mesh.boundary_nodes, [0, 1, 2, 3])

    # the volumes are a copy
    volumes = get_cell_volumes(mesh)
    volumes[0] = 10.0
    assert mesh.cell_areas[0] == 0.5


@pytest.mark.parametrize(
    "points, triangles, expected_exception",
    [
        ([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], [[0, 1, 2]], does_not_raise()),
        (
            [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]],
            [[0, 1, 2]],
            pytest.raises(
                SetupError,
                match=re.escape(
                    "points must be an array of shape (n_nodes, 2) with n_nodes >= 3!"
                ),
            ),
        ),
        (
            [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]],
            [[0, 1]],
            pytest.raises(
                SetupError,
                match=re.escape("triangles must be an array of shape (n_cells, 3)!"),
            ),
        ),
        (
            [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]],
            [[0, 1, 3]],
            pytest.raises(
                SetupError, match="triangles refer to nodes that do not exist!"
            ),
        ),
        (
            [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [2.0, 0.0]],
            [[0, 1, 2], [0, 1, 3]],
            pytest.raises(SetupError, match=re.escape("degenerated (flat) cells")),
        ),
        (
            [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [0.0, -1.0], [1.0, 1.0]],
            [[0, 1, 2], [0, 1, 3], [0, 1, 4]],
            pytest.raises(SetupError, match="The mesh is not conforming"),
        ),
    ],
)
def test_trimesh_errors(points, triangles, expected_exception) -> None:
    with expected_exception:
        TriMesh(points, triangles)


@pytest.mark.parametrize(
    "n_rings, radius, expected_exception",
    [
        (2, 1.0, does_not_raise()),
        (0, 1.0, pytest.raises(SetupError, match="n_rings must be a positive")),
        (2, 0.0, pytest.raises(SetupError, match="radius must be strictly positive")),
    ],
)
def test_make_disk_mesh_errors(n_rings, radius, expected_exception) -> None:
    with expected_exception:
        make_disk_mesh(n_rings, radius)


def test_save_and_load_mesh(tmp_path) -> None:
    mesh = make_disk_mesh(3)
    fpath = tmp_path.joinpath("disk.vtk")
    save_mesh(mesh, fpath)
    assert fpath.exists()

    loaded = load_mesh(fpath)
    np.testing.assert_allclose(loaded.points, mesh.points)
    np.testing.assert_array_equal(loaded.triangles, mesh.triangles)
    np.testing.assert_allclose(loaded.area, mesh.area)


def test_load_mesh_missing_file(tmp_path) -> None:
    with pytest.raises(SetupError, match="Could not read the mesh file"):
        load_mesh(tmp_path.joinpath("missing.vtk"))

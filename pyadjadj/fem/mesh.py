# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 Antoine COLLET

"""Provide unstructured triangular meshes of 2D domains."""

from __future__ import annotations

from pathlib import Path
from typing import Union

import meshio
import numpy as np
import numpy.typing as npt

from pyadjadj.exceptions import SetupError
from pyadjadj.utils.types import NDArrayFloat, NDArrayInt

# Local vertex pairs of the three edges of a triangle, counter-clockwise.
LOCAL_EDGES: NDArrayInt = np.array([[0, 1], [1, 2], [2, 0]], dtype=np.int64)


def get_signed_areas(points: NDArrayFloat, triangles: NDArrayInt) -> NDArrayFloat:
    """Return the signed areas of the triangles (positive if counter-clockwise)."""
    p0 = points[triangles[:, 0]]
    p1 = points[triangles[:, 1]]
    p2 = points[triangles[:, 2]]
    return 0.5 * (
        (p1[:, 0] - p0[:, 0]) * (p2[:, 1] - p0[:, 1])
        - (p2[:, 0] - p0[:, 0]) * (p1[:, 1] - p0[:, 1])
    )


class TriMesh:
    """
    Represent a conforming mesh of triangles in 2D.

    The cells are reoriented counter-clockwise at construction so that the
    outward normal of a boundary edge (a, b) is the tangent rotated clockwise.

    Attributes
    ----------
    points: NDArrayFloat
        Node coordinates with shape (n_nodes, 2).
    triangles: NDArrayInt
        Node indices of the cells with shape (n_cells, 3).
    cell_areas: NDArrayFloat
        Area of each cell.
    boundary_edges: NDArrayInt
        Node indices of the boundary edges with shape (n_edges, 2), oriented as in
        their parent cell.
    boundary_cells: NDArrayInt
        Parent cell of each boundary edge.
    boundary_local_vertices: NDArrayInt
        Local indices (0, 1 or 2) of the edge vertices in the parent cell.
    boundary_normals: NDArrayFloat
        Unit outward normal of each boundary edge with shape (n_edges, 2).
    boundary_lengths: NDArrayFloat
        Length of each boundary edge.
    """

    __slots__ = [
        "points",
        "triangles",
        "cell_areas",
        "boundary_edges",
        "boundary_cells",
        "boundary_local_vertices",
        "boundary_normals",
        "boundary_lengths",
    ]

    def __init__(self, points: npt.ArrayLike, triangles: npt.ArrayLike) -> None:
        """
        Initialize the instance.

        Parameters
        ----------
        points : npt.ArrayLike
            Node coordinates with shape (n_nodes, 2).
        triangles : npt.ArrayLike
            Node indices of the cells with shape (n_cells, 3).

        Raises
        ------
        SetupError
            If the arrays have wrong shapes, if indices are out of range, if a cell
            is degenerated or if an edge is shared by more than two cells.
        """
        _points = np.array(points, dtype=np.float64)
        _triangles = np.array(triangles, dtype=np.int64)

        if _points.ndim != 2 or _points.shape[1] != 2 or _points.shape[0] < 3:
            raise SetupError(
                "points must be an array of shape (n_nodes, 2) with n_nodes >= 3!"
            )
        if _triangles.ndim != 2 or _triangles.shape[1] != 3 or _triangles.size == 0:
            raise SetupError("triangles must be an array of shape (n_cells, 3)!")
        if _triangles.min() < 0 or _triangles.max() >= _points.shape[0]:
            raise SetupError("triangles refer to nodes that do not exist!")

        areas = get_signed_areas(_points, _triangles)
        if np.any(np.abs(areas) <= 1e-14 * np.max(np.abs(areas))):
            raise SetupError("The mesh contains degenerated (flat) cells!")
        # counter-clockwise orientation
        is_cw = areas < 0.0
        _triangles[is_cw] = _triangles[is_cw][:, [0, 2, 1]]

        self.points: NDArrayFloat = _points
        self.triangles: NDArrayInt = _triangles
        self.cell_areas: NDArrayFloat = np.abs(areas)
        self._build_boundary()

    def _build_boundary(self) -> None:
        """Find the edges that belong to a single cell."""
        edges = self.triangles[:, LOCAL_EDGES].reshape(-1, 2)
        keys = np.sort(edges, axis=1)
        _, inverse, counts = np.unique(
            keys, axis=0, return_inverse=True, return_counts=True
        )
        if np.any(counts > 2):
            raise SetupError("The mesh is not conforming: an edge has 3+ cells!")
        is_boundary = counts[inverse.ravel()] == 1

        self.boundary_edges: NDArrayInt = edges[is_boundary]
        self.boundary_cells: NDArrayInt = np.repeat(
            np.arange(self.n_cells, dtype=np.int64), 3
        )[is_boundary]
        self.boundary_local_vertices: NDArrayInt = np.tile(
            LOCAL_EDGES, (self.n_cells, 1)
        )[is_boundary]

        tangents = (
            self.points[self.boundary_edges[:, 1]]
            - self.points[self.boundary_edges[:, 0]]
        )
        self.boundary_lengths: NDArrayFloat = np.linalg.norm(tangents, axis=1)
        self.boundary_normals: NDArrayFloat = (
            np.column_stack((tangents[:, 1], -tangents[:, 0]))
            / self.boundary_lengths[:, np.newaxis]
        )

    @property
    def n_nodes(self) -> int:
        """Return the number of nodes."""
        return self.points.shape[0]

    @property
    def n_cells(self) -> int:
        """Return the number of cells."""
        return self.triangles.shape[0]

    @property
    def n_boundary_edges(self) -> int:
        """Return the number of boundary edges."""
        return self.boundary_edges.shape[0]

    @property
    def area(self) -> float:
        """Return the area of the domain."""
        return float(np.sum(self.cell_areas))

    @property
    def mesh_size(self) -> float:
        """Return the typical cell size sqrt(area / n_cells)."""
        return float(np.sqrt(self.area / self.n_cells))

    @property
    def cell_centroids(self) -> NDArrayFloat:
        """Return the centroids of the cells with shape (n_cells, 2)."""
        return np.mean(self.points[self.triangles], axis=1)

    @property
    def boundary_nodes(self) -> NDArrayInt:
        """Return the sorted indices of the boundary nodes."""
        return np.unique(self.boundary_edges)

    def get_cell_jacobians(self) -> NDArrayFloat:
        """
        Return the jacobians of the affine maps from the reference cell.

        The reference cell has vertices (0, 0), (1, 0) and (0, 1). The returned
        array has shape (n_cells, 2, 2) and its columns are the cell edge vectors
        (p1 - p0) and (p2 - p0).
        """
        p = self.points[self.triangles]
        return np.stack((p[:, 1] - p[:, 0], p[:, 2] - p[:, 0]), axis=-1)


def get_cell_volumes(mesh: TriMesh) -> NDArrayFloat:
    """Return the area of each cell of the mesh."""
    return mesh.cell_areas.copy()


def make_disk_mesh(n_rings: int = 8, radius: float = 1.0) -> TriMesh:
    r"""
    Create a structured mesh of a disk made of concentric rings.

    The ring :math:`i` (:math:`1 \leq i \leq n`) holds :math:`6i` nodes
    uniformly distributed on the circle of radius :math:`i R / n` and the mesh
    counts :math:`6 n^{2}` triangles. Both node and cell numberings are invariant
    under a rotation by :math:`\pi / 3`.

    Parameters
    ----------
    n_rings : int, optional
        Number of rings, by default 8.
    radius : float, optional
        Radius of the disk, by default 1.0.

    Returns
    -------
    TriMesh
        The disk mesh.
    """
    if n_rings < 1:
        raise SetupError("n_rings must be a positive integer!")
    if radius <= 0.0:
        raise SetupError("radius must be strictly positive!")

    points = [np.zeros((1, 2))]
    # index of the first node of each ring
    offsets = [0, 1]
    for i in range(1, n_rings + 1):
        angles = 2.0 * np.pi * np.arange(6 * i) / (6 * i)
        points.append(
            radius * i / n_rings * np.column_stack((np.cos(angles), np.sin(angles)))
        )
        offsets.append(offsets[-1] + 6 * i)

    def node(ring: int, k: int) -> int:
        if ring == 0:
            return 0
        return offsets[ring] + k % (6 * ring)

    triangles = []
    for i in range(1, n_rings + 1):
        for sector in range(6):
            # outer ring: i + 1 nodes in the sector, inner ring: i nodes
            for k in range(i):
                triangles.append(
                    (
                        node(i - 1, sector * (i - 1) + k),
                        node(i, sector * i + k),
                        node(i, sector * i + k + 1),
                    )
                )
            for k in range(i - 1):
                triangles.append(
                    (
                        node(i - 1, sector * (i - 1) + k),
                        node(i, sector * i + k + 1),
                        node(i - 1, sector * (i - 1) + k + 1),
                    )
                )

    return TriMesh(np.vstack(points), np.array(triangles, dtype=np.int64))


def load_mesh(path: Union[str, Path]) -> TriMesh:
    """
    Read a triangular mesh from a file with meshio.

    Any format supported by meshio can be used (gmsh, vtk, vtu, xdmf, etc.).
    Only the triangle cells are kept and nodes which do not belong to any
    triangle (e.g. geometry points in gmsh files) are dropped.

    Raises
    ------
    SetupError
        If the file cannot be read or does not contain triangles.
    """
    try:
        _mesh = meshio.read(path)
    except (OSError, meshio.ReadError, ValueError, KeyError) as err:
        raise SetupError(f"Could not read the mesh file {path}: {err}") from err

    triangles = _mesh.cells_dict.get("triangle")
    if triangles is None or len(triangles) == 0:
        raise SetupError(f"The mesh file {path} does not contain any triangle!")

    used_nodes, new_triangles = np.unique(triangles, return_inverse=True)
    return TriMesh(
        _mesh.points[used_nodes, :2], new_triangles.reshape(triangles.shape)
    )


def save_mesh(mesh: TriMesh, path: Union[str, Path]) -> None:
    """Write the mesh to a file with meshio (format from the extension)."""
    points = np.column_stack((mesh.points, np.zeros(mesh.n_nodes)))
    meshio.write(path, meshio.Mesh(points, [("triangle", mesh.triangles)]))

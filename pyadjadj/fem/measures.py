"""
Provide integration measures over the cells and over the boundary of a mesh.

A measure stores, for each integration entity (a cell or a boundary edge), the
parent cell, the quadrature points in the reference cell and in the physical
domain, and the quadrature weights including the jacobian of the mapping.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from pyadjadj.fem.mesh import TriMesh
from pyadjadj.fem.quadrature import get_segment_quadrature, get_triangle_quadrature
from pyadjadj.utils.types import NDArrayFloat, NDArrayInt

# Vertices of the reference triangle.
REFERENCE_VERTICES: NDArrayFloat = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])


class Measure:
    """
    Base class for integration measures.

    Attributes
    ----------
    mesh: TriMesh
        The integration mesh.
    degree: int
        Polynomial degree integrated exactly.
    cells: NDArrayInt
        Parent cell of each entity, shape (n_entities,).
    ref_points: NDArrayFloat
        Quadrature points in the reference cell, shape (n_entities, n_q, 2).
    points: NDArrayFloat
        Quadrature points in the physical domain, shape (n_entities, n_q, 2).
    weights: NDArrayFloat
        Quadrature weights, shape (n_entities, n_q).
    normals: Optional[NDArrayFloat]
        Outward unit normals for boundary measures, shape (n_entities, 2).
    """

    __slots__ = ["mesh", "degree", "cells", "ref_points", "points", "weights", "normals"]

    def __init__(
        self,
        mesh: TriMesh,
        degree: int,
        cells: NDArrayInt,
        ref_points: NDArrayFloat,
        points: NDArrayFloat,
        weights: NDArrayFloat,
        normals: Optional[NDArrayFloat] = None,
    ) -> None:
        self.mesh: TriMesh = mesh
        self.degree: int = degree
        self.cells: NDArrayInt = cells
        self.ref_points: NDArrayFloat = ref_points
        self.points: NDArrayFloat = points
        self.weights: NDArrayFloat = weights
        self.normals: Optional[NDArrayFloat] = normals

    @property
    def n_entities(self) -> int:
        """Return the number of integration entities."""
        return self.cells.size

    @property
    def n_quad_points(self) -> int:
        """Return the number of quadrature points per entity."""
        return self.weights.shape[1]

    @property
    def is_boundary(self) -> bool:
        """Return whether the measure integrates over the boundary."""
        return self.normals is not None


class CellMeasure(Measure):
    r"""Measure over the cells of the mesh (:math:`d\Omega`)."""

    __slots__ = []

    def __init__(self, mesh: TriMesh, degree: int = 2) -> None:
        q_points, q_weights = get_triangle_quadrature(degree)
        cells = np.arange(mesh.n_cells, dtype=np.int64)
        ref_points = np.broadcast_to(q_points, (mesh.n_cells,) + q_points.shape)
        origins = mesh.points[mesh.triangles[:, 0]]
        points = origins[:, np.newaxis, :] + np.einsum(
            "eij,qj->eqi", mesh.get_cell_jacobians(), q_points
        )
        # the reference triangle has an area of 1/2
        weights = 2.0 * mesh.cell_areas[:, np.newaxis] * q_weights[np.newaxis, :]
        super().__init__(mesh, degree, cells, ref_points, points, weights)


class BoundaryMeasure(Measure):
    r"""Measure over the boundary edges of the mesh (:math:`d\Gamma`)."""

    __slots__ = []

    def __init__(self, mesh: TriMesh, degree: int = 2) -> None:
        t, q_weights = get_segment_quadrature(degree)
        start = mesh.points[mesh.boundary_edges[:, 0]]
        end = mesh.points[mesh.boundary_edges[:, 1]]
        points = (
            start[:, np.newaxis, :]
            + t[np.newaxis, :, np.newaxis] * (end - start)[:, np.newaxis, :]
        )
        ref_start = REFERENCE_VERTICES[mesh.boundary_local_vertices[:, 0]]
        ref_end = REFERENCE_VERTICES[mesh.boundary_local_vertices[:, 1]]
        ref_points = (
            ref_start[:, np.newaxis, :]
            + t[np.newaxis, :, np.newaxis] * (ref_end - ref_start)[:, np.newaxis, :]
        )
        weights = mesh.boundary_lengths[:, np.newaxis] * q_weights[np.newaxis, :]
        super().__init__(
            mesh,
            degree,
            mesh.boundary_cells,
            ref_points,
            points,
            weights,
            normals=mesh.boundary_normals,
        )


def get_measures(mesh: TriMesh, degree: int = 2) -> Tuple[CellMeasure, BoundaryMeasure]:
    """Return the cell and boundary measures of the mesh for the given degree."""
    return CellMeasure(mesh, degree), BoundaryMeasure(mesh, degree)

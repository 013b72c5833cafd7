# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 Antoine COLLET

"""
Provide Lagrange finite element spaces on triangular meshes.

Two spaces are available:

- P0 (``order=0``, ``conformity="L2"``): one constant value per cell,
- P1 (``order=1``, ``conformity="H1"``): continuous, linear on each cell, one value
  per node.
"""

from __future__ import annotations

from typing import Callable, Union

import matplotlib.tri as mtri
import numpy as np
import numpy.typing as npt

from pyadjadj.exceptions import DimensionError, SetupError
from pyadjadj.fem.measures import Measure
from pyadjadj.fem.mesh import TriMesh
from pyadjadj.utils.enum import StrEnum
from pyadjadj.utils.types import NDArrayFloat, NDArrayInt

# Gradients of the P1 shape functions on the reference cell, shape (3, 2).
P1_REFERENCE_GRADIENTS: NDArrayFloat = np.array([[-1.0, -1.0], [1.0, 0.0], [0.0, 1.0]])


class ElementKind(StrEnum):
    LAGRANGIAN = "lagrangian"


class Conformity(StrEnum):
    H1 = "H1"
    L2 = "L2"


class FunctionSpace:
    """
    Scalar Lagrange finite element space of order 0 or 1.

    Attributes
    ----------
    mesh: TriMesh
        Mesh on which the space is defined.
    order: int
        Polynomial order (0 or 1).
    conformity: Conformity
        H1 for the continuous P1 space, L2 for the discontinuous P0 space.
    """

    __slots__ = ["mesh", "order", "conformity", "_cell_gradients"]

    def __init__(self, mesh: TriMesh, order: int, conformity: Union[str, Conformity]):
        """
        Initialize the instance.

        Raises
        ------
        SetupError
            If the (order, conformity) pair is not supported.
        """
        if (order, str(conformity)) not in [(0, Conformity.L2), (1, Conformity.H1)]:
            raise SetupError(
                f"Unsupported lagrangian space of order {order} with "
                f"{conformity} conformity! Supported spaces are (0, 'L2') and "
                "(1, 'H1')."
            )
        self.mesh: TriMesh = mesh
        self.order: int = order
        self.conformity: Conformity = Conformity(str(conformity))

        if self.order == 1:
            inv_jacobians = np.linalg.inv(mesh.get_cell_jacobians())
            # grad(phi) = J^{-T} grad_ref(phi)
            self._cell_gradients: NDArrayFloat = np.einsum(
                "nk,ekl->enl", P1_REFERENCE_GRADIENTS, inv_jacobians
            )
        else:
            self._cell_gradients = np.zeros((mesh.n_cells, 1, 2))

    def __repr__(self) -> str:
        return f"FunctionSpace(P{self.order}, {self.conformity}, n_dofs={self.n_dofs})"

    @property
    def n_dofs(self) -> int:
        """Return the number of degrees of freedom."""
        if self.order == 0:
            return self.mesh.n_cells
        return self.mesh.n_nodes

    @property
    def n_local_dofs(self) -> int:
        """Return the number of degrees of freedom per cell."""
        return 1 if self.order == 0 else 3

    @property
    def cell_dofs(self) -> NDArrayInt:
        """Return the dofs of each cell with shape (n_cells, n_local_dofs)."""
        if self.order == 0:
            return np.arange(self.mesh.n_cells, dtype=np.int64)[:, np.newaxis]
        return self.mesh.triangles

    @property
    def dof_coordinates(self) -> NDArrayFloat:
        """Return the coordinates associated with each dof, shape (n_dofs, 2)."""
        if self.order == 0:
            return self.mesh.cell_centroids
        return self.mesh.points

    def _check_measure(self, measure: Measure) -> None:
        if measure.mesh is not self.mesh:
            raise DimensionError(
                "The measure and the function space are not defined on the same mesh!"
            )

    def basis_values(self, measure: Measure) -> NDArrayFloat:
        """
        Return the shape functions evaluated at the quadrature points.

        Returns
        -------
        NDArrayFloat
            Array with shape (n_entities, n_q, n_local_dofs).
        """
        self._check_measure(measure)
        if self.order == 0:
            return np.ones(measure.weights.shape + (1,))
        xi = measure.ref_points[..., 0]
        eta = measure.ref_points[..., 1]
        return np.stack((1.0 - xi - eta, xi, eta), axis=-1)

    def basis_gradients(self, measure: Measure) -> NDArrayFloat:
        """
        Return the shape function gradients at the quadrature points.

        Returns
        -------
        NDArrayFloat
            Array with shape (n_entities, n_q, n_local_dofs, 2).
        """
        self._check_measure(measure)
        grads = self._cell_gradients[measure.cells]
        return np.broadcast_to(
            grads[:, np.newaxis, :, :],
            (measure.n_entities, measure.n_quad_points) + grads.shape[1:],
        )

    def interpolate(
        self, f: Union[float, Callable[[NDArrayFloat], npt.ArrayLike]]
    ) -> NDArrayFloat:
        """
        Interpolate a scalar field on the space.

        P1 values are taken at the nodes and P0 values at the cell centroids.

        Parameters
        ----------
        f : Union[float, Callable[[NDArrayFloat], npt.ArrayLike]]
            A constant or a function of coordinates with shape (..., 2).

        Returns
        -------
        NDArrayFloat
            The dof values.
        """
        if callable(f):
            values = f(self.dof_coordinates)
        else:
            values = f
        return np.array(
            np.broadcast_to(np.asarray(values, dtype=np.float64), (self.n_dofs,))
        )

    def evaluate_field(self, values: npt.ArrayLike, points: npt.ArrayLike) -> NDArrayFloat:
        """
        Evaluate a discrete field at arbitrary points.

        Parameters
        ----------
        values : npt.ArrayLike
            Dof values of the field.
        points : npt.ArrayLike
            Coordinates with shape (n_points, 2).

        Returns
        -------
        NDArrayFloat
            Values at the points. Points outside of the mesh get NaN.
        """
        _values = np.asarray(values, dtype=np.float64)
        if _values.shape != (self.n_dofs,):
            raise DimensionError(
                f"Expected {self.n_dofs} dof values, got an array of shape "
                f"{_values.shape}!"
            )
        _points = np.atleast_2d(np.asarray(points, dtype=np.float64))
        triangulation = mtri.Triangulation(
            self.mesh.points[:, 0], self.mesh.points[:, 1], self.mesh.triangles
        )
        if self.order == 1:
            res = mtri.LinearTriInterpolator(triangulation, _values)(
                _points[:, 0], _points[:, 1]
            )
            return np.ma.filled(res.astype(np.float64), np.nan)
        cell_indices = triangulation.get_trifinder()(_points[:, 0], _points[:, 1])
        return np.where(cell_indices >= 0, _values[cell_indices], np.nan)


def make_space(
    mesh: TriMesh,
    kind: Union[str, ElementKind] = ElementKind.LAGRANGIAN,
    order: int = 1,
    conformity: Union[str, Conformity] = Conformity.H1,
) -> FunctionSpace:
    """
    Create a finite element space on the mesh.

    Raises
    ------
    SetupError
        If the element kind, the order or the conformity is not supported.
    """
    if str(kind) not in ElementKind.to_list():
        raise SetupError(
            f"Unsupported element kind '{kind}'! Supported kinds are "
            f"{ElementKind.to_list()}."
        )
    return FunctionSpace(mesh, order, conformity)


def num_dofs(space: FunctionSpace) -> int:
    """Return the number of degrees of freedom of the space."""
    return space.n_dofs

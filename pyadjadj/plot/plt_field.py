"""Provide plot utilities for fields defined on triangular meshes."""

from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import numpy.typing as npt
from matplotlib.collections import PolyCollection
from matplotlib.tri import Triangulation

from pyadjadj.exceptions import DimensionError
from pyadjadj.fem import FunctionSpace, TriMesh
from pyadjadj.utils.types import NDArrayFloat


def get_triangulation(mesh: TriMesh) -> Triangulation:
    """Return the matplotlib triangulation of the mesh."""
    return Triangulation(mesh.points[:, 0], mesh.points[:, 1], mesh.triangles)


def plot_field(
    ax: plt.Axes,
    space: FunctionSpace,
    values: npt.ArrayLike,
    cmap: str = "magma",
    clims: Optional[Tuple[float, float]] = None,
    is_colorbar: bool = True,
    is_mesh: bool = False,
) -> PolyCollection:
    """
    Plot a discrete field with `tripcolor`.

    P0 fields are plotted with flat shading and P1 fields with gouraud shading.

    Parameters
    ----------
    ax : plt.Axes
        Axis on which to plot.
    space : FunctionSpace
        Space of the field.
    values : npt.ArrayLike
        Dof values of the field.
    cmap : str, optional
        Colormap, by default "magma".
    clims : Optional[Tuple[float, float]], optional
        Color limits. If None, the min and max of the values are used.
        The default is None.
    is_colorbar : bool, optional
        Whether to add a colorbar, by default True.
    is_mesh : bool, optional
        Whether to draw the edges of the mesh, by default False.

    Returns
    -------
    PolyCollection
        The mappable returned by `tripcolor`.
    """
    _values = np.asarray(values, dtype=np.float64)
    if _values.shape != (space.n_dofs,):
        raise DimensionError(
            f"Expected {space.n_dofs} values for the field, got {_values.shape}!"
        )
    if clims is None:
        clims = (float(np.min(_values)), float(np.max(_values)))

    tri = get_triangulation(space.mesh)
    if space.order == 0:
        mappable = ax.tripcolor(
            tri, facecolors=_values, cmap=cmap, vmin=clims[0], vmax=clims[1]
        )
    else:
        mappable = ax.tripcolor(
            tri,
            _values,
            shading="gouraud",
            cmap=cmap,
            vmin=clims[0],
            vmax=clims[1],
        )
    if is_mesh:
        ax.triplot(tri, color="k", linewidth=0.2)
    ax.set_aspect("equal")
    if is_colorbar:
        ax.figure.colorbar(mappable, ax=ax)
    return mappable


def plot_measurements(
    ax: plt.Axes,
    angles: npt.ArrayLike,
    measurements: NDArrayFloat,
    d_obs: Optional[NDArrayFloat] = None,
    labels: Optional[Sequence[str]] = None,
) -> None:
    """
    Plot the measurements of each extraction as a function of the excitation angle.

    Parameters
    ----------
    ax : plt.Axes
        Axis on which to plot.
    angles : npt.ArrayLike
        Angles of the excitations with shape (n_excitations,).
    measurements : NDArrayFloat
        Calculated measurements with shape (n_excitations, n_extractions).
    d_obs : Optional[NDArrayFloat], optional
        Observed measurements plotted with dashed lines, by default None.
    labels : Optional[Sequence[str]], optional
        Label of each extraction, by default None.
    """
    _angles = np.ravel(angles)
    if measurements.shape[0] != _angles.size:
        raise DimensionError(
            f"Expected {_angles.size} excitations, got {measurements.shape[0]}!"
        )
    if d_obs is not None and d_obs.shape != measurements.shape:
        raise DimensionError(
            "Observed and calculated measurements must have the same shape!"
        )
    for j in range(measurements.shape[1]):
        label = labels[j] if labels is not None else f"extraction #{j}"
        ax.plot(_angles, measurements[:, j], color=f"C{j}", label=label)
        if d_obs is not None:
            ax.plot(_angles, d_obs[:, j], color=f"C{j}", linestyle="--")
    ax.set_xlabel("Excitation angle [rad]")
    ax.set_ylabel("Measurement")

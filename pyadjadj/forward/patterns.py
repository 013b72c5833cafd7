"""
Provide excitation, extraction and material patterns on the unit disk.

All patterns are functions of coordinates given as arrays of shape (..., 2) and
return arrays of shape (...).
"""

from __future__ import annotations

from typing import Callable, List, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from pyadjadj.utils.types import NDArrayFloat, ScalarField


def get_angle_to_direction(x: NDArrayFloat, theta: float) -> NDArrayFloat:
    """
    Return the unsigned angle between the position vectors and a direction.

    Parameters
    ----------
    x : NDArrayFloat
        Coordinates with shape (..., 2).
    theta : float
        Angle of the direction (radians).

    Returns
    -------
    NDArrayFloat
        Angles in [0, pi].
    """
    delta = np.arctan2(x[..., 1], x[..., 0]) - theta
    return np.abs((delta + np.pi) % (2.0 * np.pi) - np.pi)


def _make_excitation(theta: float, rate: float) -> ScalarField:
    def excitation(x: NDArrayFloat) -> NDArrayFloat:
        return np.exp(-rate * get_angle_to_direction(x, theta) ** 2)

    return excitation


def get_boundary_excitations(
    angles: npt.ArrayLike, rate: float = 10.0
) -> List[ScalarField]:
    r"""
    Return the Dirichlet data of the excitations.

    .. math::

        g_{\theta}(x) = \exp\left(-r \angle(x, e_{\theta})^{2}\right)

    with :math:`e_{\theta} = (\cos \theta, \sin \theta)`.

    Parameters
    ----------
    angles : npt.ArrayLike
        One excitation per angle (radians).
    rate : float, optional
        Decay rate r, by default 10.0.
    """
    return [_make_excitation(float(theta), rate) for theta in np.ravel(angles)]


def get_default_extraction_locations(
    n_locations: int = 6, radius: float = 0.5, is_center: bool = True
) -> NDArrayFloat:
    """
    Return detector locations evenly spread on a circle (plus the center).

    Returns
    -------
    NDArrayFloat
        Array with shape (n_locations (+ 1), 2).
    """
    angles = 2.0 * np.pi * np.arange(n_locations) / n_locations
    locations = radius * np.column_stack((np.cos(angles), np.sin(angles)))
    if is_center:
        locations = np.vstack((locations, np.zeros((1, 2))))
    return locations


def _make_disk_indicator(location: Tuple[float, float], radius_sq: float) -> ScalarField:
    def indicator(x: NDArrayFloat) -> NDArrayFloat:
        dist_sq = (x[..., 0] - location[0]) ** 2 + (x[..., 1] - location[1]) ** 2
        return np.where(dist_sq < radius_sq, 1.0, 0.0)

    return indicator


def _make_gaussian(location: Tuple[float, float], rate: float) -> ScalarField:
    def gaussian(x: NDArrayFloat) -> NDArrayFloat:
        dist_sq = (x[..., 0] - location[0]) ** 2 + (x[..., 1] - location[1]) ** 2
        return np.exp(-rate * dist_sq)

    return gaussian


def get_disk_indicator_extractions(
    locations: npt.ArrayLike, radius_sq: float = 0.03
) -> List[ScalarField]:
    """Return indicator functions of small disks centered on the locations."""
    return [
        _make_disk_indicator((float(loc[0]), float(loc[1])), radius_sq)
        for loc in np.atleast_2d(locations)
    ]


def get_gaussian_extractions(
    locations: npt.ArrayLike, rate: float = 20.0
) -> List[ScalarField]:
    """Return gaussian kernels centered on the locations."""
    return [
        _make_gaussian((float(loc[0]), float(loc[1])), rate)
        for loc in np.atleast_2d(locations)
    ]


def get_constant_field(value: float) -> ScalarField:
    """Return a function equal to `value` everywhere."""

    def constant(x: NDArrayFloat) -> NDArrayFloat:
        return np.full(np.shape(x)[:-1], value, dtype=np.float64)

    return constant


def is_in_ellipse(
    x: NDArrayFloat, mu1: float, mu2: float, r: float, a: float, b: float
) -> npt.NDArray[np.bool_]:
    """Return whether the points lie in the ellipse (center, rotation, half axes)."""
    dx = x[..., 0] - mu1
    dy = x[..., 1] - mu2
    return (dx * np.cos(r) + dy * np.sin(r)) ** 2 / a**2 + (
        dx * np.sin(r) - dy * np.cos(r)
    ) ** 2 / b**2 < 1.0


def get_ellipse_material(
    mu1: float = 0.0,
    mu2: float = -0.3,
    r: float = np.pi / 4.0,
    a: float = 0.3,
    b: float = 0.8,
    values: Sequence[float] = (0.9, 0.1, 0.4),
) -> ScalarField:
    """
    Return the synthetic material used to generate the observations.

    The value is values[0] in the ellipse, values[1] in the upper half-plane
    outside of the ellipse and values[2] elsewhere.
    """

    def material(x: NDArrayFloat) -> NDArrayFloat:
        return np.where(
            is_in_ellipse(x, mu1, mu2, r, a, b),
            values[0],
            np.where(x[..., 1] > 0.0, values[1], values[2]),
        )

    return material


def get_two_region_material(
    radius: float = 0.5, inner_value: float = 0.1, outer_value: float = 0.9
) -> Callable[[NDArrayFloat], NDArrayFloat]:
    """Return a material equal to inner_value in the centered disk, else outer."""

    def material(x: NDArrayFloat) -> NDArrayFloat:
        return np.where(
            x[..., 0] ** 2 + x[..., 1] ** 2 < radius**2, inner_value, outer_value
        )

    return material

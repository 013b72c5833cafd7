"""
Provide Gauss quadrature rules on the reference segment and triangle.

The reference segment is [0, 1] and the reference triangle has vertices (0, 0),
(1, 0) and (0, 1). Triangle rules are obtained by collapsing a tensor Gauss-Legendre
rule on the unit square (Duffy transform).
"""

from typing import Tuple

import numpy as np

from pyadjadj.utils.types import NDArrayFloat


def _get_gauss_legendre_01(n_points: int) -> Tuple[NDArrayFloat, NDArrayFloat]:
    """Return the Gauss-Legendre rule with `n_points` points mapped on [0, 1]."""
    points, weights = np.polynomial.legendre.leggauss(n_points)
    return 0.5 * (points + 1.0), 0.5 * weights


def get_segment_quadrature(degree: int) -> Tuple[NDArrayFloat, NDArrayFloat]:
    """
    Return a rule on [0, 1] exact for polynomials of the given degree.

    Returns
    -------
    Tuple[NDArrayFloat, NDArrayFloat]
        Points with shape (n,) and weights with shape (n,) summing to 1.
    """
    if degree < 0:
        raise ValueError("The quadrature degree must be a non negative integer!")
    return _get_gauss_legendre_01(max(1, int(np.ceil((degree + 1) / 2))))


def get_triangle_quadrature(degree: int) -> Tuple[NDArrayFloat, NDArrayFloat]:
    """
    Return a rule on the reference triangle exact for the given degree.

    Returns
    -------
    Tuple[NDArrayFloat, NDArrayFloat]
        Points with shape (n, 2) and weights with shape (n,) summing to 1/2.
    """
    if degree < 0:
        raise ValueError("The quadrature degree must be a non negative integer!")
    # the jacobian of the collapse adds one degree in the first direction
    n_points = max(1, int(np.ceil((degree + 2) / 2)))
    a, wa = _get_gauss_legendre_01(n_points)
    b, wb = _get_gauss_legendre_01(n_points)
    aa, bb = np.meshgrid(a, b, indexing="ij")
    waa, wbb = np.meshgrid(wa, wb, indexing="ij")
    points = np.column_stack((aa.ravel(), (bb * (1.0 - aa)).ravel()))
    weights = (waa * wbb * (1.0 - aa)).ravel()
    return points, weights

from math import factorial

import numpy as np
import pytest
from pyadjadj.fem import get_segment_quadrature, get_triangle_quadrature


@pytest.mark.parametrize("degree", [0, 1, 2, 3, 4, 5])
def test_segment_quadrature(degree) -> None:
    points, weights = get_segment_quadrature(degree)
    np.testing.assert_allclose(np.sum(weights), 1.0)
    for k in range(degree + 1):
        np.testing.assert_allclose(np.sum(weights * points**k), 1.0 / (k + 1))


@pytest.mark.parametrize("degree", [0, 1, 2, 3, 4, 5])
def test_triangle_quadrature(degree) -> None:
    points, weights = get_triangle_quadrature(degree)
    assert points.shape == (weights.size, 2)
    np.testing.assert_allclose(np.sum(weights), 0.5)
    # all points inside the reference triangle
    assert np.all(points >= 0.0)
    assert np.all(np.sum(points, axis=1) <= 1.0)
    for i in range(degree + 1):
        for j in range(degree + 1 - i):
            np.testing.assert_allclose(
                np.sum(weights * points[:, 0] ** i * points[:, 1] ** j),
                factorial(i) * factorial(j) / factorial(i + j + 2),
            )


def test_negative_degree() -> None:
    with pytest.raises(ValueError, match="non negative integer"):
        get_segment_quadrature(-1)
    with pytest.raises(ValueError, match="non negative integer"):
        get_triangle_quadrature(-1)

import numpy as np
import pytest
from pyadjadj.forward import (
    get_angle_to_direction,
    get_boundary_excitations,
    get_constant_field,
    get_default_extraction_locations,
    get_disk_indicator_extractions,
    get_ellipse_material,
    get_gaussian_extractions,
    get_two_region_material,
    is_in_ellipse,
)


@pytest.mark.parametrize(
    "x, theta, expected",
    [
        ([1.0, 0.0], 0.0, 0.0),
        ([-1.0, 0.0], 0.0, np.pi),
        ([0.0, 1.0], 0.0, np.pi / 2.0),
        ([0.0, -2.0], 0.0, np.pi / 2.0),
        ([0.0, 1.0], -np.pi / 2.0, np.pi),
        # across the branch cut of arctan2
        ([np.cos(-0.1), np.sin(-0.1)], 2.0 * np.pi - 0.3, 0.2),
        ([np.cos(3.0), np.sin(3.0)], -3.0, 2.0 * np.pi - 6.0),
    ],
)
def test_get_angle_to_direction(x, theta, expected) -> None:
    np.testing.assert_allclose(
        get_angle_to_direction(np.array(x), theta), expected, atol=1e-12
    )


def test_get_boundary_excitations() -> None:
    angles = np.linspace(0.0, 2.0 * np.pi, 8, endpoint=False)
    excitations = get_boundary_excitations(angles, rate=10.0)
    assert len(excitations) == 8

    for theta, g in zip(angles, excitations):
        direction = np.array([np.cos(theta), np.sin(theta)])
        np.testing.assert_allclose(g(direction), 1.0)
        np.testing.assert_allclose(g(-direction), np.exp(-10.0 * np.pi**2))
    # vectorized over points
    x = np.array([[[1.0, 0.0], [0.0, 1.0]], [[-1.0, 0.0], [0.0, -1.0]]])
    assert excitations[0](x).shape == (2, 2)


@pytest.mark.parametrize(
    "n_locations, radius, is_center, expected_shape",
    [(6, 0.5, True, (7, 2)), (6, 0.5, False, (6, 2)), (3, 0.2, True, (4, 2))],
)
def test_get_default_extraction_locations(
    n_locations, radius, is_center, expected_shape
) -> None:
    locations = get_default_extraction_locations(n_locations, radius, is_center)
    assert locations.shape == expected_shape
    np.testing.assert_allclose(
        np.linalg.norm(locations[:n_locations], axis=1), radius
    )
    if is_center:
        np.testing.assert_array_equal(locations[-1], [0.0, 0.0])


def test_extractions() -> None:
    locations = np.array([[0.5, 0.0], [0.0, 0.0]])
    indicators = get_disk_indicator_extractions(locations, radius_sq=0.03)
    gaussians = get_gaussian_extractions(locations, rate=20.0)
    assert len(indicators) == len(gaussians) == 2

    x = np.array([[0.5, 0.0], [0.5, 0.1], [0.5, 0.2], [0.0, 0.0]])
    np.testing.assert_array_equal(indicators[0](x), [1.0, 1.0, 0.0, 0.0])
    np.testing.assert_array_equal(indicators[1](x), [0.0, 0.0, 0.0, 1.0])
    np.testing.assert_allclose(
        gaussians[0](x), np.exp(-20.0 * np.array([0.0, 0.01, 0.04, 0.25]))
    )


def test_get_constant_field() -> None:
    x = np.zeros((4, 3, 2))
    res = get_constant_field(2.0)(x)
    assert res.shape == (4, 3)
    np.testing.assert_array_equal(res, 2.0)


def test_materials() -> None:
    x = np.array([[0.0, -0.3], [0.0, 0.9], [0.9, -0.1], [0.1, 0.1]])
    assert is_in_ellipse(x[0], 0.0, -0.3, np.pi / 4.0, 0.3, 0.8)
    np.testing.assert_array_equal(
        is_in_ellipse(x, 0.0, -0.3, np.pi / 4.0, 0.3, 0.8),
        [True, False, False, False],
    )
    np.testing.assert_allclose(get_ellipse_material()(x), [0.9, 0.1, 0.4, 0.1])
    np.testing.assert_allclose(get_two_region_material()(x), [0.1, 0.9, 0.9, 0.1])

import numpy as np
import pytest
from pyadjadj.fem import make_disk_mesh
from pyadjadj.forward import (
    ForwardModel,
    get_boundary_excitations,
    get_default_extraction_locations,
    get_disk_indicator_extractions,
    get_ellipse_material,
)
from pyadjadj.inverse import make_synthetic_measurements


def get_model() -> ForwardModel:
    return ForwardModel(
        make_disk_mesh(3),
        get_boundary_excitations(np.linspace(0.0, 2.0 * np.pi, 10, endpoint=False)),
        get_disk_indicator_extractions(get_default_extraction_locations()),
    )


def test_noise_free_measurements() -> None:
    model = get_model()
    material = get_ellipse_material()
    d_obs = make_synthetic_measurements(model, material, noise_level=0.0)
    assert d_obs.shape == (10, 7)
    # the material is projected on the coefficient space
    np.testing.assert_allclose(d_obs, model(model.project_coefficient(material)))

    p = np.full(model.n_params, 0.3)
    np.testing.assert_allclose(
        make_synthetic_measurements(model, p, noise_level=0.0), model(p)
    )


def test_noisy_measurements() -> None:
    model = get_model()
    p = np.full(model.n_params, 0.3)
    d_true = model(p)

    d_obs = make_synthetic_measurements(model, p, noise_level=0.01, random_state=2024)
    # multiplicative noise
    rel_noise = d_obs / d_true - 1.0
    assert 0.0 < np.std(rel_noise) < 0.02
    assert np.max(np.abs(rel_noise)) < 0.05

    # reproducible
    np.testing.assert_array_equal(
        make_synthetic_measurements(model, p, noise_level=0.01, random_state=2024),
        d_obs,
    )
    np.testing.assert_array_equal(
        make_synthetic_measurements(
            model, p, noise_level=0.01, random_state=np.random.default_rng(2024)
        ),
        d_obs,
    )


def test_negative_noise_level() -> None:
    with pytest.raises(ValueError, match="The noise level must be positive!"):
        make_synthetic_measurements(get_model(), 1.0, noise_level=-0.1)

import re

import numpy as np
import pytest
from pyadjadj.fem import make_disk_mesh
from pyadjadj.forward import (
    ForwardModel,
    get_boundary_excitations,
    get_default_extraction_locations,
    get_gaussian_extractions,
)
from pyadjadj.inverse import (
    EllipseParametrization,
    eval_loss_ls,
    eval_loss_ls_gradient,
    eval_model_loss_ls,
    eval_model_loss_ls_gradient,
    eval_objective,
    eval_objective_gradient,
)
from pyadjadj.utils import finite_gradient, is_gradient_correct


@pytest.mark.parametrize(
    "d_pred, d_obs, std, expected_loss",
    [
        (np.zeros(100), np.zeros(100), np.ones(100), 0),
        (np.zeros(100), np.ones(100), np.ones(100), 100.0),
        (np.zeros(1000), np.ones(1000), np.ones(1000), 1000.0),
        (np.zeros(100), np.ones(100) * 2.0, np.ones(100), 400.0),
        (np.zeros(100), np.ones(100) * 2.0, np.ones(100) * 2.0, 100.0),
        (np.zeros((10, 10)), np.ones((10, 10)) * 2.0, 2.0, 100.0),
        (np.zeros((10, 10)), np.ones((10, 10)) * 2.0, None, 400.0),
    ],
)
def test_loss_ls_function(d_pred, d_obs, std, expected_loss) -> None:
    assert eval_loss_ls(d_obs, d_pred, std) == expected_loss


def test_loss_ls_gradient() -> None:
    rng = np.random.default_rng(2024)
    d_obs = rng.normal(size=(4, 3))
    d_pred = rng.normal(size=(4, 3))
    std = rng.uniform(0.5, 2.0, size=(4, 3))

    np.testing.assert_allclose(
        eval_loss_ls_gradient(d_obs, d_pred, std),
        finite_gradient(d_pred, lambda d: eval_loss_ls(d_obs, d, std)),
        rtol=1e-6,
        atol=1e-8,
    )
    assert is_gradient_correct(
        d_pred,
        lambda d: eval_loss_ls(d_obs, d, std),
        lambda d: eval_loss_ls_gradient(d_obs, d, std),
    )


def test_loss_ls_errors() -> None:
    with pytest.raises(
        ValueError,
        match=re.escape(
            "Observed (3,) and calculated (4,) measurements must have the same shape!"
        ),
    ):
        eval_loss_ls(np.ones(3), np.ones(4))
    with pytest.raises(ValueError, match="must have the same shape"):
        eval_loss_ls_gradient(np.ones(3), np.ones(4))
    with pytest.raises(ValueError, match="must be strictly positive"):
        eval_loss_ls(np.ones(3), np.ones(3), np.array([1.0, 0.0, 1.0]))


def get_model() -> ForwardModel:
    return ForwardModel(
        make_disk_mesh(3),
        get_boundary_excitations(np.linspace(0.0, 2.0 * np.pi, 6, endpoint=False)),
        get_gaussian_extractions(get_default_extraction_locations(4, 0.5)),
    )


def test_eval_model_loss_ls() -> None:
    model = get_model()
    p = np.full(model.n_params, 0.5)
    d_obs = model(np.ones(model.n_params))
    assert eval_model_loss_ls(model, d_obs, np.ones(model.n_params)) == 0.0
    loss = eval_model_loss_ls(model, d_obs, p, std=0.1)
    np.testing.assert_allclose(loss, eval_loss_ls(d_obs, model(p), 0.1))
    assert loss > 0.0

    grad = eval_model_loss_ls_gradient(model, d_obs, p, std=0.1)
    assert grad.shape == (model.n_params,)
    # increasing the coefficient decreases the misfit
    assert np.sum(grad) < 0.0


def test_eval_objective_gradient() -> None:
    model = get_model()
    param = EllipseParametrization()
    theta_true = np.array([0.1, -0.2, 0.3, 0.4, 0.6, 1.5, 3.0])
    d_obs = model(param(theta_true, model.coefficient_coordinates))
    theta = param.get_initial_values(model.coefficient_coordinates)

    grad = eval_objective_gradient(theta, model, param, d_obs, 1e-2)
    fd_grad = finite_gradient(
        theta, eval_objective, fm_args=(model, param, d_obs, 1e-2)
    )
    assert grad.shape == (7,)
    np.testing.assert_allclose(
        grad, fd_grad, rtol=1e-4, atol=1e-4 * np.max(np.abs(fd_grad))
    )

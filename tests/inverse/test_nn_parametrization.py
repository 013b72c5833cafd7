import numpy as np
import pytest

torch = pytest.importorskip("torch")

from pyadjadj.inverse.nn_parametrization import (  # noqa: E402
    NeuralParametrization,
    make_mlp,
)
from pyadjadj.utils import finite_gradient  # noqa: E402

x = np.random.default_rng(2024).uniform(-1.0, 1.0, size=(15, 2))


def test_make_mlp() -> None:
    network = make_mlp(n_hidden=20, n_regions=3)
    n_params = sum(param.numel() for param in network.parameters())
    assert n_params == (2 * 20 + 20) + (20 * 20 + 20) + (20 * 3 + 3)
    probs = network(torch.zeros((4, 2), dtype=torch.float64))
    assert probs.shape == (4, 3)
    np.testing.assert_allclose(probs.sum(dim=-1).detach().numpy(), 1.0)


def test_neural_parametrization() -> None:
    param = NeuralParametrization()
    theta = param.get_initial_values(x)
    assert theta.shape == (param.get_n_params(x.shape[0]),)
    assert param.get_n_params(1000) == theta.size

    values = param(theta, x)
    assert values.shape == (15,)
    # convex combination of the region values
    assert np.all(values > 0.1)
    assert np.all(values < 0.9)

    # same seed, same network
    np.testing.assert_array_equal(NeuralParametrization().get_initial_values(x), theta)
    assert not np.array_equal(
        NeuralParametrization(random_state=0).get_initial_values(x), theta
    )


def test_neural_parametrization_jacobian_vector_product() -> None:
    param = NeuralParametrization(n_hidden=5)
    theta = param.get_initial_values(x)
    cotangent = np.random.default_rng(0).normal(size=x.shape[0])

    def fun(_theta) -> float:
        return float(cotangent @ param(_theta, x))

    fd_grad = finite_gradient(theta, fun)
    np.testing.assert_allclose(
        param.jacobian_vector_product(theta, x, cotangent),
        fd_grad,
        rtol=1e-5,
        atol=1e-7 * np.max(np.abs(fd_grad)),
    )

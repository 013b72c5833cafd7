"""
Provide a neural network parametrization of the coefficient field.

This module requires `torch` (install the `nn` extra).
"""

from __future__ import annotations

from typing import Dict, Sequence

import numpy as np
import numpy.typing as npt
import torch
from torch.func import functional_call
from torch.nn.utils import parameters_to_vector

from pyadjadj.inverse.parametrization import Parametrization, _as_coordinates
from pyadjadj.utils.types import NDArrayFloat


def make_mlp(n_hidden: int = 20, n_regions: int = 3) -> torch.nn.Sequential:
    """Return the network mapping coordinates to region probabilities."""
    return torch.nn.Sequential(
        torch.nn.Linear(2, n_hidden),
        torch.nn.Tanh(),
        torch.nn.Linear(n_hidden, n_hidden),
        torch.nn.Tanh(),
        torch.nn.Linear(n_hidden, n_regions),
        torch.nn.Softmax(dim=-1),
    ).double()


class NeuralParametrization(Parametrization):
    """
    Coefficient field given by a small feed-forward network.

    The network maps the rescaled coordinates 0.5 (x + 1) to the probabilities of
    belonging to each region, and the coefficient is the mean of the region values
    weighted by these probabilities. The parameter vector holds all the weights and
    biases of the network.
    """

    def __init__(
        self,
        region_values: Sequence[float] = (0.1, 0.9, 0.4),
        n_hidden: int = 20,
        random_state: int = 2024,
    ) -> None:
        """
        Initialize the instance.

        Parameters
        ----------
        region_values : Sequence[float], optional
            Fixed coefficient value of each region, by default (0.1, 0.9, 0.4).
        n_hidden : int, optional
            Width of the two hidden layers, by default 20.
        random_state : int, optional
            Seed for the initialization of the network weights. The default is 2024.
        """
        torch.manual_seed(random_state)
        self.network: torch.nn.Sequential = make_mlp(n_hidden, len(region_values))
        self.region_values: torch.Tensor = torch.tensor(
            region_values, dtype=torch.float64
        )
        self._shapes: Dict[str, torch.Size] = {
            name: param.shape for name, param in self.network.named_parameters()
        }
        self._initial_values: NDArrayFloat = (
            parameters_to_vector(self.network.parameters()).detach().numpy().copy()
        )

    def _split(self, theta: torch.Tensor) -> Dict[str, torch.Tensor]:
        params = {}
        idx = 0
        for name, shape in self._shapes.items():
            size = int(np.prod(shape))
            params[name] = theta[idx : idx + size].view(shape)
            idx += size
        return params

    def _forward(self, theta: torch.Tensor, x: NDArrayFloat) -> torch.Tensor:
        inputs = torch.as_tensor(0.5 * (x + 1.0), dtype=torch.float64)
        probs = functional_call(self.network, self._split(theta), (inputs,))
        return probs @ self.region_values

    def _evaluate(self, theta: NDArrayFloat, x: NDArrayFloat) -> NDArrayFloat:
        with torch.no_grad():
            return self._forward(torch.as_tensor(theta), x).numpy().copy()

    def _jacobian_vector_product(
        self, theta: NDArrayFloat, x: NDArrayFloat, cotangent: NDArrayFloat
    ) -> NDArrayFloat:
        _theta = torch.tensor(theta, dtype=torch.float64, requires_grad=True)
        values = self._forward(_theta, x)
        (grad,) = torch.autograd.grad(
            values, _theta, grad_outputs=torch.as_tensor(cotangent)
        )
        return grad.numpy().copy()

    def get_n_params(self, n_points: int) -> int:
        return self._initial_values.size

    def get_initial_values(self, x: npt.ArrayLike) -> NDArrayFloat:
        _as_coordinates(x)
        return self._initial_values.copy()

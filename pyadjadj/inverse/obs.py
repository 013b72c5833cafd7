"""Provide the generation of synthetic observed measurements."""

from __future__ import annotations

from typing import Callable, Optional, Union

import numpy as np
import numpy.typing as npt

from pyadjadj.forward import ForwardModel
from pyadjadj.utils.types import NDArrayFloat


def make_synthetic_measurements(
    model: ForwardModel,
    m_true: Union[npt.ArrayLike, Callable[[NDArrayFloat], npt.ArrayLike]],
    noise_level: float = 0.01,
    random_state: Optional[Union[int, np.random.Generator]] = None,
) -> NDArrayFloat:
    r"""
    Return noisy measurements of the model for a reference coefficient field.

    A multiplicative gaussian noise is applied:
    :math:`d_{\mathrm{obs}} = d (1 + \eta \epsilon)` with
    :math:`\epsilon \sim \mathcal{N}(0, 1)` and :math:`\eta` the noise level.

    Parameters
    ----------
    model : ForwardModel
        The forward model. Its parameters are overwritten.
    m_true : Union[npt.ArrayLike, Callable[[NDArrayFloat], npt.ArrayLike]]
        Reference coefficient dofs or a function of the coordinates which is
        L2-projected onto the coefficient space.
    noise_level : float, optional
        Relative standard deviation of the noise, by default 0.01.
    random_state : Optional[Union[int, np.random.Generator]]
        Seed or generator used to sample the noise. The default is None.

    Returns
    -------
    NDArrayFloat
        Observed measurements with shape (n_excitations, n_extractions).
    """
    if noise_level < 0.0:
        raise ValueError("The noise level must be positive!")
    if callable(m_true):
        p_true = model.project_coefficient(m_true)
    else:
        p_true = np.asarray(m_true, dtype=np.float64)
    d_true = model.evaluate(p_true)
    rng = np.random.default_rng(random_state)
    return d_true * (1.0 + noise_level * rng.standard_normal(size=d_true.shape))

"""
Provide the adjoint-adjoint gradient and the inversion tools.

The following functionalities are directly provided on module-level.

.. currentmodule:: pyadjadj.inverse

Classes
=======

Inversion executors
^^^^^^^^^^^^^^^^^^^

Gradient-based optimizers (scipy and l-bfgs-b).

.. autosummary::
   :toctree: _autosummary

    executors

.. currentmodule:: pyadjadj.inverse

Parametrizations
^^^^^^^^^^^^^^^^

Maps from the adjusted values to the coefficient dofs. The neural network
parametrization lives in :mod:`pyadjadj.inverse.nn_parametrization` and requires
`torch`.

.. autosummary::
   :toctree: _autosummary

    Parametrization
    IdentityParametrization
    ExponentialParametrization
    TanhParametrization
    EllipseParametrization

Inverse model
^^^^^^^^^^^^^

.. autosummary::
   :toctree: _autosummary

    InverseModel

Functions
=========

Gradients
^^^^^^^^^

.. autosummary::
   :toctree: _autosummary

    compute_adjoint_adjoint_gradient
    gradient
    compute_fd_gradient
    is_adjoint_gradient_correct
    get_gradient_summary

Loss functions and observations
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. autosummary::
   :toctree: _autosummary

    eval_loss_ls
    eval_loss_ls_gradient
    eval_model_loss_ls
    eval_model_loss_ls_gradient
    eval_objective
    eval_objective_gradient
    make_synthetic_measurements

"""

from pyadjadj.inverse import executors
from pyadjadj.inverse.gradient import (
    compute_adjoint_adjoint_gradient,
    compute_fd_gradient,
    get_gradient_summary,
    gradient,
    is_adjoint_gradient_correct,
)
from pyadjadj.inverse.loss_function import (
    eval_loss_ls,
    eval_loss_ls_gradient,
    eval_model_loss_ls,
    eval_model_loss_ls_gradient,
    eval_objective,
    eval_objective_gradient,
)
from pyadjadj.inverse.model import InverseModel
from pyadjadj.inverse.obs import make_synthetic_measurements
from pyadjadj.inverse.parametrization import (
    EllipseParametrization,
    ExponentialParametrization,
    IdentityParametrization,
    Parametrization,
    TanhParametrization,
)

__all__ = [
    "executors",
    "compute_adjoint_adjoint_gradient",
    "compute_fd_gradient",
    "get_gradient_summary",
    "gradient",
    "is_adjoint_gradient_correct",
    "eval_loss_ls",
    "eval_loss_ls_gradient",
    "eval_model_loss_ls",
    "eval_model_loss_ls_gradient",
    "eval_objective",
    "eval_objective_gradient",
    "InverseModel",
    "make_synthetic_measurements",
    "EllipseParametrization",
    "ExponentialParametrization",
    "IdentityParametrization",
    "Parametrization",
    "TanhParametrization",
]

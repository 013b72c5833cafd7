"""
PYADJADJ submodule providing a set of handy plot tools.

.. currentmodule:: pyadjadj.plot

Plot functions
^^^^^^^^^^^^^^
Functions to plot fields, measurements and gradients.

.. autosummary::
   :toctree: _autosummary

   apply_default_rc_params
   get_triangulation
   plot_field
   plot_measurements
   plot_grad_adj_vs_fd

"""

from pyadjadj.plot.config import apply_default_rc_params
from pyadjadj.plot.plt_field import get_triangulation, plot_field, plot_measurements
from pyadjadj.plot.plt_gradient import plot_grad_adj_vs_fd

__all__ = [
    "apply_default_rc_params",
    "get_triangulation",
    "plot_field",
    "plot_measurements",
    "plot_grad_adj_vs_fd",
]

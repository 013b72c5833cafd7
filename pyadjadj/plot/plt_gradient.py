"""Provide plot utilities for gradient comparison"""

from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import nested_grid_plotter as ngp
import numpy as np

from pyadjadj.fem import FunctionSpace
from pyadjadj.plot.plt_field import plot_field
from pyadjadj.utils import NDArrayFloat


def plot_grad_adj_vs_fd(
    space: FunctionSpace,
    adj_grad: NDArrayFloat,
    fd_grad: NDArrayFloat,
    fname: str,
    fig_save_path: Optional[Path] = None,
    res_scaling: Optional[float] = None,
    cmap: str = "RdBu_r",
) -> ngp.NestedGridPlotter:
    """
    Plot the adjoint gradient, its FD approximation and the residuals.

    Parameters
    ----------
    space : FunctionSpace
        Space of the coefficient.
    adj_grad : NDArrayFloat
        Gradient computed with the adjoint-adjoint method.
    fd_grad : NDArrayFloat
        Gradient approximated by finite differences.
    fname : str
        Name of the figure files (without extension).
    fig_save_path : Optional[Path], optional
        Folder in which the figure is saved as png and pdf. If None, the figure is
        not saved. The default is None.
    res_scaling : Optional[float], optional
        Multiplication factor of the residuals. If None, it is chosen so that the
        scaled residuals are just below the gradient values. The default is None.
    cmap : str, optional
        Colormap, by default "RdBu_r".

    Returns
    -------
    ngp.NestedGridPlotter
        The plotter holding the figure.
    """
    plotter = ngp.NestedGridPlotter(
        plt.figure(constrained_layout=True, figsize=(15, 5)),
        ngp.SubplotsMosaicBuilder(
            mosaic=[["ax1-1", "ax1-2", "ax1-3"]],
            sharey=True,
            sharex=True,
        ),
    )

    # We multiply the residuals so that the high residuals is just below the max values
    residuals = adj_grad - fd_grad

    if res_scaling is None:
        res_factor = 1.0
        if np.max(np.abs(residuals)) > 0.0:
            while np.max(np.abs(adj_grad)) > np.max(np.abs(residuals)) * res_factor:
                res_factor *= 2.0
            # Make sure it is below
            res_factor /= 2.0
    else:
        res_factor = res_scaling

    vmax = max(float(np.max(np.abs(adj_grad))), float(np.max(np.abs(fd_grad))))
    if vmax == 0.0:
        vmax = 1.0
    data = {
        "Finite differences": fd_grad,
        "Adjoint-adjoint": adj_grad,
        f"Residuals (x {res_factor:.0e})": residuals * res_factor,
    }
    for ax, (title, values) in zip(plotter.ax_dict.values(), data.items()):
        plot_field(ax, space, values, cmap=cmap, clims=(-vmax, vmax))
        ax.set_title(title)
        ax.set_xlabel("X")
    plotter.ax_dict["ax1-1"].set_ylabel("Y")

    if fig_save_path is not None:
        for format in ["png", "pdf"]:
            plotter.fig.savefig(
                str(fig_save_path.joinpath(f"{fname}.{format}")), format=format
            )
    return plotter

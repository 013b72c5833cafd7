import matplotlib.pyplot as plt
import nested_grid_plotter as ngp
import numpy as np
import pytest
from pyadjadj.exceptions import DimensionError
from pyadjadj.fem import make_disk_mesh, make_space
from pyadjadj.plot import (
    apply_default_rc_params,
    get_triangulation,
    plot_field,
    plot_grad_adj_vs_fd,
    plot_measurements,
)

mesh = make_disk_mesh(3)


@pytest.mark.parametrize("order, conformity", [(0, "L2"), (1, "H1")])
def test_plot_field(order, conformity) -> None:
    space = make_space(mesh, "lagrangian", order, conformity)
    values = space.interpolate(lambda x: x[..., 0] ** 2 + x[..., 1])
    fig, ax = plt.subplots(nrows=1, ncols=1, figsize=(5, 5))
    mappable = plot_field(ax, space, values, is_mesh=True)
    assert mappable.get_clim() == (np.min(values), np.max(values))
    plot_field(ax, space, values, clims=(-1.0, 1.0), is_colorbar=False)

    with pytest.raises(DimensionError, match="values for the field"):
        plot_field(ax, space, values[:-1])
    plt.close("all")


def test_get_triangulation() -> None:
    tri = get_triangulation(mesh)
    assert tri.triangles.shape == (mesh.n_cells, 3)
    np.testing.assert_array_equal(tri.x, mesh.points[:, 0])


def test_plot_measurements() -> None:
    angles = np.linspace(0.0, 2.0 * np.pi, 8, endpoint=False)
    d = np.random.default_rng(2024).normal(size=(8, 3))
    fig, ax = plt.subplots(nrows=1, ncols=1, figsize=(8, 4))
    plot_measurements(ax, angles, d, d_obs=d + 0.1, labels=["a", "b", "c"])
    assert len(ax.get_lines()) == 6

    with pytest.raises(DimensionError, match="Expected 7 excitations, got 8!"):
        plot_measurements(ax, angles[:-1], d)
    with pytest.raises(DimensionError, match="must have the same shape!"):
        plot_measurements(ax, angles, d, d_obs=d[:, :2])
    plt.close("all")


@pytest.mark.parametrize("res_scaling", [None, 10.0])
def test_plot_grad_adj_vs_fd(tmp_path, res_scaling) -> None:
    apply_default_rc_params()
    space = make_space(mesh, "lagrangian", 0, "L2")
    fd_grad = space.interpolate(lambda x: np.sin(3.0 * x[..., 0]))
    adj_grad = fd_grad + 1e-4 * np.random.default_rng(2024).normal(size=fd_grad.size)

    plotter = plot_grad_adj_vs_fd(
        space,
        adj_grad,
        fd_grad,
        fname="grad_comparison",
        fig_save_path=tmp_path,
        res_scaling=res_scaling,
    )
    assert isinstance(plotter, ngp.NestedGridPlotter)
    assert tmp_path.joinpath("grad_comparison.png").exists()
    assert tmp_path.joinpath("grad_comparison.pdf").exists()

    # identical gradients -> no scaling of the residuals and no file
    plot_grad_adj_vs_fd(space, fd_grad, fd_grad, fname="identical")
    assert not tmp_path.joinpath("identical.png").exists()
    plt.close("all")

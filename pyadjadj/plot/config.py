import matplotlib.pyplot as plt


def apply_default_rc_params() -> None:
    """Default parameters to obtain nice field and gradient plots."""
    plt.plot()
    plt.close()  # required for the plot to update
    plt.rcParams.update(
        {
            "font.family": "sans-serif",
            "font.sans-serif": ["Helvetica", "DejaVu Sans"],
            "font.size": 14,
            "mathtext.fontset": "cm",
            "text.usetex": False,
            "savefig.format": "png",
            "savefig.facecolor": "w",
            "savefig.dpi": 200,
            "figure.constrained_layout.use": True,
            "figure.facecolor": "w",
            "axes.titleweight": "bold",
            "axes.labelweight": "bold",
            "axes.titlesize": 16,
            "figure.titlesize": 18,
            "image.cmap": "magma",
        }
    )

"""Utilities to parse packages versions."""

import logging

import lbfgsb
import matplotlib
import meshio
import nested_grid_plotter
import numdifftools
import numpy as np
import scipy

from pyadjadj.__about__ import __version__


def show_versions(logger: logging.Logger) -> None:
    """Show the versions of all packages used by pyadjadj."""

    logger.info(f"Current version = {__version__}\n")
    logger.info("Used packages version:\n")
    logger.info(f"lbfgsb                      = {lbfgsb.__version__}")
    logger.info(f"matplotlib                  = {matplotlib.__version__}")
    logger.info(f"meshio                      = {meshio.__version__}")
    logger.info(f"nested_grid_plotter         = {nested_grid_plotter.__version__}")
    logger.info(f"numdiftools                 = {numdifftools.__version__}")
    logger.info(f"numpy                       = {np.__version__}")
    logger.info(f"scipy                       = {scipy.__version__}")

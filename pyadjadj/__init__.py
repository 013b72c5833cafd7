"""
Purpose
=======

**pyadjadj** is an open-source, pure python, and object-oriented library that
provides the adjoint-adjoint gradient of measurement based objective functions
for a coefficient inversion of a Poisson problem discretized with finite elements
and Nitsche boundary conditions.

Submodules
==========

.. autosummary::
    fem
    forward
    inverse
    utils
    plot
    exceptions

"""

from pyadjadj import exceptions, fem, forward, inverse, plot, utils
from pyadjadj.__about__ import __author__, __email__, __version__

__all__ = [
    "__version__",
    "__email__",
    "__author__",
    "exceptions",
    "fem",
    "forward",
    "inverse",
    "utils",
    "plot",
]

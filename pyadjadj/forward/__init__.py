"""
Provide the forward model of the Nitsche-Poisson problem.

The following functionalities are directly provided on module-level.

.. currentmodule:: pyadjadj.forward

Model
^^^^^

.. autosummary::
   :toctree: _autosummary

    ForwardModel
    ModelState
    SolveStats

Weak forms
^^^^^^^^^^

.. autosummary::
   :toctree: _autosummary

    NitscheParameters
    get_nitsche_parameters
    a
    dot_a
    b
    c
    dn
    mass

Linear solver
^^^^^^^^^^^^^

.. autosummary::
   :toctree: _autosummary

    LinearSolverConfig
    LinearSolverType
    solve_linear_system
    solve_direct
    solve_iterative
    get_gmres_limits

Patterns
^^^^^^^^

.. autosummary::
   :toctree: _autosummary

    get_angle_to_direction
    get_boundary_excitations
    get_default_extraction_locations
    get_disk_indicator_extractions
    get_gaussian_extractions
    get_constant_field
    is_in_ellipse
    get_ellipse_material
    get_two_region_material

"""

from pyadjadj.forward.linear_solver import (
    LinearSolverConfig,
    LinearSolverType,
    get_gmres_limits,
    solve_direct,
    solve_iterative,
    solve_linear_system,
)
from pyadjadj.forward.model import ForwardModel, ModelState, SolveStats
from pyadjadj.forward.patterns import (
    get_angle_to_direction,
    get_boundary_excitations,
    get_constant_field,
    get_default_extraction_locations,
    get_disk_indicator_extractions,
    get_ellipse_material,
    get_gaussian_extractions,
    get_two_region_material,
    is_in_ellipse,
)
from pyadjadj.forward.weak_forms import (
    NitscheParameters,
    a,
    b,
    c,
    dn,
    dot_a,
    get_nitsche_parameters,
    mass,
)

__all__ = [
    "LinearSolverConfig",
    "LinearSolverType",
    "get_gmres_limits",
    "solve_direct",
    "solve_iterative",
    "solve_linear_system",
    "ForwardModel",
    "ModelState",
    "SolveStats",
    "get_angle_to_direction",
    "get_boundary_excitations",
    "get_constant_field",
    "get_default_extraction_locations",
    "get_disk_indicator_extractions",
    "get_ellipse_material",
    "get_gaussian_extractions",
    "get_two_region_material",
    "is_in_ellipse",
    "NitscheParameters",
    "a",
    "b",
    "c",
    "dn",
    "dot_a",
    "get_nitsche_parameters",
    "mass",
]

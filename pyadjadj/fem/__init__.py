"""
Provide a minimal finite element toolbox for 2D triangular meshes.

The following functionalities are directly provided on module-level.

.. currentmodule:: pyadjadj.fem

Meshes
^^^^^^

.. autosummary::
   :toctree: _autosummary

    TriMesh
    make_disk_mesh
    load_mesh
    save_mesh
    get_cell_volumes

Measures and quadrature
^^^^^^^^^^^^^^^^^^^^^^^

.. autosummary::
   :toctree: _autosummary

    CellMeasure
    BoundaryMeasure
    get_measures
    get_segment_quadrature
    get_triangle_quadrature

Function spaces
^^^^^^^^^^^^^^^

.. autosummary::
   :toctree: _autosummary

    FunctionSpace
    make_space
    num_dofs

Weak forms
^^^^^^^^^^

.. autosummary::
   :toctree: _autosummary

    TestFunction
    TrialFunction
    Function
    Coefficient
    Constant
    FacetNormal
    Form
    grad
    inner

Assembly
^^^^^^^^

.. autosummary::
   :toctree: _autosummary

    assemble_bilinear
    assemble_linear
    assemble_scalar
    get_mass_matrix
    project
    project_functional

"""

from pyadjadj.fem.assembly import (
    assemble_bilinear,
    assemble_linear,
    assemble_scalar,
    get_mass_matrix,
    project,
    project_functional,
)
from pyadjadj.fem.forms import (
    Coefficient,
    Constant,
    Expr,
    FacetNormal,
    Form,
    Function,
    TestFunction,
    TrialFunction,
    grad,
    inner,
)
from pyadjadj.fem.measures import BoundaryMeasure, CellMeasure, Measure, get_measures
from pyadjadj.fem.mesh import (
    TriMesh,
    get_cell_volumes,
    load_mesh,
    make_disk_mesh,
    save_mesh,
)
from pyadjadj.fem.quadrature import get_segment_quadrature, get_triangle_quadrature
from pyadjadj.fem.spaces import FunctionSpace, make_space, num_dofs

__all__ = [
    "assemble_bilinear",
    "assemble_linear",
    "assemble_scalar",
    "get_mass_matrix",
    "project",
    "project_functional",
    "Coefficient",
    "Constant",
    "Expr",
    "FacetNormal",
    "Form",
    "Function",
    "TestFunction",
    "TrialFunction",
    "grad",
    "inner",
    "BoundaryMeasure",
    "CellMeasure",
    "Measure",
    "get_measures",
    "TriMesh",
    "get_cell_volumes",
    "load_mesh",
    "make_disk_mesh",
    "save_mesh",
    "get_segment_quadrature",
    "get_triangle_quadrature",
    "FunctionSpace",
    "make_space",
    "num_dofs",
]

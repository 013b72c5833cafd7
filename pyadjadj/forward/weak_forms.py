# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 Antoine COLLET

r"""
Weak forms of the Poisson problem with Nitsche boundary conditions.

The state :math:`u` solves :math:`-\nabla \cdot (m \nabla u) = 0` in
:math:`\Omega` with :math:`u = g` on :math:`\Gamma`. The Dirichlet condition is
imposed weakly (Nitsche) which gives, with :math:`\partial_n u = \nabla u \cdot n`,

.. math::

    a(u, v; m) = \int_{\Omega} m \nabla u \cdot \nabla v \, d\Omega
    - \int_{\Gamma} \left(m \partial_n u \, v + u \partial_n v \right) d\Gamma
    + \int_{\Gamma} \alpha_h u v \, d\Gamma

    b(v; g) = \int_{\Gamma} \partial_n v \, g \, d\Gamma
    - \int_{\Gamma} \alpha_h g v \, d\Gamma

and the discrete state solves :math:`a(u, v; m) = -b(v; g)` for all :math:`v`.
"""

from __future__ import annotations

from dataclasses import dataclass

from pyadjadj.fem import (
    BoundaryMeasure,
    CellMeasure,
    Expr,
    FacetNormal,
    Form,
    TriMesh,
    grad,
    inner,
)
from pyadjadj.fem.forms import as_expression
from pyadjadj.utils.dataclass import register_params_ds

nitsche_parameters_params_ds = r"""
    dx: CellMeasure
        Measure over the cells of the mesh.
    ds: BoundaryMeasure
        Measure over the boundary edges of the mesh.
    n: FacetNormal
        Outward unit normal of the boundary.
    alpha_h: float
        Nitsche penalty coefficient. It must scale as O(1/h) for the bilinear
        form to be coercive.
    """


@register_params_ds(nitsche_parameters_params_ds)
@dataclass
class NitscheParameters:
    """
    Integration context shared by all weak forms.

    Parameters
    ----------
    """

    dx: CellMeasure
    ds: BoundaryMeasure
    n: FacetNormal
    alpha_h: float


def get_nitsche_parameters(
    mesh: TriMesh, degree: int = 2, penalty: float = 10.0
) -> NitscheParameters:
    r"""
    Return the integration context of the weak forms on the given mesh.

    The penalty is :math:`\alpha_h = \gamma / h` with :math:`\gamma` the
    `penalty` and :math:`h = \sqrt{|\Omega| / N_{cells}}` the mean cell size.
    On the unit disk this is :math:`\gamma / \sqrt{\pi / N_{cells}}`.

    Parameters
    ----------
    mesh : TriMesh
        The mesh.
    degree : int, optional
        Quadrature degree, by default 2 (exact for products of two P1 functions).
    penalty : float, optional
        Dimensionless penalty :math:`\gamma`, by default 10.0.
    """
    if penalty <= 0.0:
        raise ValueError("The Nitsche penalty must be strictly positive!")
    return NitscheParameters(
        dx=CellMeasure(mesh, degree),
        ds=BoundaryMeasure(mesh, degree),
        n=FacetNormal(),
        alpha_h=float(penalty / mesh.mesh_size),
    )


def dn(u: Expr, n: FacetNormal) -> Expr:
    """Return the normal derivative of u."""
    return inner(grad(u), n)


def a(u: Expr, v: Expr, m, pars: NitscheParameters) -> Form:
    """Bilinear form of the diffusion operator with Nitsche terms."""
    m = as_expression(m)
    return (
        m * inner(grad(u), grad(v)) * pars.dx
        - (m * dn(u, pars.n) * v + u * dn(v, pars.n)) * pars.ds
        + pars.alpha_h * u * v * pars.ds
    )


def dot_a(
    u: Expr,
    v: Expr,
    m,
    dot_m,
    pars: NitscheParameters,
    is_boundary_sensitivity: bool = True,
) -> Form:
    r"""
    Directional derivative of :func:`a` with respect to m in the direction dot_m.

    `a` is linear in m so that the derivative does not depend on m:

    .. math::

        \dot{a}(u, v; m, \dot{m}) = \int_{\Omega} \dot{m} \nabla u \cdot \nabla v
        \, d\Omega - \int_{\Gamma} \dot{m} \partial_n u \, v \, d\Gamma

    Parameters
    ----------
    u : Expr
        Trial slot (function or trial function).
    v : Expr
        Test slot (function or test function).
    m : Any
        Current coefficient field. Unused, kept for a signature matching `a`.
    dot_m : Any
        Direction of derivation, typically a test function of the coefficient
        space to obtain the derivative with respect to each coefficient dof.
    pars : NitscheParameters
        Integration context.
    is_boundary_sensitivity : bool, optional
        Whether to include the derivative of the Nitsche consistency term. Without
        it, only the volume term is kept and the derivative is not exact for cells
        touching the boundary. The default is True.
    """
    dot_m = as_expression(dot_m)
    form = dot_m * inner(grad(u), grad(v)) * pars.dx
    if is_boundary_sensitivity:
        form = form - dot_m * dn(u, pars.n) * v * pars.ds
    return form


def b(v: Expr, m, g, pars: NitscheParameters) -> Form:
    """Linear form imposing the Dirichlet data g (excitation)."""
    g = as_expression(g)
    return dn(v, pars.n) * g * pars.ds - pars.alpha_h * g * v * pars.ds


def c(u: Expr, m, mu, pars: NitscheParameters) -> Form:
    """Linear form extracting the mu-weighted integral of u (detector response)."""
    mu = as_expression(mu)
    return mu * u * pars.dx


def mass(u: Expr, v: Expr, pars: NitscheParameters) -> Form:
    """L2 inner product over the domain."""
    return u * v * pars.dx

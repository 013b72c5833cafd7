# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 Antoine COLLET

r"""
Provide a small language to write weak forms.

Expressions are lazy trees built from test and trial functions, discrete
functions, coefficients, constants and the facet normal. Multiplying an expression
by a measure gives a :class:`Form`, e.g.

.. code-block:: python

    u, v = TrialFunction(U), TestFunction(V)
    form = m * inner(grad(u), grad(v)) * dx + alpha_h * u * v * ds

Evaluating an expression on a measure returns an array with shape
(n_entities, n_q, n_test, n_trial) for scalar expressions and
(n_entities, n_q, n_test, n_trial, 2) for vector expressions. `n_test`
(respectively `n_trial`) is the number of local dofs of the test (trial) space
if the expression depends on the test (trial) function, and 1 otherwise.
"""

from __future__ import annotations

import numbers
from typing import Callable, Dict, List, Optional, Tuple, Union

import numpy as np
import numpy.typing as npt

from pyadjadj.exceptions import DimensionError, SetupError
from pyadjadj.fem.measures import Measure
from pyadjadj.fem.spaces import FunctionSpace
from pyadjadj.utils.types import NDArrayFloat

TEST = "test"
TRIAL = "trial"

Arguments = Dict[str, FunctionSpace]


def _merge_arguments(a: Arguments, b: Arguments) -> Arguments:
    """Merge the arguments of the two factors of a product."""
    for role in a:
        if role in b:
            raise SetupError(
                f"The expression is not linear with respect to the {role} function!"
            )
    return {**a, **b}


def _same_arguments(a: Arguments, b: Arguments) -> bool:
    return a.keys() == b.keys() and all(a[role] is b[role] for role in a)


class Expr:
    """Base class of the weak form expressions."""

    __slots__ = []

    # numpy scalars must defer to the reflected operators below
    __array_ufunc__ = None

    #: 0 for scalar expressions, 1 for vector expressions
    rank: int = 0

    @property
    def arguments(self) -> Arguments:
        """Return the test/trial functions the expression depends on."""
        return {}

    def evaluate(self, measure: Measure) -> NDArrayFloat:
        raise NotImplementedError

    def __add__(self, other) -> Union[Expr, Form]:
        _other = as_expression(other)
        if _other is None:
            return NotImplemented
        return Sum(self, _other)

    def __radd__(self, other) -> Expr:
        _other = as_expression(other)
        if _other is None:
            return NotImplemented
        return Sum(_other, self)

    def __sub__(self, other) -> Expr:
        _other = as_expression(other)
        if _other is None:
            return NotImplemented
        return Sum(self, Product(Constant(-1.0), _other))

    def __rsub__(self, other) -> Expr:
        _other = as_expression(other)
        if _other is None:
            return NotImplemented
        return Sum(_other, Product(Constant(-1.0), self))

    def __neg__(self) -> Expr:
        return Product(Constant(-1.0), self)

    def __mul__(self, other) -> Union[Expr, Form]:
        if isinstance(other, Measure):
            return Form([(self, other)])
        _other = as_expression(other)
        if _other is None:
            return NotImplemented
        return Product(self, _other)

    def __rmul__(self, other) -> Expr:
        _other = as_expression(other)
        if _other is None:
            return NotImplemented
        return Product(_other, self)

    def __truediv__(self, other) -> Expr:
        if not isinstance(other, numbers.Real):
            return NotImplemented
        return Product(self, Constant(1.0 / float(other)))


def as_expression(obj) -> Optional[Expr]:
    """
    Convert the object to an expression.

    Numbers and arrays become constants, callables become coefficients. None is
    returned if the object cannot be converted.
    """
    if isinstance(obj, Expr):
        return obj
    if isinstance(obj, (numbers.Real, np.ndarray)):
        return Constant(obj)
    if callable(obj):
        return Coefficient(obj)
    return None


class Constant(Expr):
    """Constant scalar or 2D vector."""

    __slots__ = ["value"]

    def __init__(self, value: npt.ArrayLike) -> None:
        self.value: NDArrayFloat = np.asarray(value, dtype=np.float64)
        if self.value.shape not in [(), (2,)]:
            raise DimensionError("A constant must be a scalar or a 2D vector!")

    @property
    def rank(self) -> int:  # type: ignore[override]
        return self.value.ndim

    def evaluate(self, measure: Measure) -> NDArrayFloat:
        return self.value.reshape((1, 1, 1, 1) + self.value.shape)


class Coefficient(Expr):
    """
    Field given by a function of the coordinates.

    The function receives the quadrature points with shape (n_entities, n_q, 2)
    and must return an array with shape (n_entities, n_q) or a scalar.
    """

    __slots__ = ["func"]

    def __init__(self, func: Callable[[NDArrayFloat], npt.ArrayLike]) -> None:
        self.func = func

    def evaluate(self, measure: Measure) -> NDArrayFloat:
        values = np.asarray(self.func(measure.points), dtype=np.float64)
        values = np.broadcast_to(values, measure.weights.shape)
        return values[:, :, np.newaxis, np.newaxis]


class FacetNormal(Expr):
    """Outward unit normal of the boundary (only on boundary measures)."""

    __slots__ = []
    rank = 1

    def evaluate(self, measure: Measure) -> NDArrayFloat:
        if measure.normals is None:
            raise SetupError("The facet normal is only defined on boundary measures!")
        return measure.normals[:, np.newaxis, np.newaxis, np.newaxis, :]


class Function(Expr):
    """Discrete field defined by its dof values in a function space."""

    __slots__ = ["space", "values"]

    def __init__(self, space: FunctionSpace, values: npt.ArrayLike) -> None:
        _values = np.array(values, dtype=np.float64)
        if _values.shape != (space.n_dofs,):
            raise DimensionError(
                f"Expected {space.n_dofs} dof values for {space}, got an array of "
                f"shape {_values.shape}!"
            )
        self.space: FunctionSpace = space
        self.values: NDArrayFloat = _values

    def _local_values(self, measure: Measure) -> NDArrayFloat:
        return self.values[self.space.cell_dofs[measure.cells]]

    def evaluate(self, measure: Measure) -> NDArrayFloat:
        res = np.einsum(
            "eqn,en->eq",
            self.space.basis_values(measure),
            self._local_values(measure),
        )
        return res[:, :, np.newaxis, np.newaxis]

    def evaluate_gradient(self, measure: Measure) -> NDArrayFloat:
        res = np.einsum(
            "eqnd,en->eqd",
            self.space.basis_gradients(measure),
            self._local_values(measure),
        )
        return res[:, :, np.newaxis, np.newaxis, :]


class TestFunction(Expr):
    """Shape functions of the test space (rows of the assembled operators)."""

    __slots__ = ["space"]
    # prevent pytest from collecting the class
    __test__ = False

    def __init__(self, space: FunctionSpace) -> None:
        self.space: FunctionSpace = space

    @property
    def arguments(self) -> Arguments:
        return {TEST: self.space}

    def evaluate(self, measure: Measure) -> NDArrayFloat:
        return self.space.basis_values(measure)[:, :, :, np.newaxis]

    def evaluate_gradient(self, measure: Measure) -> NDArrayFloat:
        return self.space.basis_gradients(measure)[:, :, :, np.newaxis, :]


class TrialFunction(Expr):
    """Shape functions of the trial space (columns of the assembled operators)."""

    __slots__ = ["space"]

    def __init__(self, space: FunctionSpace) -> None:
        self.space: FunctionSpace = space

    @property
    def arguments(self) -> Arguments:
        return {TRIAL: self.space}

    def evaluate(self, measure: Measure) -> NDArrayFloat:
        return self.space.basis_values(measure)[:, :, np.newaxis, :]

    def evaluate_gradient(self, measure: Measure) -> NDArrayFloat:
        return self.space.basis_gradients(measure)[:, :, np.newaxis, :, :]


class Grad(Expr):
    """Gradient of a discrete function or of a test/trial function."""

    __slots__ = ["operand"]
    rank = 1

    def __init__(self, operand: Expr) -> None:
        if not isinstance(operand, (Function, TestFunction, TrialFunction)):
            raise SetupError(
                "The gradient is only available for Function, TestFunction "
                "and TrialFunction instances!"
            )
        self.operand = operand

    @property
    def arguments(self) -> Arguments:
        return self.operand.arguments

    def evaluate(self, measure: Measure) -> NDArrayFloat:
        return self.operand.evaluate_gradient(measure)


class Sum(Expr):
    """Sum of two expressions with the same arguments and rank."""

    __slots__ = ["left", "right"]

    def __init__(self, left: Expr, right: Expr) -> None:
        if not _same_arguments(left.arguments, right.arguments):
            raise SetupError(
                "Cannot add expressions that do not depend on the same test and "
                "trial functions!"
            )
        if left.rank != right.rank:
            raise DimensionError("Cannot add a scalar and a vector expression!")
        self.left = left
        self.right = right

    @property
    def rank(self) -> int:  # type: ignore[override]
        return self.left.rank

    @property
    def arguments(self) -> Arguments:
        return self.left.arguments

    def evaluate(self, measure: Measure) -> NDArrayFloat:
        return self.left.evaluate(measure) + self.right.evaluate(measure)


class Product(Expr):
    """Product of a scalar expression with a scalar or vector expression."""

    __slots__ = ["left", "right", "_arguments"]

    def __init__(self, left: Expr, right: Expr) -> None:
        if left.rank == 1 and right.rank == 1:
            raise DimensionError("Use inner() to multiply two vector expressions!")
        self._arguments: Arguments = _merge_arguments(left.arguments, right.arguments)
        self.left = left
        self.right = right

    @property
    def rank(self) -> int:  # type: ignore[override]
        return max(self.left.rank, self.right.rank)

    @property
    def arguments(self) -> Arguments:
        return self._arguments

    def evaluate(self, measure: Measure) -> NDArrayFloat:
        left = self.left.evaluate(measure)
        right = self.right.evaluate(measure)
        if self.left.rank < self.right.rank:
            left = left[..., np.newaxis]
        elif self.right.rank < self.left.rank:
            right = right[..., np.newaxis]
        return left * right


class Inner(Expr):
    """Inner product of two vector (or scalar) expressions."""

    __slots__ = ["left", "right", "_arguments"]

    def __init__(self, left: Expr, right: Expr) -> None:
        if left.rank != right.rank:
            raise DimensionError("inner() requires two expressions of same rank!")
        self._arguments: Arguments = _merge_arguments(left.arguments, right.arguments)
        self.left = left
        self.right = right

    @property
    def arguments(self) -> Arguments:
        return self._arguments

    def evaluate(self, measure: Measure) -> NDArrayFloat:
        res = self.left.evaluate(measure) * self.right.evaluate(measure)
        if self.left.rank == 1:
            return np.sum(res, axis=-1)
        return res


def grad(expr: Expr) -> Grad:
    """Return the gradient of the expression."""
    return Grad(expr)


def inner(left, right) -> Inner:
    """Return the inner product of the two expressions."""
    _left, _right = as_expression(left), as_expression(right)
    if _left is None or _right is None:
        raise SetupError("inner() arguments must be expressions!")
    return Inner(_left, _right)


class Form:
    """
    Sum of integrals of scalar expressions over measures.

    A form is linear with respect to its arguments: bilinear if every term
    depends on both a test and a trial function, linear if it only depends on a
    test function and a scalar functional if it has no argument.
    """

    __slots__ = ["terms"]

    def __init__(self, terms: List[Tuple[Expr, Measure]]) -> None:
        for integrand, _ in terms:
            if integrand.rank != 0:
                raise DimensionError("Integrands must be scalar expressions!")
        self.terms: List[Tuple[Expr, Measure]] = terms

    @property
    def arguments(self) -> Arguments:
        """Return the arguments of the form (those of its first term)."""
        if len(self.terms) == 0:
            return {}
        return self.terms[0][0].arguments

    def __add__(self, other: Form) -> Form:
        if not isinstance(other, Form):
            return NotImplemented
        return Form(self.terms + other.terms)

    def __sub__(self, other: Form) -> Form:
        if not isinstance(other, Form):
            return NotImplemented
        return Form(self.terms + (-other).terms)

    def __neg__(self) -> Form:
        return self * -1.0

    def __mul__(self, other) -> Form:
        if not isinstance(other, numbers.Real):
            return NotImplemented
        return Form(
            [(Product(Constant(other), integrand), m) for integrand, m in self.terms]
        )

    def __rmul__(self, other) -> Form:
        return self.__mul__(other)

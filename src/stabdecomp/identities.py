"""Rewrite identities that replace T-vertices by sums of stabilizer terms.

Each identity maps a graph and a selection of T-vertices to one term of a
decomposition. The terms of a family sum (as tensors) to the input graph:

- ``BSS_FAMILY``: 6 T-vertices into 7 terms, the Bravyi-Smith-Smolin
  decomposition of six T states. See Section IV of
  https://journals.aps.org/prx/pdf/10.1103/PhysRevX.6.021043, in particular the
  text below equation (10) and equation (11) itself.
- ``SYM_FAMILY``: 2 T-vertices into 2 terms spanning the symmetric 2-qubit
  subspace.
- ``SINGLE_FAMILY``: 1 T-vertex into 2 terms.

All identities assume the selected vertices are Z-spiders, as they are in any
graph-like diagram produced by ``pyzx.full_reduce``.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Callable, NamedTuple, Sequence

from pyzx.graph.base import BaseGraph
from pyzx.graph.scalar import Scalar
from pyzx.utils import EdgeType, VertexType

from stabdecomp.exact_scalar import ExactScalar
from stabdecomp.graph_util import add_edge_smart, add_typed_edge, clone


class ScalarFactor(NamedTuple):
    """An exact multiplier, in the form pyzx stores scalars.

    The value is sqrt(2)^power2 * e^(i*pi*phase) * prod(1 + e^(i*pi*p) for p in nodes).
    """

    power2: int = 0
    phase: Fraction = Fraction(0)
    nodes: tuple[Fraction, ...] = ()

    def apply(self, scalar: Scalar) -> None:
        """Multiply ``scalar`` by this factor in place."""
        scalar.add_power(self.power2)
        scalar.add_phase(self.phase)
        for node in self.nodes:
            scalar.add_node(node)

    def to_exact(self) -> ExactScalar:
        result = ExactScalar.sqrt2_pow(self.power2) * ExactScalar.from_phase(self.phase)
        for node in self.nodes:
            result = result * (ExactScalar.one() + ExactScalar.from_phase(node))
        return result


GraphEdit = Callable[[BaseGraph, Sequence[Any]], None]


@dataclass(frozen=True)
class RewriteIdentity:
    """One term of a decomposition: a scalar factor plus a fixed graph edit."""

    name: str
    arity: int
    factor: ScalarFactor
    edit: GraphEdit

    def __call__(self, g: BaseGraph, verts: Sequence[Any]) -> BaseGraph:
        """Return a rewritten copy of ``g``; the input graph is left untouched."""
        if len(verts) < self.arity:
            raise ValueError(
                f"{self.name} needs {self.arity} vertices but got {len(verts)}"
            )
        g = clone(g)
        self.factor.apply(g.scalar)
        self.edit(g, verts[: self.arity])
        return g


# ============================================================================
# Graph edits
# ============================================================================


def _shift_phases(delta: Fraction) -> GraphEdit:
    def edit(g: BaseGraph, verts: Sequence[Any]) -> None:
        for v in verts:
            g.add_to_phase(v, delta)

    return edit


def _star(ancilla_phase: Fraction, edge_type: EdgeType, delta: Fraction) -> GraphEdit:
    """Connect every selected vertex to one new Z-spider and shift its phase."""

    def edit(g: BaseGraph, verts: Sequence[Any]) -> None:
        w = g.add_vertex(VertexType.Z, phase=ancilla_phase)
        for v in verts:
            g.add_to_phase(v, delta)
            add_typed_edge(g, v, w, edge_type)

    return edit


def _phi(g: BaseGraph, verts: Sequence[Any]) -> None:
    ws = []
    for i in range(5):
        w = g.add_vertex(VertexType.Z, phase=Fraction(0))
        ws.append(w)
        add_typed_edge(g, verts[i], w, EdgeType.HADAMARD)
        add_typed_edge(g, w, verts[5], EdgeType.HADAMARD)
        g.add_to_phase(verts[i], Fraction(-1, 4))

    g.add_to_phase(verts[5], Fraction(3, 4))

    for i, j in ((0, 2), (0, 3), (1, 3), (1, 4), (2, 4)):
        add_typed_edge(g, ws[i], ws[j], EdgeType.HADAMARD)


def _phi_permuted(g: BaseGraph, verts: Sequence[Any]) -> None:
    _phi(g, [verts[0], verts[1], verts[3], verts[4], verts[5], verts[2]])


def _bell_s(g: BaseGraph, verts: Sequence[Any]) -> None:
    add_edge_smart(g, verts[0], verts[1], EdgeType.SIMPLE)
    g.add_to_phase(verts[0], Fraction(-1, 4))
    g.add_to_phase(verts[1], Fraction(1, 4))


# ============================================================================
# Identities
# ============================================================================

# Exact factors, written as 2^p * (a0 + a1*w + a2*w^2 + a3*w^3):
#   b60 = 2^-2 (-1 + w^2 + w^3)     b66 = 2^-2 (-1 + w^2 - w^3)
#   e6  = 2^1  (-w)                 o6  = 2^1  (-1 - w^2)
#   k6  = 2^1                       phi = 2^3  (1 + w^2)
#   t0  = 2^-1 (w - w^3)            t1  = 2^-1 (1 + w^2)
B60 = RewriteIdentity(
    "b60",
    6,
    ScalarFactor(-5, Fraction(3, 4), (Fraction(1, 4), Fraction(7, 4))),
    _shift_phases(Fraction(-1, 4)),
)

B66 = RewriteIdentity(
    "b66",
    6,
    ScalarFactor(-5, Fraction(3, 4), (Fraction(5, 4), Fraction(3, 4))),
    _shift_phases(Fraction(3, 4)),
)

E6 = RewriteIdentity(
    "e6",
    6,
    ScalarFactor(2, Fraction(5, 4)),
    _star(Fraction(1), EdgeType.HADAMARD, Fraction(1, 4)),
)

O6 = RewriteIdentity(
    "o6",
    6,
    ScalarFactor(3, Fraction(5, 4)),
    _star(Fraction(0), EdgeType.HADAMARD, Fraction(1, 4)),
)

K6 = RewriteIdentity(
    "k6",
    6,
    ScalarFactor(2),
    _star(Fraction(3, 2), EdgeType.SIMPLE, Fraction(-1, 4)),
)

PHI1 = RewriteIdentity("phi1", 6, ScalarFactor(7, Fraction(1, 4)), _phi)

# phi1 with inputs 2..5 cyclically shifted
PHI2 = RewriteIdentity("phi2", 6, PHI1.factor, _phi_permuted)

BELL_S = RewriteIdentity("bell_s", 2, ScalarFactor(), _bell_s)

EPR = RewriteIdentity(
    "epr",
    2,
    ScalarFactor(0, Fraction(1, 4)),
    _star(Fraction(1), EdgeType.HADAMARD, Fraction(-1, 4)),
)

T0 = RewriteIdentity(
    "t0",
    1,
    ScalarFactor(-1),
    _star(Fraction(0), EdgeType.HADAMARD, Fraction(-1, 4)),
)

T1 = RewriteIdentity(
    "t1",
    1,
    ScalarFactor(-1, Fraction(1, 4)),
    _star(Fraction(1), EdgeType.HADAMARD, Fraction(-1, 4)),
)

BSS_FAMILY: tuple[RewriteIdentity, ...] = (B60, B66, E6, O6, K6, PHI1, PHI2)
SYM_FAMILY: tuple[RewriteIdentity, ...] = (BELL_S, EPR)
SINGLE_FAMILY: tuple[RewriteIdentity, ...] = (T0, T1)


def family_for(n: int) -> tuple[RewriteIdentity, ...] | None:
    """Return the decomposition to use for a selection of ``n`` T-vertices.

    Six vertices use the BSS decomposition, two to five use the symmetric
    decomposition on the first two, a single vertex uses the single-T
    decomposition, and an empty selection is a terminal graph (``None``).
    """
    if n == 6:
        return BSS_FAMILY
    if n >= 2:
        return SYM_FAMILY
    if n == 1:
        return SINGLE_FAMILY
    return None

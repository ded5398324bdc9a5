from __future__ import annotations

from typing import Callable, Literal, Union

import pyzx as zx
from pyzx.graph.base import BaseGraph

SimplifyMode = Literal["full", "clifford", "none"]
Simplifier = Callable[[BaseGraph], object]
SimplifySpec = Union[SimplifyMode, Simplifier]


def full_simp(g: BaseGraph) -> None:
    """Reduce ``g`` in place with pyzx's ``full_reduce``.

    Scalar diagrams without T-vertices reduce to the empty graph, leaving their
    whole value on ``g.scalar``.
    """
    zx.simplify.full_reduce(g, quiet=True)


def clifford_simp(g: BaseGraph) -> None:
    """Apply only the Clifford rewrites (spider fusion, pivoting, local complementation)."""
    zx.simplify.clifford_simp(g, quiet=True)


_SIMPLIFIERS: dict[str, Simplifier | None] = {
    "full": full_simp,
    "clifford": clifford_simp,
    "none": None,
}


def get_simplifier(mode: SimplifySpec) -> Simplifier | None:
    """Resolve a simplification mode to the hook applied to each new term.

    Args:
        mode: One of ``"full"``, ``"clifford"``, ``"none"``, or a callable that
            simplifies a graph in place. A custom callable must not introduce
            new T-vertices and must be picklable to be used in parallel runs.

    Returns:
        The hook, or None when no simplification is requested.
    """
    if callable(mode):
        return mode
    if mode not in _SIMPLIFIERS:
        raise ValueError(
            f"Unknown simplify mode {mode!r}, expected one of {sorted(_SIMPLIFIERS)}"
        )
    return _SIMPLIFIERS[mode]

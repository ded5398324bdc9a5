from __future__ import annotations

import copy
import random
from fractions import Fraction
from typing import Any

from pyzx.graph.base import BaseGraph
from pyzx.utils import EdgeType

from stabdecomp.exact_scalar import ExactScalar

MAX_SELECTION = 6


def clone(g: BaseGraph) -> BaseGraph:
    """Copy ``g`` without renumbering its vertices.

    ``BaseGraph.copy`` gives the copy consecutive vertex indices, which would
    invalidate a vertex selection made on ``g``.
    """
    return copy.deepcopy(g)


def is_t_vertex(g: BaseGraph, v: Any) -> bool:
    """Whether ``v`` carries an odd multiple of pi/4."""
    return Fraction(g.phase(v)).denominator == 4


def t_vertices(g: BaseGraph) -> list[Any]:
    return [v for v in g.vertices() if is_t_vertex(g, v)]


def tcount(g: BaseGraph) -> int:
    """Count the T-vertices of ``g``.

    Unlike ``pyzx.simplify.tcount`` this only counts phases with denominator 4,
    which are exactly the vertices the decomposer can remove.
    """
    return sum(1 for v in g.vertices() if is_t_vertex(g, v))


def first_ts(g: BaseGraph) -> list[Any]:
    """Pick the first (at most six) T-vertices in vertex enumeration order."""
    ts: list[Any] = []
    for v in g.vertices():
        if is_t_vertex(g, v):
            ts.append(v)
        if len(ts) == MAX_SELECTION:
            break
    return ts


def random_ts(g: BaseGraph, rng: random.Random) -> list[Any]:
    """Pick at most six T-vertices uniformly at random, without replacement."""
    pool = t_vertices(g)
    ts: list[Any] = []
    while len(ts) < MAX_SELECTION and pool:
        i = rng.randrange(len(pool))
        pool[i], pool[-1] = pool[-1], pool[i]
        ts.append(pool.pop())
    return ts


def add_typed_edge(g: BaseGraph, u: Any, v: Any, edge_type: EdgeType) -> None:
    """Add a fresh edge between two vertices that are not yet connected."""
    g.add_edge(g.edge(u, v), edge_type)


def add_edge_smart(g: BaseGraph, u: Any, v: Any, edge_type: EdgeType) -> None:
    """Add an edge, merging it with any edge already present between u and v.

    Parallel edges are resolved by pyzx's edge table, which applies the spider
    and Hopf laws and updates phases and the scalar accordingly.
    """
    if edge_type == EdgeType.SIMPLE:
        counts = [1, 0]
    elif edge_type == EdgeType.HADAMARD:
        counts = [0, 1]
    else:
        raise ValueError(f"Unsupported edge type {edge_type}")
    g.add_edge_table({g.edge(u, v): counts})


def term_scalar(g: BaseGraph) -> ExactScalar:
    """The exact value of the scalar attached to ``g``."""
    return ExactScalar.from_pyzx(g.scalar)

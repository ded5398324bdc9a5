from __future__ import annotations

import pyzx as zx
from pyzx.graph.base import BaseGraph

from stabdecomp.decomposer import Decomposer
from stabdecomp.exact_scalar import ExactScalar
from stabdecomp.simplify import SimplifySpec


def _reduced_decomposer(
    graph: BaseGraph,
    simplify: SimplifySpec,
    random_t: bool,
    seed: int | None,
    save: bool,
) -> Decomposer:
    g = graph.copy()
    zx.full_reduce(g, quiet=True)
    return Decomposer.from_graph(
        g, simplify=simplify, random_t=random_t, seed=seed, save=save
    )


def find_stab(
    graph: BaseGraph,
    simplify: SimplifySpec = "full",
    random_t: bool = False,
    seed: int | None = None,
) -> list[BaseGraph]:
    """Decompose a ZX-graph into a sum of stabilizer graphs.

    The input graph is not modified. It is reduced with ``zx.full_reduce`` and then
    decomposed depth-first, removing up to six T-vertices per step.

    Args:
        graph: The ZX graph to decompose.
        simplify: Simplification applied to every new term.
        random_t: Pick T-vertices at random instead of in vertex order.
        seed: Seed for the random T-vertex selection.

    Returns:
        A list of graphs without T-vertices whose sum equals the original graph.
    """
    d = _reduced_decomposer(graph, simplify, random_t, seed, save=True)
    return d.decompose_all().done


def stabilizer_sum(
    graph: BaseGraph,
    simplify: SimplifySpec = "full",
    random_t: bool = False,
    seed: int | None = None,
    parallel_depth: int | None = None,
    max_workers: int | None = None,
) -> tuple[ExactScalar, int]:
    """Evaluate a scalar ZX-graph exactly through its stabilizer decomposition.

    Args:
        graph: A ZX graph without inputs or outputs.
        simplify: Simplification applied to every new term.
        random_t: Pick T-vertices at random instead of in vertex order.
        seed: Seed for the random T-vertex selection.
        parallel_depth: If given, decompose breadth-first to this depth and finish
            the branches in worker processes.
        max_workers: Number of worker processes for the parallel decomposition.

    Returns:
        The exact value of the graph and the number of stabilizer terms summed.
    """
    d = _reduced_decomposer(graph, simplify, random_t, seed, save=False)
    if parallel_depth is None:
        d.decompose_all()
    else:
        d = d.decompose_parallel(parallel_depth, max_workers=max_workers)
    return d.scalar, d.nterms

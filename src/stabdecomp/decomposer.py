from __future__ import annotations

import logging
import random
import warnings
from collections import deque
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Sequence

from pyzx.graph.base import BaseGraph

from stabdecomp.exact_scalar import ExactScalar
from stabdecomp.graph_util import first_ts, random_ts, tcount, term_scalar
from stabdecomp.identities import RewriteIdentity, family_for
from stabdecomp.simplify import SimplifySpec, get_simplifier

logger = logging.getLogger(__name__)


class IncompleteReductionWarning(UserWarning):
    """A graph without T-vertices still had vertices when its scalar was summed.

    The scalar is added regardless, but the sum only equals the tensor of the
    input graph if the remaining vertices evaluate to one, which usually means
    the simplification hook did not fully reduce the term.
    """


def max_terms_for(t: int) -> int:
    """Upper bound on the number of stabilizer terms for a graph with ``t`` T-vertices."""
    count = 7 ** (t // 6)
    t %= 6
    count *= 2 ** (t // 2)
    if t % 2 == 1:
        count *= 2
    return count


def _decompose_all(d: Decomposer) -> Decomposer:
    """Worker function for ProcessPoolExecutor.

    Must be at module level so multiprocessing can pickle it by name.
    """
    return d.decompose_all()


@dataclass
class Decomposer:
    """A (partial) decomposition of a graph into a sum of stabilizer graphs.

    Graphs still containing T-vertices wait on ``stack`` together with the number
    of decomposition steps that produced them. Popping from the back of the stack
    works depth-first, popping from the front works breadth-first. Terms without
    T-vertices are summed into ``scalar`` and counted in ``nterms``.

    Attributes:
        stack: Pending ``(depth, graph)`` entries.
        done: Terminal graphs, only recorded when ``save`` is set.
        scalar: Exact sum of the scalars of all terminal graphs so far.
        nterms: Number of terminal graphs so far.
        incomplete: Number of terminal graphs that still had vertices.
        simplify: Simplification applied to every new term, see
            :func:`stabdecomp.simplify.get_simplifier`.
        random_t: Pick T-vertices at random instead of in vertex order.
        save: Record terminal graphs on ``done``.
        seed: Seed for the random T-vertex selection.
    """

    stack: deque[tuple[int, BaseGraph]] = field(default_factory=deque)
    done: list[BaseGraph] = field(default_factory=list)
    scalar: ExactScalar = field(default_factory=ExactScalar.zero)
    nterms: int = 0
    incomplete: int = 0
    simplify: SimplifySpec = "none"
    random_t: bool = False
    save: bool = False
    seed: int | None = None

    def __post_init__(self) -> None:
        get_simplifier(self.simplify)
        self._rng = random.Random(self.seed)

    @classmethod
    def from_graph(cls, g: BaseGraph, **config: Any) -> Decomposer:
        """Create a decomposer with a copy of ``g`` on the stack at depth 0.

        Args:
            g: The graph to decompose.
            **config: Any of ``simplify``, ``random_t``, ``save`` and ``seed``.
        """
        d = cls(**config)
        d.stack.append((0, g.copy()))
        return d

    def with_simp(self, mode: SimplifySpec) -> Decomposer:
        get_simplifier(mode)
        self.simplify = mode
        return self

    def with_full_simp(self) -> Decomposer:
        return self.with_simp("full")

    def use_random_t(self, flag: bool = True) -> Decomposer:
        self.random_t = flag
        return self

    def save_terms(self, flag: bool = True) -> Decomposer:
        self.save = flag
        return self

    def with_seed(self, seed: int | None) -> Decomposer:
        self.seed = seed
        self._rng = random.Random(seed)
        return self

    @property
    def is_done(self) -> bool:
        return not self.stack

    def max_terms(self) -> int:
        """Upper bound on the number of terms still to be produced by the stack.

        Every group of six T-vertices contributes a factor 7, every remaining
        pair a factor 2 and a remaining single T-vertex another factor 2.
        """
        return sum(max_terms_for(tcount(g)) for _, g in self.stack)

    def select_ts(self, g: BaseGraph) -> list[Any]:
        """Pick up to six T-vertices of ``g`` according to the selection policy."""
        if self.random_t:
            return random_ts(g, self._rng)
        return first_ts(g)

    def pop_graph(self) -> BaseGraph:
        if not self.stack:
            raise IndexError("pop from an empty decomposition stack")
        _, g = self.stack.pop()
        return g

    def decompose_top(self) -> Decomposer:
        """Decompose the first (at most six) T-vertices of the graph on top of the stack."""
        if not self.stack:
            raise IndexError("pop from an empty decomposition stack")
        depth, g = self.stack.pop()
        self.decompose_ts(depth, g, self.select_ts(g))
        return self

    def decompose_all(self) -> Decomposer:
        """Decompose depth-first until no T-vertices are left."""
        while self.stack:
            self.decompose_top()
        return self

    def decompose_until_depth(self, depth: int) -> Decomposer:
        """Decompose breadth-first until every pending graph is at least at ``depth``."""
        while self.stack:
            d, g = self.stack.popleft()
            if d >= depth:
                self.stack.appendleft((d, g))
                break
            self.decompose_ts(d, g, self.select_ts(g))
        return self

    def decompose_parallel(
        self, depth: int, max_workers: int | None = None
    ) -> Decomposer:
        """Decompose breadth-first to ``depth``, then finish every branch in parallel.

        Each pending graph at ``depth`` becomes its own decomposer, which is sent to a
        worker process, fully decomposed there and merged back. This decomposer is
        consumed; use the returned one.

        Args:
            depth: Depth at which the decomposition is split into independent units.
            max_workers: Number of worker processes. Defaults to the number of CPUs.

        Returns:
            The merged decomposer, with an empty stack.
        """
        self.decompose_until_depth(depth)
        logger.debug(
            "splitting %d pending graphs at depth %d, at most %d terms",
            len(self.stack),
            depth,
            self.max_terms(),
        )
        ds = self.split()
        with ProcessPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(_decompose_all, ds))
        return Decomposer.merge(results)

    def decompose_ts(self, depth: int, g: BaseGraph, ts: Sequence[Any]) -> None:
        """Decompose the given T-vertices of ``g``, or sum ``g`` if there are none.

        Six vertices are replaced with the 7-term BSS decomposition, two to five
        with the 2-term symmetric decomposition of the first two, and a single
        vertex with the 2-term single-T decomposition.
        """
        family = family_for(len(ts))
        if family is None:
            self._add_term(g)
        else:
            self._push_decomp(family, depth + 1, g, ts)

    def _push_decomp(
        self,
        family: Sequence[RewriteIdentity],
        depth: int,
        g: BaseGraph,
        verts: Sequence[Any],
    ) -> None:
        simp = get_simplifier(self.simplify)
        for identity in family:
            h = identity(g, verts)
            if simp is not None:
                simp(h)
            self.stack.append((depth, h))

    def _add_term(self, g: BaseGraph) -> None:
        self.scalar = self.scalar + term_scalar(g)
        self.nterms += 1
        if g.num_vertices() != 0:
            self.incomplete += 1
            logger.warning(
                "graph was not fully reduced: %d vertices remain", g.num_vertices()
            )
            warnings.warn(
                f"graph was not fully reduced: {g.num_vertices()} vertices remain",
                IncompleteReductionWarning,
            )
        if self.save:
            self.done.append(g)

    def split(self) -> list[Decomposer]:
        """Split a decomposer with N pending graphs into N decomposers with one each.

        Used for parallelising. Every new decomposer inherits the configuration; the
        last one in the list is this decomposer itself, keeping the accumulated
        ``scalar``, ``nterms``, ``incomplete`` and ``done``.
        """
        ds: list[Decomposer] = []
        while len(self.stack) > 1:
            entry = self.stack.popleft()
            d = Decomposer(
                simplify=self.simplify,
                random_t=self.random_t,
                save=self.save,
                seed=self._rng.getrandbits(64),
            )
            d.stack.append(entry)
            ds.append(d)
        ds.append(self)
        return ds

    @staticmethod
    def merge(ds: Sequence[Decomposer]) -> Decomposer:
        """Merge decomposers into one, adding up scalars and term counts.

        Pending graphs and terminal graphs are concatenated in list order. The
        configuration of the last decomposer is kept.
        """
        if not ds:
            return Decomposer()

        stack: deque[tuple[int, BaseGraph]] = deque()
        done: list[BaseGraph] = []
        scalar = ExactScalar.zero()
        nterms = 0
        incomplete = 0
        for d in ds:
            stack.extend(d.stack)
            done.extend(d.done)
            scalar = scalar + d.scalar
            nterms += d.nterms
            incomplete += d.incomplete

        merged = ds[-1]
        merged.stack = stack
        merged.done = done
        merged.scalar = scalar
        merged.nterms = nterms
        merged.incomplete = incomplete
        return merged

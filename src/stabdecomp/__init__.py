"""
stabdecomp decomposes ZX-diagrams with T-vertices (phases that are odd multiples of pi/4)
into exact scalar-weighted sums of stabilizer diagrams.
It exposes the `Decomposer` search driver and the `find_stab` and `stabilizer_sum` entry points.

The repo is organized as follows:

1. `exact_scalar.py` implements exact arithmetic in Z[e^(i*pi/4)][1/2], used to sum the
   scalars of all terms without rounding.
2. `graph_util.py` holds the small set of pyzx graph queries and edits the decomposer relies on,
   including T-vertex selection.
3. `identities.py` defines the rewrite identities (BSS, symmetric and single-T decompositions)
   as data: a scalar factor plus a graph edit each.
4. `simplify.py` resolves the simplification hook applied to every new term.
5. `decomposer.py` drives the depth-first, breadth-first and parallel decomposition.
6. `stabrank.py` wraps everything into one-call helpers.
"""

__version__ = "0.1.0"

from stabdecomp.decomposer import (
    Decomposer as Decomposer,
    IncompleteReductionWarning as IncompleteReductionWarning,
)
from stabdecomp.exact_scalar import ExactScalar as ExactScalar
from stabdecomp.stabrank import (
    find_stab as find_stab,
    stabilizer_sum as stabilizer_sum,
)

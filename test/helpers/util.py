from typing import Iterable

import numpy as np
from pyzx.graph.base import BaseGraph


def tensor_of(g: BaseGraph) -> np.ndarray:
    """Tensor of ``g`` by pyzx tensor contraction, including its scalar."""
    return np.asarray(g.to_tensor(preserve_scalar=True))


def tensor_sum(graphs: Iterable[BaseGraph]) -> np.ndarray:
    """Sum the tensors of a list of graphs with identical boundaries."""
    total = None
    for g in graphs:
        t = tensor_of(g)
        total = t if total is None else total + t
    if total is None:
        raise ValueError("Cannot sum an empty list of graphs")
    return total


def scalar_value(g: BaseGraph) -> complex:
    """The value of a graph without inputs or outputs."""
    if g.num_vertices() == 0:
        return complex(g.scalar.to_number())
    return complex(tensor_of(g).reshape(-1)[0])

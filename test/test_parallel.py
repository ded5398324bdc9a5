import numpy as np
import pytest

from stabdecomp import Decomposer, stabilizer_sum
from test.helpers.gen import (
    T_HEAVY_CASES,
    isolated_t_graph,
    random_scalar_graph,
    reduced_tcount,
)
from test.helpers.util import scalar_value, tensor_of, tensor_sum


@pytest.mark.filterwarnings("ignore::stabdecomp.IncompleteReductionWarning")
@pytest.mark.parametrize("depth", [0, 1, 2])
def test_decompose_parallel_term_count(depth):
    g = isolated_t_graph(9)
    d = Decomposer.from_graph(g, save=True)

    merged = d.decompose_parallel(depth, max_workers=2)

    assert merged.is_done
    assert merged.nterms == 28
    assert len(merged.done) == 28
    assert np.allclose(tensor_sum(merged.done), tensor_of(g))


@pytest.mark.filterwarnings("ignore::stabdecomp.IncompleteReductionWarning")
def test_decompose_parallel_matches_sequential():
    g = isolated_t_graph(8)
    sequential = Decomposer.from_graph(g).decompose_all()
    parallel = Decomposer.from_graph(g).decompose_parallel(2, max_workers=2)

    assert parallel.scalar == sequential.scalar
    assert parallel.nterms == sequential.nterms
    assert parallel.incomplete == sequential.incomplete


@pytest.mark.parametrize("qubits, depth, p_t, seed", T_HEAVY_CASES)
def test_parallel_stabilizer_sum(qubits, depth, p_t, seed):
    g = random_scalar_graph(qubits, depth, p_t=p_t, seed=seed)
    assert reduced_tcount(g) > 0

    sequential, n_seq = stabilizer_sum(g)
    parallel, n_par = stabilizer_sum(g, parallel_depth=1, max_workers=2)

    assert parallel == sequential
    assert n_par == n_seq
    assert np.isclose(parallel.to_complex(), scalar_value(g))


def test_parallel_random_t():
    g = random_scalar_graph(4, 60, p_t=0.5, seed=15)
    assert reduced_tcount(g) >= 6
    scalar, _ = stabilizer_sum(
        g, random_t=True, seed=5, parallel_depth=1, max_workers=2
    )
    assert np.isclose(scalar.to_complex(), scalar_value(g))

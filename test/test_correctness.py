import numpy as np
import pytest
import pyzx as zx

from stabdecomp import Decomposer, find_stab, stabilizer_sum
from stabdecomp.graph_util import tcount
from stabdecomp.identities import BSS_FAMILY, SYM_FAMILY
from test.helpers.gen import (
    T_HEAVY_CASES,
    isolated_t_graph,
    random_scalar_graph,
    reduced_tcount,
)
from test.helpers.util import scalar_value, tensor_of, tensor_sum


@pytest.mark.parametrize("qubits, depth, p_t, seed", T_HEAVY_CASES)
def test_stabilizer_sum_matches_tensor(qubits, depth, p_t, seed):
    g = random_scalar_graph(qubits, depth, p_t=p_t, seed=seed)
    assert reduced_tcount(g) > 0
    expected = scalar_value(g)

    scalar, nterms = stabilizer_sum(g)

    assert nterms > 1
    assert np.isclose(scalar.to_complex(), expected)


@pytest.mark.parametrize("qubits, depth, p_t, seed", T_HEAVY_CASES)
def test_random_t_selection_matches_tensor(qubits, depth, p_t, seed):
    g = random_scalar_graph(qubits, depth, p_t=p_t, seed=seed)
    assert reduced_tcount(g) > 0
    expected = scalar_value(g)

    scalar, _ = stabilizer_sum(g, random_t=True, seed=seed + 100)

    assert np.isclose(scalar.to_complex(), expected)


@pytest.mark.parametrize("qubits, depth, p_t, seed", T_HEAVY_CASES)
def test_selection_policy_does_not_change_value(qubits, depth, p_t, seed):
    g = random_scalar_graph(qubits, depth, p_t=p_t, seed=seed)
    assert reduced_tcount(g) > 0

    first, _ = stabilizer_sum(g)
    random_choice, _ = stabilizer_sum(g, random_t=True, seed=seed)

    assert first == random_choice


@pytest.mark.parametrize("qubits, depth, p_t, seed", T_HEAVY_CASES)
def test_find_stab_terms_are_stabilizer(qubits, depth, p_t, seed):
    g = random_scalar_graph(qubits, depth, p_t=p_t, seed=seed)
    assert reduced_tcount(g) > 0
    expected = scalar_value(g)

    terms = find_stab(g)

    assert len(terms) > 1
    assert all(tcount(h) == 0 for h in terms)
    assert np.isclose(sum(scalar_value(h) for h in terms), expected)


@pytest.mark.parametrize("qubits, depth, p_t, seed", T_HEAVY_CASES)
def test_first_step_on_graph_like_diagram(qubits, depth, p_t, seed):
    g = random_scalar_graph(qubits, depth, p_t=p_t, seed=seed)
    zx.simplify.full_reduce(g, quiet=True)
    t = tcount(g)
    assert t > 0

    d = Decomposer.from_graph(g).decompose_top()

    family = BSS_FAMILY if t >= 6 else SYM_FAMILY
    assert len(d.stack) == len(family)
    assert all(tcount(h) < t for _, h in d.stack)
    assert np.isclose(sum(scalar_value(h) for _, h in d.stack), scalar_value(g))


def test_stabilizer_sum_without_t_vertices():
    g = random_scalar_graph(3, 25, seed=2)
    scalar, nterms = stabilizer_sum(g)

    assert nterms >= 1
    assert np.isclose(scalar.to_complex(), scalar_value(g))


@pytest.mark.filterwarnings("ignore::stabdecomp.IncompleteReductionWarning")
@pytest.mark.parametrize("num_t", [1, 2, 4, 6, 8])
def test_terms_sum_to_original_tensor(num_t):
    g = isolated_t_graph(num_t)
    d = Decomposer.from_graph(g, save=True).decompose_all()
    assert np.allclose(tensor_sum(d.done), tensor_of(g))


@pytest.mark.filterwarnings("ignore::stabdecomp.IncompleteReductionWarning")
def test_find_stab_preserves_tensor_with_outputs():
    g = isolated_t_graph(3)
    terms = find_stab(g, simplify="none")

    assert len(terms) == 4
    assert np.allclose(tensor_sum(terms), tensor_of(g))

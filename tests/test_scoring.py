import warnings

import pytest

from text_rank.datatypes import Edge, Graph
from text_rank.errors import ConfigurationError, NonConvergenceWarning
from text_rank.scoring import PageRankConfig, pagerank


def path_graph(scale=1.0):
    return Graph(nodes=["a", "b", "c", "d"],
                 edges=[Edge("a", "b", 1.0 * scale), Edge("b", "c", 2.0 * scale), Edge("c", "d", 3.0 * scale)])


def test_empty_graph():
    result = pagerank(Graph(nodes=[], edges=[]))
    assert result.scores == {}
    assert result.converged


def test_edgeless_graph_is_uniform():
    result = pagerank(Graph(nodes=["x", "y", "z"], edges=[]))
    assert all(score == 1 / 3 for score in result.scores.values())
    assert result.converged
    assert result.iterations == 0


def test_single_edge_scores_are_equal():
    result = pagerank(Graph(nodes=["a", "b"], edges=[Edge("a", "b", 4.2)]))
    assert result.scores["a"] == pytest.approx(result.scores["b"])
    assert result.scores["a"] == pytest.approx(0.5)


def test_two_cycle_converges():
    result = pagerank(Graph(nodes=["a", "b"], edges=[Edge("a", "b", 1.0)]), epsilon=1e-6)
    assert result.converged
    assert result.scores == {"a": pytest.approx(0.5), "b": pytest.approx(0.5)}


def test_scores_sum_to_one():
    result = pagerank(path_graph(), max_iterations=100)
    assert sum(result.scores.values()) == pytest.approx(1.0)
    assert all(score > 0 for score in result.scores.values())


def test_rescaling_weights_keeps_ranking():
    cfg = PageRankConfig(epsilon=1e-8, max_iterations=200)
    base = pagerank(path_graph(), cfg).scores
    scaled = pagerank(path_graph(scale=17.0), cfg).scores
    assert sorted(base, key=base.get) == sorted(scaled, key=scaled.get)
    for node in base:
        assert scaled[node] == pytest.approx(base[node], rel=1e-6)


def test_isolated_vertex_keeps_teleport_share():
    graph = Graph(nodes=["a", "b", "c"], edges=[Edge("a", "b", 1.0)])
    result = pagerank(graph, epsilon=1e-10, max_iterations=200)
    # c only ever receives (1-d)/N plus its share of its own dangling mass
    assert result.scores["c"] == pytest.approx(0.05 / (1 - 0.85 / 3), rel=1e-6)
    assert result.scores["a"] == pytest.approx(result.scores["b"])
    assert result.scores["c"] < result.scores["a"]


def test_hub_ranks_highest():
    graph = Graph(nodes=["hub", "x", "y", "z"],
                  edges=[Edge("hub", "x", 1.0), Edge("hub", "y", 1.0), Edge("hub", "z", 1.0)])
    scores = pagerank(graph, max_iterations=200).scores
    assert max(scores, key=scores.get) == "hub"


def test_non_convergence_is_flagged():
    with pytest.warns(NonConvergenceWarning):
        result = pagerank(path_graph(), max_iterations=1, epsilon=1e-12)
    assert not result.converged
    assert result.iterations == 1
    assert sum(result.scores.values()) == pytest.approx(1.0)


def test_results_are_reproducible():
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", NonConvergenceWarning)
        first = pagerank(path_graph())
        second = pagerank(path_graph())
    assert first.scores == second.scores


def test_invalid_config():
    with pytest.raises(ConfigurationError):
        PageRankConfig(damping=1.0)
    with pytest.raises(ConfigurationError):
        PageRankConfig(epsilon=0)
    with pytest.raises(ConfigurationError):
        PageRankConfig(max_iterations=0)
    with pytest.raises(ConfigurationError):
        pagerank(path_graph(), PageRankConfig(), damping=0.5)


def test_self_loop_rejected():
    with pytest.raises(ConfigurationError):
        pagerank(Graph(nodes=["a"], edges=[Edge("a", "a", 1.0)]))


def test_edge_outside_vertex_set_rejected():
    with pytest.raises(ConfigurationError):
        pagerank(Graph(nodes=["a"], edges=[Edge("a", "z", 1.0)]))

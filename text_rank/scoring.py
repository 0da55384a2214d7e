from __future__ import annotations
import logging
import warnings
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .datatypes import Graph, PageRankResult
from .errors import ConfigurationError, NonConvergenceWarning

logger = logging.getLogger(__name__)

@dataclass
class PageRankConfig:
    damping: float = 0.85
    epsilon: float = 1e-4  # L1 threshold between successive vectors
    max_iterations: int = 30

    def __post_init__(self):
        if not 0.0 <= self.damping < 1.0:
            raise ConfigurationError(f"damping must be in [0, 1), got {self.damping}")
        if self.epsilon <= 0:
            raise ConfigurationError(f"epsilon must be positive, got {self.epsilon}")
        if self.max_iterations < 1:
            raise ConfigurationError(f"max_iterations must be >= 1, got {self.max_iterations}")

def pagerank(graph: Graph, cfg: Optional[PageRankConfig] = None, **overrides) -> PageRankResult:
    """
    Weighted PageRank by power iteration.

    PR'(v) = (1-d)/N + d * (sum_{u~v} PR(u) * w(u,v) / W(u) + D/N)

    where W(u) is the total weight incident to u and D is the mass held by
    dangling vertices (W(u) == 0), spread uniformly over all N vertices.
    Every undirected edge is walked in both directions.

    Args:
        graph: Graph to rank; isolated vertices are allowed
        cfg: PageRankConfig, keyword overrides (damping, epsilon,
             max_iterations) build one when omitted

    Returns:
        PageRankResult with scores summing to 1 and a convergence flag
    """
    if cfg is None:
        cfg = PageRankConfig(**overrides)
    elif overrides:
        raise ConfigurationError("pass either a PageRankConfig or keyword overrides, not both")

    n = len(graph.nodes)
    if n == 0:
        return PageRankResult(scores={}, converged=True, iterations=0, delta=0.0)
    if not graph.edges:
        uniform = 1.0 / n
        return PageRankResult(scores={v: uniform for v in graph.nodes},
                              converged=True, iterations=0, delta=0.0)

    index = {v: k for k, v in enumerate(graph.nodes)}
    m = len(graph.edges)
    src = np.empty(2 * m, dtype=np.int64)
    dst = np.empty(2 * m, dtype=np.int64)
    w = np.empty(2 * m, dtype=np.float64)
    for k, e in enumerate(graph.edges):
        if e.i == e.j:
            raise ConfigurationError(f"self-loop on {e.i!r}")
        if e.i not in index or e.j not in index:
            raise ConfigurationError(f"edge {e.i!r}-{e.j!r} references a vertex outside the graph")
        a, b = index[e.i], index[e.j]
        src[2 * k], dst[2 * k] = a, b
        src[2 * k + 1], dst[2 * k + 1] = b, a
        w[2 * k] = w[2 * k + 1] = e.weight

    out_weight = np.bincount(src, weights=w, minlength=n)
    dangling = out_weight == 0
    share = np.divide(w, out_weight[src], out=np.zeros_like(w), where=out_weight[src] > 0)

    d = cfg.damping
    scores = np.full(n, 1.0 / n)
    converged = False
    delta = float("inf")
    iteration = 0
    for iteration in range(1, cfg.max_iterations + 1):
        flow = np.bincount(dst, weights=scores[src] * share, minlength=n)
        dangling_mass = scores[dangling].sum()
        new_scores = (1.0 - d) / n + d * (flow + dangling_mass / n)
        delta = float(np.abs(new_scores - scores).sum())
        scores = new_scores
        if delta < cfg.epsilon:
            converged = True
            break

    scores = scores / scores.sum()
    if converged:
        logger.debug("pagerank converged after %d iterations (delta=%.3g)", iteration, delta)
    else:
        logger.warning("pagerank did not converge in %d iterations (delta=%.3g > %.3g)",
                       cfg.max_iterations, delta, cfg.epsilon)
        warnings.warn(f"PageRank did not converge within {cfg.max_iterations} iterations",
                      NonConvergenceWarning, stacklevel=2)
    return PageRankResult(scores={v: float(scores[k]) for k, v in enumerate(graph.nodes)},
                          converged=converged, iterations=iteration, delta=delta)

from __future__ import annotations
import logging
import math
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import networkx as nx
import pandas as pd

from .candidates import candidates_all
from .datatypes import CandidatePair, Edge, Graph, TermSet, UnitId
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

OverlapFn = Callable[[TermSet, TermSet], float]

def overlap_weight(terms_a: TermSet, terms_b: TermSet) -> float:
    """|a & b| / (log(|a|+1) + log(|b|+1)), 0 when either side is empty"""
    a, b = set(terms_a), set(terms_b)
    if not a or not b:
        return 0.0
    common = len(a & b)
    if common == 0:
        return 0.0
    return common / (math.log(len(a) + 1) + math.log(len(b) + 1))

def jaccard_weight(terms_a: TermSet, terms_b: TermSet) -> float:
    a, b = set(terms_a), set(terms_b)
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)

def as_rows(data) -> Iterable[tuple]:
    if isinstance(data, pd.DataFrame):
        return data.itertuples(index=False, name=None)
    return data

def term_sets_from_tokens(tokens, units: Optional[Sequence[UnitId]] = None) -> Dict[UnitId, TermSet]:
    """
    Collapse (unit_id, token) or (unit_id, token, relevant) rows into one
    deduplicated term set per unit. Units listed in `units` but absent from
    the rows get an empty set. Missing tokens (None, NaN) are skipped.
    """
    collected: Dict[UnitId, set] = {u: set() for u in (units or [])}
    for row in as_rows(tokens):
        if len(row) == 3:
            unit, token, relevant = row
            if not relevant:
                collected.setdefault(unit, set())
                continue
        elif len(row) == 2:
            unit, token = row
        else:
            raise ConfigurationError(f"Expected (unit_id, token[, relevant]) rows, got {row!r}")
        if pd.isna(token):
            collected.setdefault(unit, set())
            continue
        collected.setdefault(unit, set()).add(token)
    return {u: frozenset(t) for u, t in collected.items()}

def build_sentence_graph(units: Sequence[UnitId],
                         term_sets: Mapping[UnitId, TermSet],
                         candidates: Optional[Iterable[CandidatePair]] = None,
                         overlap_fn: OverlapFn = overlap_weight) -> Graph:
    """
    Undirected sentence graph over all `units`.

    Weights are computed exactly by `overlap_fn` on each candidate pair (all
    pairs when `candidates` is None). Zero weights are not stored, so units
    without overlap stay as isolated vertices.
    """
    units = list(units)
    if len(set(units)) != len(units):
        raise ConfigurationError("unit ids must be unique")
    position = {u: k for k, u in enumerate(units)}
    if candidates is None:
        pairs = candidates_all(units)
    else:
        pairs = set()
        for p in candidates:
            if p.a not in position or p.b not in position:
                raise ConfigurationError(f"candidate {p} references an unknown unit")
            a, b = sorted((p.a, p.b), key=position.__getitem__)
            pairs.add(CandidatePair(a, b))

    empty: TermSet = frozenset()
    edges: List[Edge] = []
    for p in sorted(pairs, key=lambda p: (position[p.a], position[p.b])):
        w = overlap_fn(term_sets.get(p.a, empty), term_sets.get(p.b, empty))
        if w < 0:
            raise ConfigurationError(f"overlap function returned a negative weight for {p}")
        if w > 0:
            edges.append(Edge(i=p.a, j=p.b, weight=float(w)))
    logger.debug("sentence graph: %d nodes, %d/%d pairs kept as edges",
                 len(units), len(edges), len(pairs))
    return Graph(nodes=units, edges=edges)

def build_keyword_graph(tokens: Sequence[str], relevant: Optional[Sequence[bool]] = None) -> Graph:
    """
    Word co-occurrence graph. Adjacent relevant words are linked once per
    unordered pair, the weight counting every adjacency in the document; an
    irrelevant word breaks adjacency. Vertices are the distinct relevant
    words in order of first appearance.
    """
    tokens = list(tokens)
    if relevant is None:
        relevant = [True] * len(tokens)
    relevant = list(relevant)
    if len(relevant) != len(tokens):
        raise ConfigurationError(
            f"tokens ({len(tokens)}) and relevance flags ({len(relevant)}) differ in length")

    nodes: List[str] = []
    seen = set()
    counts: Dict[Tuple[str, str], int] = {}
    prev: Optional[str] = None
    for tok, rel in zip(tokens, relevant):
        if not rel:
            prev = None
            continue
        if tok not in seen:
            seen.add(tok)
            nodes.append(tok)
        if prev is not None and prev != tok:
            key = (tok, prev) if (tok, prev) in counts else (prev, tok)
            counts[key] = counts.get(key, 0) + 1
        prev = tok

    edges = [Edge(i=a, j=b, weight=float(w)) for (a, b), w in counts.items()]
    logger.debug("keyword graph: %d words, %d links", len(nodes), len(edges))
    return Graph(nodes=nodes, edges=edges)

def to_networkx(graph: Graph) -> nx.Graph:
    G = nx.Graph()
    G.add_nodes_from(graph.nodes)
    for e in graph.edges:
        G.add_edge(e.i, e.j, weight=e.weight)
    return G

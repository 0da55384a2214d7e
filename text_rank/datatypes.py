from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Hashable, List, Optional

import pandas as pd

from .errors import ConfigurationError

UnitId = Hashable
TermSet = FrozenSet[str]
ScoreVector = Dict[UnitId, float]  # unit id -> pagerank score

@dataclass(frozen=True)
class CandidatePair:
    a: UnitId
    b: UnitId  # a precedes b in input order

    def __post_init__(self):
        if self.a == self.b:
            raise ConfigurationError(f"self-pair on {self.a!r}")

@dataclass
class Edge:
    i: UnitId
    j: UnitId
    weight: float  # > 0

@dataclass
class Graph:
    nodes: List[UnitId]  # every vertex, isolated ones included
    edges: List[Edge]  # undirected weighted edges

    def adjacency(self) -> Dict[UnitId, List[Edge]]:
        adj: Dict[UnitId, List[Edge]] = {n: [] for n in self.nodes}
        for e in self.edges:
            adj[e.i].append(e)
            adj[e.j].append(e)
        return adj

@dataclass
class PageRankResult:
    scores: ScoreVector
    converged: bool
    iterations: int
    delta: float  # L1 distance of the last step

@dataclass
class SentenceRankResult:
    sentences: pd.DataFrame  # textrank_id, sentence_id, sentence, textrank
    graph: Graph
    pagerank: PageRankResult

    def summary(self, n: int = 3, keep_sentence_order: bool = False) -> List[str]:
        from .summarize import select_top_sentences
        order = list(self.sentences["sentence_id"])
        chosen = select_top_sentences(self.pagerank.scores, order, n,
                                      keep_original_order=keep_sentence_order)
        text = dict(zip(self.sentences["sentence_id"], self.sentences["sentence"]))
        return [text[i] for i in chosen]

@dataclass
class KeywordResult:
    terms: List[str]  # important words, best first
    pagerank: PageRankResult
    keywords: pd.DataFrame  # keyword, ngram, freq
    keywords_by_ngram: pd.DataFrame = field(default_factory=pd.DataFrame)  # start, keyword, ngram
    graph: Optional[Graph] = None

from __future__ import annotations
import logging
import math
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .candidates import LSHConfig, build_candidates
from .datatypes import CandidatePair, KeywordResult, ScoreVector, SentenceRankResult, UnitId
from .errors import ConfigurationError
from .graphing import OverlapFn, as_rows, build_keyword_graph, build_sentence_graph, overlap_weight, term_sets_from_tokens
from .scoring import PageRankConfig, pagerank

logger = logging.getLogger(__name__)

def _ranked(scores: ScoreVector, order: Sequence[UnitId]) -> List[UnitId]:
    # highest score first, ties go to whoever came first in `order`
    position = {u: k for k, u in enumerate(order)}
    return sorted(order, key=lambda u: (-scores.get(u, 0.0), position[u]))

def select_top_sentences(scores: ScoreVector, original_order: Sequence[UnitId], n: int,
                         keep_original_order: bool = False) -> List[UnitId]:
    if n <= 0:
        raise ConfigurationError(f"n must be positive, got {n}")
    original_order = list(original_order)
    selected = _ranked(scores, original_order)[:n]
    if keep_original_order:
        chosen = set(selected)
        selected = [u for u in original_order if u in chosen]
    return selected

def _important_words(scores: ScoreVector, words: Sequence[str], top_fraction: float) -> List[str]:
    if not words:
        return []
    k = max(1, int(math.floor(top_fraction * len(words) + 1e-9)))
    return _ranked(scores, words)[:k]

def extract_keywords(tokens: Sequence[str], relevant: Optional[Sequence[bool]], scores: ScoreVector,
                     top_fraction: float = 1 / 3, ngram_max: Optional[int] = None,
                     sep: str = "-") -> pd.DataFrame:
    """
    Merge runs of important words into keywords.

    The top `top_fraction` of scored words are important. Every maximal run
    of consecutive tokens that are both relevant and important becomes one
    keyword (joined with `sep`); identical keywords are counted together.
    Runs longer than `ngram_max` are dropped.

    Returns:
        DataFrame with columns keyword, ngram, freq; most frequent first
    """
    occurrences = _keyword_occurrences(tokens, relevant, scores, top_fraction, ngram_max, sep)
    return _aggregate_keywords(occurrences)

def _check_keyword_args(top_fraction: float, ngram_max: Optional[int]) -> None:
    if not 0 < top_fraction <= 1:
        raise ConfigurationError(f"top_fraction must be in (0, 1], got {top_fraction}")
    if ngram_max is not None and ngram_max < 1:
        raise ConfigurationError(f"ngram_max must be >= 1, got {ngram_max}")

def _keyword_occurrences(tokens, relevant, scores, top_fraction, ngram_max, sep) -> pd.DataFrame:
    _check_keyword_args(top_fraction, ngram_max)
    tokens = list(tokens)
    relevant = [True] * len(tokens) if relevant is None else list(relevant)
    if len(relevant) != len(tokens):
        raise ConfigurationError(
            f"tokens ({len(tokens)}) and relevance flags ({len(relevant)}) differ in length")

    words = list(dict.fromkeys(t for t, r in zip(tokens, relevant) if r))
    important = set(_important_words(scores, words, top_fraction))

    rows = []
    run: List[str] = []
    start = 0
    for pos, (tok, rel) in enumerate(zip(tokens + [None], relevant + [False])):
        if rel and tok in important:
            if not run:
                start = pos
            run.append(tok)
            continue
        if run and (ngram_max is None or len(run) <= ngram_max):
            rows.append({"start": start, "keyword": sep.join(run), "ngram": len(run)})
        run = []
    return pd.DataFrame(rows, columns=["start", "keyword", "ngram"])

def _aggregate_keywords(occurrences: pd.DataFrame) -> pd.DataFrame:
    if occurrences.empty:
        return pd.DataFrame({"keyword": pd.Series(dtype=object),
                             "ngram": pd.Series(dtype=np.int64),
                             "freq": pd.Series(dtype=np.int64)})
    table = (occurrences.groupby(["keyword", "ngram"], sort=False)
             .agg(freq=("start", "size"), first=("start", "min"))
             .reset_index())
    table = table.sort_values(["freq", "first"], ascending=[False, True], kind="mergesort")
    return table[["keyword", "ngram", "freq"]].reset_index(drop=True)

def textrank_keywords(tokens: Sequence[str], relevant: Optional[Sequence[bool]] = None,
                      top_fraction: float = 1 / 3, ngram_max: Optional[int] = None, sep: str = "-",
                      pagerank_config: Optional[PageRankConfig] = None) -> KeywordResult:
    """Keyword extraction end to end: co-occurrence graph, PageRank, merge."""
    _check_keyword_args(top_fraction, ngram_max)
    graph = build_keyword_graph(tokens, relevant)
    pr = pagerank(graph, pagerank_config)
    terms = _important_words(pr.scores, graph.nodes, top_fraction)
    occurrences = _keyword_occurrences(tokens, relevant, pr.scores, top_fraction, ngram_max, sep)
    return KeywordResult(terms=terms, pagerank=pr,
                         keywords=_aggregate_keywords(occurrences),
                         keywords_by_ngram=occurrences, graph=graph)

def _sample_candidates(pairs, max_candidates: int, seed: int, position: Dict[UnitId, int]):
    for p in pairs:
        if p.a not in position or p.b not in position:
            raise ConfigurationError(f"candidate {p} references an unknown sentence")
    ordered = sorted(pairs, key=lambda p: (position[p.a], position[p.b]))
    if len(ordered) <= max_candidates:
        return ordered
    logger.warning("%d candidate pairs exceed max_candidates=%d, keeping a random sample",
                   len(ordered), max_candidates)
    rng = np.random.default_rng(seed)
    keep = np.sort(rng.choice(len(ordered), size=max_candidates, replace=False))
    return [ordered[k] for k in keep]

def textrank_sentences(data, terminology, candidates: Optional[Sequence[CandidatePair]] = None,
                       mode: str = "exhaustive", lsh_config: Optional[LSHConfig] = None,
                       overlap_fn: OverlapFn = overlap_weight, max_candidates: int = 1000,
                       seed: int = 42, pagerank_config: Optional[PageRankConfig] = None) -> SentenceRankResult:
    """
    Sentence ranking end to end.

    Args:
        data: (sentence_id, sentence) rows, ids unique
        terminology: (sentence_id, term) or (sentence_id, term, relevant) rows
        candidates: precomputed pairs; generated with `mode` when None
        mode: "exhaustive" or "lsh"
        max_candidates: graph construction is bounded to this many pairs
        seed: sampling seed used when candidates exceed max_candidates
    """
    if max_candidates < 1:
        raise ConfigurationError(f"max_candidates must be >= 1, got {max_candidates}")
    rows = list(as_rows(data))
    ids = [r[0] for r in rows]
    if len(set(ids)) != len(ids):
        raise ConfigurationError("sentence ids must be unique")
    position = {u: k for k, u in enumerate(ids)}

    term_sets = term_sets_from_tokens(terminology, ids)
    unknown = set(term_sets) - set(position)
    if unknown:
        raise ConfigurationError(f"terminology references unknown sentences: {sorted(map(str, unknown))}")
    if candidates is None:
        candidates = build_candidates({u: term_sets[u] for u in ids}, mode, lsh_config)
    pairs = _sample_candidates(candidates, max_candidates, seed, position)

    graph = build_sentence_graph(ids, term_sets, pairs, overlap_fn)
    pr = pagerank(graph, pagerank_config)
    sentences = pd.DataFrame({
        "textrank_id": range(1, len(rows) + 1),
        "sentence_id": ids,
        "sentence": [r[1] for r in rows],
        "textrank": [pr.scores[u] for u in ids],
    })
    return SentenceRankResult(sentences=sentences, graph=graph, pagerank=pr)

from .datatypes import CandidatePair, Edge, Graph, PageRankResult, KeywordResult, SentenceRankResult
from .errors import ConfigurationError, NonConvergenceWarning
from .candidates import LSHConfig, minhash_signatures, candidates_all, candidates_lsh, build_candidates
from .graphing import overlap_weight, jaccard_weight, term_sets_from_tokens, build_sentence_graph, build_keyword_graph, to_networkx
from .scoring import PageRankConfig, pagerank
from .summarize import select_top_sentences, extract_keywords, textrank_sentences, textrank_keywords

from __future__ import annotations
import logging
import zlib
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, List, Mapping, Optional, Set, Tuple

import numpy as np

from .datatypes import CandidatePair, TermSet, UnitId
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_PRIME = np.uint64(4294967291)  # largest prime below 2**32
_EMPTY = np.iinfo(np.uint64).max

@dataclass
class LSHConfig:
    """
    MinHash/LSH banding parameters.

    A pair with Jaccard similarity s becomes a candidate with probability
    1 - (1 - s**rows)**bands, where rows = num_hashes / bands.
    """
    num_hashes: int = 100
    bands: int = 50
    seed: int = 42

    def __post_init__(self):
        if self.num_hashes < 1 or self.bands < 1:
            raise ConfigurationError("num_hashes and bands must be positive")
        if self.num_hashes % self.bands != 0:
            raise ConfigurationError(
                f"num_hashes ({self.num_hashes}) is not divisible by bands ({self.bands})")

    @property
    def rows(self) -> int:
        return self.num_hashes // self.bands

    def candidate_probability(self, similarity: float) -> float:
        return 1.0 - (1.0 - similarity ** self.rows) ** self.bands

def _hash_coefficients(num_hashes: int, seed: int) -> Tuple[np.ndarray, np.ndarray]:
    # one generator per function: the first k functions do not depend on num_hashes
    a = np.empty(num_hashes, dtype=np.uint64)
    b = np.empty(num_hashes, dtype=np.uint64)
    for i in range(num_hashes):
        rng = np.random.default_rng([seed, i])
        a[i] = rng.integers(1, int(_PRIME), dtype=np.uint64)
        b[i] = rng.integers(0, int(_PRIME), dtype=np.uint64)
    return a, b

def _term_hash(term) -> int:
    return zlib.crc32(str(term).encode("utf-8"))

def minhash_signatures(term_sets: Mapping[UnitId, TermSet], cfg: Optional[LSHConfig] = None) -> Dict[UnitId, np.ndarray]:
    """
    MinHash signature (length cfg.num_hashes) for every unit.

    Empty term sets get a signature of all uint64 max values.
    """
    cfg = cfg or LSHConfig()
    a, b = _hash_coefficients(cfg.num_hashes, cfg.seed)
    signatures: Dict[UnitId, np.ndarray] = {}
    for unit, terms in term_sets.items():
        if not terms:
            signatures[unit] = np.full(cfg.num_hashes, _EMPTY, dtype=np.uint64)
            continue
        x = np.array(sorted(_term_hash(t) for t in set(terms)), dtype=np.uint64)
        # (a*x) < 2**64 since both are below 2**32
        h = ((np.outer(a, x) % _PRIME) + b[:, None]) % _PRIME
        signatures[unit] = h.min(axis=1)
    return signatures

def lsh_buckets(signatures: Mapping[UnitId, np.ndarray], cfg: LSHConfig) -> List[Dict[Tuple[int, ...], List[UnitId]]]:
    """One bucket table per band: sub-signature tuple -> units sharing it."""
    rows = cfg.rows
    tables: List[Dict[Tuple[int, ...], List[UnitId]]] = []
    for band in range(cfg.bands):
        table: Dict[Tuple[int, ...], List[UnitId]] = {}
        for unit, sig in signatures.items():
            key = tuple(int(v) for v in sig[band * rows:(band + 1) * rows])
            table.setdefault(key, []).append(unit)
        tables.append(table)
    return tables

def _check_unique(units: List[UnitId]) -> None:
    if len(set(units)) != len(units):
        raise ConfigurationError("unit ids must be unique")

def candidates_all(units: List[UnitId]) -> Set[CandidatePair]:
    _check_unique(units)
    return {CandidatePair(a, b) for a, b in combinations(units, 2)}

def candidates_lsh(term_sets: Mapping[UnitId, TermSet], cfg: Optional[LSHConfig] = None) -> Set[CandidatePair]:
    cfg = cfg or LSHConfig()
    units = list(term_sets)
    _check_unique(units)
    position = {u: k for k, u in enumerate(units)}
    signatures = minhash_signatures({u: t for u, t in term_sets.items() if t}, cfg)
    pairs: Set[CandidatePair] = set()
    for table in lsh_buckets(signatures, cfg):
        for members in table.values():
            if len(members) < 2:
                continue
            for a, b in combinations(sorted(members, key=position.__getitem__), 2):
                pairs.add(CandidatePair(a, b))
    logger.debug("lsh: %d units, %d bands x %d rows -> %d candidate pairs",
                 len(units), cfg.bands, cfg.rows, len(pairs))
    return pairs

def build_candidates(term_sets: Mapping[UnitId, TermSet], mode: str = "exhaustive",
                     lsh_config: Optional[LSHConfig] = None) -> Set[CandidatePair]:
    """
    Unit pairs worth comparing.

      - exhaustive: every unordered pair of distinct units
      - lsh: pairs sharing a MinHash bucket in at least one band
    """
    if mode == "exhaustive":
        return candidates_all(list(term_sets))
    if mode == "lsh":
        return candidates_lsh(term_sets, lsh_config)
    raise ConfigurationError(f"Unknown candidate mode: {mode}")

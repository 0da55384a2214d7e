import numpy as np
import pytest

from text_rank.candidates import LSHConfig, build_candidates, candidates_all, candidates_lsh, minhash_signatures
from text_rank.datatypes import CandidatePair
from text_rank.errors import ConfigurationError


@pytest.fixture
def term_sets():
    return {
        "s1": frozenset({"cat", "dog", "bird"}),
        "s2": frozenset({"cat", "dog", "bird"}),
        "s3": frozenset({"fish", "whale", "shark"}),
        "s4": frozenset({"cat", "dog", "horse"}),
        "s5": frozenset(),
    }


def test_bands_must_divide_num_hashes():
    with pytest.raises(ConfigurationError):
        LSHConfig(num_hashes=10, bands=3)


def test_non_positive_config_rejected():
    with pytest.raises(ConfigurationError):
        LSHConfig(num_hashes=0, bands=1)


def test_rows_and_probability():
    cfg = LSHConfig(num_hashes=20, bands=5)
    assert cfg.rows == 4
    assert cfg.candidate_probability(1.0) == 1.0
    assert cfg.candidate_probability(0.0) == 0.0


def test_candidates_all_pairs():
    pairs = candidates_all(["a", "b", "c"])
    assert pairs == {CandidatePair("a", "b"), CandidatePair("a", "c"), CandidatePair("b", "c")}
    assert all(p.a != p.b for p in pairs)


def test_candidates_all_rejects_duplicates():
    with pytest.raises(ConfigurationError):
        candidates_all(["a", "b", "a"])


def test_signatures_are_deterministic(term_sets):
    cfg = LSHConfig(num_hashes=12, bands=4, seed=7)
    first = minhash_signatures(term_sets, cfg)
    second = minhash_signatures(term_sets, cfg)
    for unit in term_sets:
        assert len(first[unit]) == 12
        assert np.array_equal(first[unit], second[unit])
    assert np.array_equal(first["s1"], first["s2"])


def test_empty_term_set_signature():
    sig = minhash_signatures({"e": frozenset()}, LSHConfig(num_hashes=4, bands=2))["e"]
    assert (sig == np.iinfo(np.uint64).max).all()


def test_minhash_agreement_tracks_jaccard():
    a = frozenset(f"t{i}" for i in range(0, 60))
    b = frozenset(f"t{i}" for i in range(20, 80))  # jaccard 40/80
    sigs = minhash_signatures({"a": a, "b": b}, LSHConfig(num_hashes=200, bands=100))
    agreement = float(np.mean(sigs["a"] == sigs["b"]))
    assert agreement == pytest.approx(0.5, abs=0.2)


def test_lsh_finds_identical_sets_and_skips_disjoint(term_sets):
    pairs = candidates_lsh(term_sets, LSHConfig(num_hashes=20, bands=10))
    assert CandidatePair("s1", "s2") in pairs
    assert not any("s3" in (p.a, p.b) for p in pairs)


def test_lsh_never_pairs_empty_sets(term_sets):
    pairs = candidates_lsh(term_sets, LSHConfig(num_hashes=20, bands=10))
    assert not any("s5" in (p.a, p.b) for p in pairs)


def test_lsh_is_subset_of_exhaustive(term_sets):
    lsh = candidates_lsh(term_sets, LSHConfig(num_hashes=40, bands=20))
    assert lsh <= candidates_all(list(term_sets))


def test_lsh_recall_grows_with_bands(term_sets):
    rows = 3
    previous = set()
    for bands in (1, 2, 5, 10, 20):
        pairs = candidates_lsh(term_sets, LSHConfig(num_hashes=rows * bands, bands=bands))
        assert previous <= pairs
        previous = pairs


def test_lsh_pairs_follow_input_order(term_sets):
    pairs = candidates_lsh(term_sets, LSHConfig(num_hashes=20, bands=10))
    order = list(term_sets)
    assert all(order.index(p.a) < order.index(p.b) for p in pairs)


def test_build_candidates_modes(term_sets):
    assert len(build_candidates(term_sets)) == 10
    assert build_candidates(term_sets, "lsh") <= build_candidates(term_sets, "exhaustive")
    with pytest.raises(ConfigurationError):
        build_candidates(term_sets, "bogus")


def test_lsh_hashes_non_string_terms():
    term_sets = {1: frozenset({7, 8}), 2: frozenset({7, 8}), 3: frozenset({9})}
    pairs = candidates_lsh(term_sets, LSHConfig(num_hashes=20, bands=10))
    assert pairs == {CandidatePair(1, 2)}

from text_rank import textrank_keywords, textrank_sentences
from text_rank.preprocessing import PreprocessConfig, preprocess_text, split_sentences, tag_tokens


def test_split_sentences():
    assert split_sentences("One. Two!  Three?") == ["One.", "Two!", "Three?"]
    assert split_sentences("   ") == []


def test_tag_tokens_marks_stopwords_irrelevant():
    assert tag_tokens("The cats sat") == [("the", False), ("cat", True), ("sat", True)]
    assert tag_tokens("The cats", PreprocessConfig(stemming=False)) == [("the", False), ("cats", True)]


def test_preprocess_text_ids():
    sentences, terminology = preprocess_text("The cats sat. Dogs ran!")
    assert sentences == [(1, "The cats sat."), (2, "Dogs ran!")]
    assert (1, "cat", True) in terminology
    assert (2, "dog", True) in terminology
    assert (1, "the", False) in terminology


def test_pipelines_run_on_preprocessed_text():
    text = ("Graph based ranking finds salient sentences. "
            "PageRank scores every sentence in the graph. "
            "Salient sentences share words with many other sentences. "
            "Bananas are yellow.")
    sentences, terminology = preprocess_text(text)
    ranked = textrank_sentences(sentences, terminology)
    assert ranked.summary(1) != ["Bananas are yellow."]
    assert len(ranked.summary(2, keep_sentence_order=True)) == 2

    keywords = textrank_keywords([t for _, t, _ in terminology], [r for _, _, r in terminology])
    assert not keywords.keywords.empty
    assert keywords.keywords["freq"].min() >= 1

from __future__ import annotations
import io
import re

import matplotlib.pyplot as plt
import networkx as nx
import pandas as pd
import streamlit as st

from text_rank import LSHConfig, PageRankConfig, textrank_keywords, textrank_sentences, to_networkx
from text_rank.preprocessing import PreprocessConfig, preprocess_text

def strip_markdown(md_content: str) -> str:
    text = re.sub(r'```.*?```', '', md_content, flags=re.DOTALL)
    text = re.sub(r'^#{1,6}\s+', '', text, flags=re.MULTILINE)
    text = re.sub(r'\*{1,2}(.*?)\*{1,2}', r'\1', text)
    text = re.sub(r'\[([^\]]+)\]\([^)]+\)', r'\1', text)
    text = re.sub(r'`([^`]+)`', r'\1', text)
    return text.strip()

def load_text_from_file(uploaded_file) -> str:
    content = uploaded_file.read().decode("utf-8")
    if uploaded_file.name.lower().endswith(".md"):
        return strip_markdown(content)
    return content

def draw_graph(graph, scores, title: str, max_labels: int = 30):
    """Nodes sized by PageRank score, edges by weight."""
    G = to_networkx(graph)
    fig, ax = plt.subplots(figsize=(10, 7))
    ax.set_title(title, fontsize=14, fontweight='bold')
    if len(G.nodes) > 0:
        pos = nx.spring_layout(G, weight="weight", seed=42)
        top = max(scores.values()) or 1.0
        sizes = [200 + 2000 * scores[v] / top for v in G.nodes]
        nx.draw_networkx_nodes(G, pos, ax=ax, node_size=sizes, node_color='lightblue', alpha=0.8)
        weights = [d['weight'] for _, _, d in G.edges(data=True)]
        if weights:
            wmax = max(weights)
            nx.draw_networkx_edges(G, pos, ax=ax, width=[3 * w / wmax for w in weights],
                                   alpha=0.5, edge_color='gray')
        if len(G.nodes) <= max_labels:
            nx.draw_networkx_labels(G, pos, {v: str(v) for v in G.nodes}, ax=ax, font_size=9)
    ax.axis('off')
    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=120, bbox_inches='tight')
    buf.seek(0)
    plt.close(fig)
    return buf

def create_sidebar_controls():
    st.sidebar.header("Summary")
    n_sentences = st.sidebar.slider("Sentences", min_value=1, max_value=20, value=3)
    keep_order = st.sidebar.checkbox("Keep document order", value=True)
    use_lsh = st.sidebar.checkbox("MinHash/LSH candidates", value=False,
                                  help="Compare only sentences that share a MinHash bucket")
    bands = st.sidebar.select_slider("LSH bands", options=[10, 20, 25, 50, 100], value=50)

    st.sidebar.header("Keywords")
    fraction = st.sidebar.slider("Top fraction of words", min_value=0.05, max_value=1.0,
                                 value=0.33, step=0.01)
    ngram_max = st.sidebar.slider("Max words per keyword", min_value=1, max_value=8, value=5)

    st.sidebar.header("PageRank")
    damping = st.sidebar.slider("Damping", min_value=0.5, max_value=0.95, value=0.85, step=0.05)
    max_iter = st.sidebar.number_input("Max iterations", min_value=1, max_value=1000, value=100)
    return dict(n=n_sentences, keep_order=keep_order, use_lsh=use_lsh, bands=bands,
                fraction=fraction, ngram_max=ngram_max,
                pagerank=PageRankConfig(damping=damping, max_iterations=int(max_iter)))

def run(text: str, opts: dict):
    sentences, terminology = preprocess_text(text, PreprocessConfig())
    if not sentences:
        st.warning("No sentences found")
        return

    st.header("Summary")
    ranked = textrank_sentences(
        sentences, terminology,
        mode="lsh" if opts["use_lsh"] else "exhaustive",
        lsh_config=LSHConfig(num_hashes=100, bands=opts["bands"]),
        max_candidates=max(1000, len(sentences) ** 2),
        pagerank_config=opts["pagerank"],
    )
    for s in ranked.summary(opts["n"], keep_sentence_order=opts["keep_order"]):
        st.write(f"- {s}")
    if not ranked.pagerank.converged:
        st.warning(f"PageRank did not converge in {ranked.pagerank.iterations} iterations")
    with st.expander("Sentence scores"):
        st.dataframe(ranked.sentences.sort_values("textrank", ascending=False), use_container_width=True)
    with st.expander("Sentence graph"):
        st.image(draw_graph(ranked.graph, ranked.pagerank.scores, "Sentence graph"))

    st.header("Keywords")
    tokens = [tok for _, tok, _ in terminology]
    relevant = [rel for _, _, rel in terminology]
    kw = textrank_keywords(tokens, relevant, top_fraction=opts["fraction"],
                           ngram_max=opts["ngram_max"], sep=" ",
                           pagerank_config=opts["pagerank"])
    col1, col2 = st.columns(2)
    with col1:
        st.dataframe(kw.keywords, use_container_width=True)
    with col2:
        terms = pd.DataFrame({"term": kw.terms,
                              "pagerank": [kw.pagerank.scores[t] for t in kw.terms]})
        st.dataframe(terms, use_container_width=True)
    with st.expander("Word graph"):
        st.image(draw_graph(kw.graph, kw.pagerank.scores, "Word co-occurrence graph"))

def main():
    st.title("TextRank")
    st.write("Upload a text file to rank its sentences and extract keywords")
    opts = create_sidebar_controls()
    uploaded_file = st.file_uploader("Choose a text file", type=['txt', 'md'])
    if uploaded_file is None:
        return
    text = load_text_from_file(uploaded_file)
    st.text_area("Content", text, height=200, disabled=True)
    if st.button("Rank", type="primary"):
        try:
            run(text, opts)
        except ValueError as e:
            st.error(f"Error: {e}")
            st.exception(e)

if __name__ == "__main__":
    main()

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

# Light tokenizer for the demo app. Other callers pass (unit_id, token, relevant)
# rows from their own tagger.

_WORD_RE = re.compile(r"""[A-Za-z0-9_]+(?:'[A-Za-z0-9_]+)?""")

STOPWORDS = frozenset({
    'the','a','an','and','or','but','if','then','else','for','to','of','in','on','at','by','with','as',
    'is','are','was','were','be','been','being','this','that','these','those','it','its','from','into',
    'we','you','they','he','she','i','me','my','your','our','their','his','her','them','us','do','does',
    'did','not','no','so','than','too','very','can','could','should','would','will','shall','has','have',
})

@dataclass
class PreprocessConfig:
    lowercase: bool = True
    stemming: bool = True
    min_length: int = 2  # shorter tokens are never relevant
    stopwords: FrozenSet[str] = field(default_factory=lambda: STOPWORDS)

def _simple_stem(token: str) -> str:
    t = token.lower()
    if len(t) > 4 and t.endswith("ies"):
        return t[:-3] + "y"     # stories -> story
    if len(t) > 5 and t.endswith("ing"):
        return t[:-3]           # playing -> play
    if len(t) > 3 and t.endswith("es") and t[-3] in "sxz":
        return t[:-2]           # boxes -> box
    if len(t) > 3 and t.endswith("s") and not t.endswith("ss"):
        return t[:-1]           # books -> book
    return t

def split_sentences(text: str) -> List[str]:
    # Split on . ! ? while keeping order
    parts = re.split(r"(?<=[.!?])\s+", text.strip())
    return [p.strip() for p in parts if p.strip()]

def tag_tokens(text: str, cfg: Optional[PreprocessConfig] = None) -> List[Tuple[str, bool]]:
    """(token, relevant) for every word of `text`; stop words are irrelevant."""
    cfg = cfg or PreprocessConfig()
    out = []
    for m in _WORD_RE.finditer(text):
        tok = m.group(0).lower() if cfg.lowercase else m.group(0)
        relevant = (tok.lower() not in cfg.stopwords and len(tok) >= cfg.min_length
                    and not tok.isdigit())
        if relevant and cfg.stemming:
            tok = _simple_stem(tok)
        out.append((tok, relevant))
    return out

def preprocess_text(text: str, cfg: Optional[PreprocessConfig] = None):
    """
    Returns:
        sentences: [(sentence_id, sentence)] with ids 1..n
        terminology: [(sentence_id, token, relevant)] in document order
    """
    cfg = cfg or PreprocessConfig()
    sentences = list(enumerate(split_sentences(text), start=1))
    terminology = [(sid, tok, rel) for sid, s in sentences for tok, rel in tag_tokens(s, cfg)]
    return sentences, terminology

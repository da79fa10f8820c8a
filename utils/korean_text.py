# utils/korean_text.py

"""Lightweight Korean text normalization for lexical FAQ matching."""
import re
from typing import List

# Punctuation plus common grammatical particles (josa / connective endings).
# Stripped wherever they occur, not only at word ends.
STRIP_PUNCTUATION = "?？!.,'\"()（）[]"
STRIP_PARTICLES = "을를이가은는의에서도로으며고"

_STRIP_PATTERN = re.compile("[" + re.escape(STRIP_PUNCTUATION + STRIP_PARTICLES) + "]")


def strip_particles(text: str) -> str:
    """Replace punctuation and particle syllables with spaces."""
    if not text:
        return ""
    return _STRIP_PATTERN.sub(" ", text)


def tokenize(text: str, min_length: int = 2) -> List[str]:
    """
    Split text into lower-cased keyword tokens.

    Tokens shorter than ``min_length`` characters are discarded, which also
    removes the single-syllable leftovers produced by particle stripping.
    """
    tokens = strip_particles(text).split()
    return [token.lower() for token in tokens if len(token) >= min_length]

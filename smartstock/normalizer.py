# Normalizer - turns raw store/product text into comparable tokens

import re
from typing import Optional, Set

_PUNCTUATION = re.compile(r"[^\w\s]")


def normalize_text(text: Optional[str], strip_punctuation: bool = True) -> str:
    """Lowercase, turn punctuation into spaces and collapse whitespace."""
    if not text:
        return ""
    s = str(text).lower()
    if strip_punctuation:
        s = _PUNCTUATION.sub(" ", s)
    return " ".join(s.split())


def normalize(text: Optional[str], strip_punctuation: bool = True) -> Set[str]:
    """Token set of `text`. Empty input yields an empty set."""
    return set(normalize_text(text, strip_punctuation).split())

import unicodedata
from typing import List, Optional, Tuple

from autodiag.data.diagnostics import DIAGNOSES, KEYWORDS, DiagnosisRecord


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_text(text: Optional[str]) -> str:
    return strip_accents((text or "").lower())


# Normalized once; order follows KEYWORDS.
_NORMALIZED_KEYWORDS: Tuple[Tuple[str, str], ...] = tuple(
    (normalize_text(kw), key) for kw, key in KEYWORDS.items()
)


def match_diagnosis_key(text: Optional[str]) -> Optional[str]:
    """
    Return the diagnosis key of the first keyword (in table order) found in
    the text, or None. Table order is the tie-break, not keyword length.
    """
    t = normalize_text(text)
    if not t:
        return None
    for kw, key in _NORMALIZED_KEYWORDS:
        if kw in t:
            return key
    return None


def match_symptom(text: Optional[str]) -> Optional[DiagnosisRecord]:
    key = match_diagnosis_key(text)
    if key is None:
        return None
    return DIAGNOSES[key]


def matching_keys(text: Optional[str]) -> List[str]:
    """All diagnosis keys with a keyword in the text, first-hit order, no duplicates."""
    t = normalize_text(text)
    found: List[str] = []
    if not t:
        return found
    seen = set()
    for kw, key in _NORMALIZED_KEYWORDS:
        if key in seen:
            continue
        if kw in t:
            seen.add(key)
            found.append(key)
    return found

"""
Trigram similarity with the same semantics as Postgres pg_trgm `similarity()`:
words are lower-cased alphanumeric runs, padded with two leading and one trailing blank,
and the score is |shared trigrams| / |all trigrams|.
"""
import re

_WORD = re.compile(r"[^\W_]+", re.UNICODE)


def trigrams(text: str) -> set[str]:
    out: set[str] = set()
    for word in _WORD.findall((text or "").lower()):
        padded = f"  {word} "
        for i in range(len(padded) - 2):
            out.add(padded[i:i + 3])
    return out


def similarity(a: str, b: str) -> float:
    ta, tb = trigrams(a), trigrams(b)
    if not ta or not tb:
        return 0.0
    return len(ta & tb) / len(ta | tb)

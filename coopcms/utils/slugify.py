import re
import unicodedata
from typing import Callable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str, separator: str = "-") -> str:
    """Accent-folded, lowercase, dash-separated form of ``value``.

    >>> slugify("Energía Solar & Eólica")
    'energia-solar-eolica'
    """
    folded = unicodedata.normalize("NFKD", value or "").encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub(separator, folded.lower()).strip(separator)


def copy_slug(slug: str, is_taken: Callable[[str], bool], suffix: str = "copy") -> str:
    """First free "<slug>-copy", "<slug>-copy-2", ... according to ``is_taken``."""
    base = f"{slug}-{suffix}" if slug else suffix
    candidate, counter = base, 2
    while is_taken(candidate):
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate

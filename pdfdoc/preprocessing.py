"""
Markup preprocessing for pdfdoc

Rewrites text the rendering engine may not interpret correctly before the
markup is handed over: currency glyphs become named entities, and runs of
Arabic script are shaped into presentation forms in visual order.

The transforms are purely textual. Tags and attributes are neither parsed
nor validated, so malformed HTML is handled exactly like well-formed HTML.
"""

import logging
import re
from typing import List, Tuple

import arabic_reshaper
from bidi.algorithm import get_display


logger = logging.getLogger(__name__)


# Applied in order, before any other transform
ENTITIES = [
    ('€', '&euro;'),
    ('£', '&pound;'),
]

# Arabic, Arabic Supplement, Arabic Extended-A and both presentation form blocks
ARABIC_CHARS = '\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFF'

# A run starts and ends on an Arabic character and may contain inner whitespace
RTL_RUN_RE = re.compile(f'[{ARABIC_CHARS}](?:[{ARABIC_CHARS}\\s]*[{ARABIC_CHARS}])?')


def convert_entities(text: str) -> str:
    """
    Replace literal currency glyphs with their named HTML entities.

    Example:
        >>> convert_entities('Price: €5, £3')
        'Price: &euro;5, &pound;3'
    """
    for search, replace in ENTITIES:
        text = text.replace(search, replace)
    return text


def identify_rtl_runs(text: str) -> List[Tuple[int, int]]:
    """
    Find contiguous right-to-left runs.

    Returns:
        List of (start, end) offsets, ordered by start offset
    """
    return [match.span() for match in RTL_RUN_RE.finditer(text)]


def shape_rtl_text(run: str) -> str:
    """
    Shape one right-to-left run.

    Letters are replaced by their contextual presentation forms
    (initial/medial/final/isolated, ligatures) and reordered visually.
    """
    return get_display(arabic_reshaper.reshape(run))


def shape_rtl_runs(text: str) -> str:
    """
    Shape every right-to-left run in ``text``.

    All runs are identified first, then replaced from the highest offset
    down, so a replacement of a different length never shifts the offsets
    of runs not yet processed.
    """
    runs = identify_rtl_runs(text)
    if not runs:
        return text

    logger.debug(f"Shaping {len(runs)} right-to-left run(s)")
    for start, end in reversed(runs):
        text = text[:start] + shape_rtl_text(text[start:end]) + text[end:]
    return text


def preprocess_html(html: str, *, entities: bool = True, shape_rtl: bool = True) -> str:
    """
    Prepare markup for the rendering engine.

    Args:
        html: Full markup document
        entities: Replace currency glyphs with named entities
        shape_rtl: Shape right-to-left runs

    Returns:
        Transformed markup
    """
    if entities:
        html = convert_entities(html)
    if shape_rtl:
        html = shape_rtl_runs(html)
    return html

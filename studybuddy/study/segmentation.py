"""
Segmentation Engine for summary-derived study aids.

Turns a block of summary text into an ordered list of study points:
- Primary split on sentence ends, bullet markers and numbered-list markers
- Fragments of 10 characters or fewer are dropped
- Fewer than 3 fragments falls back to blank-line separated paragraphs

Study points are never stored. They are recomputed from the source text,
and the computation is memoized on that text so repeated renders of the
same summarization are cheap.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

MIN_POINT_LENGTH = 10
MIN_PRIMARY_POINTS = 3

# Sentence end, "- "/"• "/"* " bullet at a line start, "N." at a line start
PRIMARY_SPLIT = re.compile(
    r"(?<=[.?!])\s+|^\s*[-•*]\s*|^\s*\d+\.\s*",
    re.MULTILINE,
)
PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")


def source_text(summary: str | None, input_text: str | None = None) -> str:
    """Pick the text to segment: the summary, or the input when the summary is blank."""
    return (summary or "").strip() or (input_text or "").strip()


@lru_cache(maxsize=256)
def _segment_cached(text: str) -> tuple[str, ...]:
    fragments = [part.strip() for part in PRIMARY_SPLIT.split(text)]
    points = [f for f in fragments if len(f) > MIN_POINT_LENGTH]
    if len(points) < MIN_PRIMARY_POINTS:
        paragraphs = [part.strip() for part in PARAGRAPH_SPLIT.split(text)]
        points = [p for p in paragraphs if p]
    return tuple(points)


def segment(text: str | None) -> list[str]:
    """
    Split text into study points.

    Deterministic for identical input; returns a fresh list on every call.

    Args:
        text: Summary (or input) text

    Returns:
        Ordered study points, empty when the text is blank
    """
    text = (text or "").strip()
    if not text:
        return []
    return list(_segment_cached(text))


def study_points(summarization: Any) -> list[str]:
    """Segment a summarization-like object (anything with summary/input_text)."""
    if summarization is None:
        return []
    return segment(
        source_text(
            getattr(summarization, "summary", None),
            getattr(summarization, "input_text", None),
        )
    )


def clear_cache() -> None:
    """Drop memoized segmentations."""
    _segment_cached.cache_clear()

"""Chapter-like landmark detection for in-book navigation.

This is a structural heuristic: short lines such as "CHAPTER 12",
"Part IV" or "Section 3" become landmarks anchored at the token offset
where the line starts. False positives and negatives are tolerated.
"""

import bisect
import re
from typing import NamedTuple, Optional

from flowread.text import tokenize

MAX_LANDMARK_LENGTH = 50
BEGINNING = "Beginning"

_NUMERAL = r"(?:\d+|[IVXLC]+)"

# Tried in order; the first hit wins so a line yields at most one entry.
LANDMARK_PATTERNS = [
    re.compile(rf"\b{keyword}\s+{_NUMERAL}\b", re.IGNORECASE)
    for keyword in ("CHAPTER", "PART", "BOOK", "SECTION")
]


class Landmark(NamedTuple):
    title: str
    anchor: int


def _is_landmark(line: str) -> bool:
    if len(line) >= MAX_LANDMARK_LENGTH:
        return False
    return any(pattern.search(line) for pattern in LANDMARK_PATTERNS)


def detect_landmarks(content: str) -> list[Landmark]:
    """Scan ``content`` line by line and return landmarks in document order.

    The first entry is always ``Beginning`` at offset 0, even when a
    detected heading also sits at offset 0.
    """
    landmarks = [Landmark(BEGINNING, 0)]
    offset = 0
    for line in (content or "").split("\n"):
        trimmed = line.strip()
        if trimmed and _is_landmark(trimmed):
            landmarks.append(Landmark(trimmed, offset))
        offset += len(tokenize(line))
    return landmarks


def landmark_at(landmarks: list[Landmark], cursor: int) -> Optional[Landmark]:
    """The last landmark starting at or before ``cursor``."""
    if not landmarks:
        return None
    anchors = [lm.anchor for lm in landmarks]
    idx = bisect.bisect_right(anchors, cursor) - 1
    return landmarks[max(0, idx)]

"""
Stream demultiplexer.

The model is asked to emit five documents in one response, each one
introduced by a sentinel marker. ``split_sections`` is re-run on the whole
accumulated buffer after every chunk; it keeps no state between calls.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import NamedTuple, Optional

from .models import Section

MARKERS = tuple(section.marker for section in Section)
_ANY_MARKER = re.compile("|".join(re.escape(m) for m in MARKERS))

Span = Optional[tuple[int, int]]


class MarkerPolicy(str, Enum):
    """How marker occurrences are mapped to sections.

    NAMED: every section starts after the first occurrence of its own
    marker and ends at the next first-occurrence marker, so out-of-order
    markers still land in the right section and later duplicates are kept
    as text.

    POSITIONAL: every marker occurrence opens the next section in canonical
    order, whatever its name.
    """

    NAMED = "named"
    POSITIONAL = "positional"


class Sections(NamedTuple):
    general: str = ""
    adapted: str = ""
    pedagogical: str = ""
    sol_general: str = ""
    sol_adapted: str = ""


def pending_marker_length(buffer: str) -> int:
    """Length of the longest proper marker prefix the buffer ends with."""
    longest = 0
    for marker in MARKERS:
        for n in range(len(marker) - 1, longest, -1):
            if buffer.endswith(marker[:n]):
                longest = n
                break
    return longest


def _named_spans(buffer: str) -> list[Span]:
    found = []
    for section in Section:
        pos = buffer.find(section.marker)
        if pos != -1:
            found.append((pos, section))
    found.sort()
    spans: dict[Section, tuple[int, int]] = {}
    for i, (pos, section) in enumerate(found):
        end = found[i + 1][0] if i + 1 < len(found) else len(buffer)
        spans[section] = (pos + len(section.marker), end)
    return [spans.get(section) for section in Section]


def _positional_spans(buffer: str) -> list[Span]:
    matches = list(_ANY_MARKER.finditer(buffer))
    spans: list[Span] = [None] * len(Section)
    for i, match in enumerate(matches[: len(Section)]):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(buffer)
        spans[i] = (match.end(), end)
    return spans


def locate_sections(buffer: str, policy: MarkerPolicy = MarkerPolicy.NAMED) -> list[Span]:
    """Untrimmed ``(start, end)`` offsets of each section, ``None`` if its marker is missing."""
    if MarkerPolicy(policy) is MarkerPolicy.POSITIONAL:
        return _positional_spans(buffer)
    return _named_spans(buffer)


def split_sections(
    buffer: str,
    *,
    final: bool = True,
    policy: MarkerPolicy = MarkerPolicy.NAMED,
) -> Sections:
    """Split an accumulated response into its five trimmed sections.

    With ``final=False`` a half-received marker at the very end of the
    buffer is held back, so each section only ever grows between calls.
    Text before the first marker is dropped; a section whose marker never
    appears stays empty.
    """
    if not final:
        pending = pending_marker_length(buffer)
        if pending:
            buffer = buffer[:-pending]
    spans = locate_sections(buffer, policy)
    texts = [buffer[span[0] : span[1]].strip() if span else "" for span in spans]
    return Sections(*texts)

"""Character-position occupancy for non-overlapping highlight spans."""

from __future__ import annotations

import html
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Span:
    start: int
    end: int
    css_class: str


class SpanTracker:
    """Records claimed character positions; a span overlapping any is refused."""

    def __init__(self) -> None:
        self._occupied: set[int] = set()
        self._spans: list[Span] = []

    def overlaps(self, start: int, end: int) -> bool:
        return any(position in self._occupied for position in range(start, end))

    def claim(self, start: int, end: int, css_class: str) -> bool:
        if start >= end or self.overlaps(start, end):
            return False
        self._occupied.update(range(start, end))
        self._spans.append(Span(start=start, end=end, css_class=css_class))
        return True

    def spans(self) -> list[Span]:
        return sorted(self._spans, key=lambda span: span.start)


def escape_html(text: str) -> str:
    return html.escape(text, quote=False)


def render_marks(text: str, spans: list[Span]) -> str:
    """Escape `text` and wrap each span in a `<mark>` element."""
    output: list[str] = []
    cursor = 0
    for span in spans:
        output.append(escape_html(text[cursor : span.start]))
        output.append(
            f'<mark class="{span.css_class}">{escape_html(text[span.start : span.end])}</mark>'
        )
        cursor = span.end
    output.append(escape_html(text[cursor:]))
    return "".join(output)

#!/usr/bin/env python3
"""
Reflow of wiki text into diff-friendly lines.

Article text is mostly long paragraphs on a single line; committed as is,
every small edit shows up as a change of the whole paragraph. reflow() breaks
the text into shorter lines:

- a newline always ends a line;
- after a line reaches policy.line_length characters, or after one of the
  policy.break_after punctuation characters, the next space ends the line;
- every produced line is split again after each of policy.keywords (table
  closers, <br>), and an empty line is inserted after such a split.

Each Line remembers the separator it consumed, so
"".join(line.text + line.sep for line in reflow(text)) == text.
"""

from dataclasses import dataclass
from typing import Iterator, NamedTuple, Optional


class Line(NamedTuple):
    text: str
    sep: str = ""


@dataclass(frozen=True)
class ReflowPolicy:
    line_length: int = 80
    break_after: str = ",.!?"
    keywords: tuple[str, ...] = ("|}", "<br>")


DEFAULT_POLICY = ReflowPolicy()


def reflow(text: str, policy: Optional[ReflowPolicy] = None) -> Iterator[Line]:
    """
    Split text into lines according to policy.

    Args:
        text: Raw segment text
        policy: Break thresholds and keywords (default: DEFAULT_POLICY)

    Yields:
        Line tuples in order
    """
    policy = policy or DEFAULT_POLICY
    buffer: list[str] = []
    length = 0
    break_pending = False
    emitted = False

    for c in text:
        if c == "\n" or (break_pending and c == " "):
            yield from split_keywords("".join(buffer), c, policy.keywords)
            emitted = True
            buffer = []
            length = 0
            break_pending = False
            continue

        buffer.append(c)
        length += 1
        if length >= policy.line_length or c in policy.break_after:
            break_pending = True

    if buffer or not emitted:
        yield from split_keywords("".join(buffer), "", policy.keywords)


def split_keywords(line: str, sep: str, keywords: tuple[str, ...]) -> Iterator[Line]:
    """Split line after every keyword occurrence, each followed by an empty line."""
    start = 0
    while True:
        end = _next_keyword_end(line, start, keywords)
        if end is None:
            break
        yield Line(line[start:end])
        start = end
        if start == len(line):
            # Keyword closes the line; the empty line carries the separator
            yield Line("", sep)
            return
        yield Line("")

    yield Line(line[start:], sep)


def _next_keyword_end(line: str, start: int, keywords: tuple[str, ...]) -> Optional[int]:
    best = None
    for keyword in keywords:
        if not keyword:
            continue
        found = line.find(keyword, start)
        if found >= 0:
            end = found + len(keyword)
            if best is None or end < best:
                best = end
    return best

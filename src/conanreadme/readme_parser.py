"""README scanning: usage examples and a one-line package description.

This is a heuristic line scanner, not a markdown parser. It recognizes three
things: fenced code blocks, ATX headings, and image-only lines. Each rule is a
small predicate so the scanning rules can be tested apart from the extraction
logic built on top of them.

Nothing here raises on malformed input. An unterminated fence simply swallows
the rest of the document and produces no example.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from conanreadme.models.tools import UsageExample

DEFAULT_PACKAGE_DESCRIPTION = "Conan package"
DEFAULT_LANGUAGE = "text"

MAX_DESCRIPTION_LENGTH = 300
MIN_DESCRIPTION_LINE_LENGTH = 20

_FENCE_OPEN_RE = re.compile(r"^[ \t]*(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
# Closing hashes must be separated from the text, so "C#" keeps its "#".
_HEADING_RE = re.compile(r"^ {0,3}(?P<marks>#{1,6})[ \t]+(?P<text>.+?)(?:[ \t]+#+)?[ \t]*$")
_IMAGE = r"!\[[^\]]*\](?:\([^)]*\)|\[[^\]]*\])"
_LINKED_IMAGE_RE = re.compile(r"\[" + _IMAGE + r"\](?:\([^)]*\)|\[[^\]]*\])")
_IMAGE_RE = re.compile(_IMAGE)


# ---------------------------------------------------------------------------
# Scanning rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Fence:
    """An opening fence delimiter."""

    char: str  # "`" or "~"
    length: int
    info: str  # Everything after the delimiter, trimmed


def match_fence_open(line: str) -> Fence | None:
    """Return the fence opened by ``line``, or ``None`` if it opens nothing."""
    m = _FENCE_OPEN_RE.match(line.rstrip("\r\n"))
    if m is None:
        return None
    delimiter = m.group("fence")
    info = m.group("info").strip()
    if delimiter[0] == "`" and "`" in info:
        return None
    return Fence(char=delimiter[0], length=len(delimiter), info=info)


def is_fence_close(line: str, fence: Fence) -> bool:
    """True if ``line`` closes ``fence``: same character, at least as long, nothing else."""
    stripped = line.strip()
    return len(stripped) >= fence.length and stripped == fence.char * len(stripped)


def parse_heading(line: str) -> tuple[int, str] | None:
    """Return ``(level, text)`` for an ATX heading line, else ``None``."""
    m = _HEADING_RE.match(line.rstrip("\r\n"))
    if m is None:
        return None
    return len(m.group("marks")), m.group("text").strip()


def is_image_line(line: str) -> bool:
    """True if the line holds nothing but image references (badges included)."""
    stripped = line.strip()
    if not stripped:
        return False
    remainder = _LINKED_IMAGE_RE.sub("", stripped)
    remainder = _IMAGE_RE.sub("", remainder)
    return not remainder.strip()


def is_html_line(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith("<") and stripped.endswith(">")


def language_tag(info: str) -> str:
    """First word of a fence info-string, lower-cased. Empty info maps to ``"text"``."""
    words = info.split()
    if not words:
        return DEFAULT_LANGUAGE
    return words[0].lower()


# ---------------------------------------------------------------------------
# Usage examples
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Block:
    start: int  # Index of the opening fence line
    end: int  # Index of the closing fence line
    info: str
    code: str


def _strip_line_ending(text: str) -> str:
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith(("\n", "\r")):
        return text[:-1]
    return text


def _scan_blocks(lines: list[str]) -> list[_Block]:
    blocks: list[_Block] = []
    i = 0
    while i < len(lines):
        fence = match_fence_open(lines[i])
        if fence is None:
            i += 1
            continue
        close = next(
            (j for j in range(i + 1, len(lines)) if is_fence_close(lines[j], fence)),
            None,
        )
        if close is None:
            break
        code = _strip_line_ending("".join(lines[i + 1 : close]))
        blocks.append(_Block(start=i, end=close, info=fence.info, code=code))
        i = close + 1
    return blocks


def _describe(lines: list[str]) -> str:
    text = " ".join(
        line.strip() for line in lines if line.strip() and parse_heading(line) is None
    )
    return text[:MAX_DESCRIPTION_LENGTH].strip()


def parse_usage_examples(markdown: str) -> list[UsageExample]:
    """Extract one ``UsageExample`` per well-formed fenced block, in document order.

    The title is the nearest heading above the fence, looking no further back
    than the end of the previous fence. The description is the prose between
    that heading (or the start of the window) and the fence.
    """
    lines = markdown.splitlines(keepends=True)
    examples: list[UsageExample] = []
    window_start = 0

    for block in _scan_blocks(lines):
        heading_index: int | None = None
        title: str | None = None
        for k in range(block.start - 1, window_start - 1, -1):
            heading = parse_heading(lines[k])
            if heading is not None:
                heading_index, title = k, heading[1]
                break

        prose_start = heading_index + 1 if heading_index is not None else window_start
        examples.append(
            UsageExample(
                language=language_tag(block.info),
                title=title or f"Example {len(examples) + 1}",
                code=block.code,
                description=_describe(lines[prose_start : block.start]),
            )
        )
        window_start = block.end + 1

    return examples


# ---------------------------------------------------------------------------
# Package description
# ---------------------------------------------------------------------------


def extract_package_description(markdown: str) -> str:
    """Return the first substantial prose line after the document title.

    Lines before the first top-level heading are ignored, so a README without
    one yields ``DEFAULT_PACKAGE_DESCRIPTION``. Callers treat that value as
    "nothing found".
    """
    open_fence: Fence | None = None
    seen_title = False

    for line in markdown.splitlines():
        if open_fence is not None:
            if is_fence_close(line, open_fence):
                open_fence = None
            continue
        fence = match_fence_open(line)
        if fence is not None:
            open_fence = fence
            continue

        heading = parse_heading(line)
        if not seen_title:
            seen_title = heading is not None and heading[0] == 1
            continue

        stripped = line.strip()
        if (
            not stripped
            or heading is not None
            or is_image_line(stripped)
            or is_html_line(stripped)
            or len(stripped) < MIN_DESCRIPTION_LINE_LENGTH
        ):
            continue
        return stripped

    return DEFAULT_PACKAGE_DESCRIPTION

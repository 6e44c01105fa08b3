"""Cascading section parser for persona replies.

Models are asked for ``## Heading`` sections but drift into other layouts.
Three grammars are tried in priority order and the first one that yields a
section wins outright:

1. heading markers      ``## Key Patterns``
2. emphasised labels    ``**Key Patterns:**``
3. enumerated labels    ``1. **Key Patterns:** ...``

Heading markers are unambiguous, so every headed section is kept. The two
looser grammars also match incidental bold text, so their sections are only
kept when the body is longer than ``min_section_length``.
"""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MIN_SECTION_LENGTH = 20

_LABEL_END = r"(?::\*\*|\*\*:)"
_NUMBERED_ITEM = re.compile(r"^[ \t]*\d+[.)][ \t]", re.MULTILINE)


@dataclass(frozen=True)
class _Strategy:
    name: str
    header: re.Pattern[str]
    stop: re.Pattern[str] | None
    enforce_min_length: bool


_STRATEGIES: tuple[_Strategy, ...] = (
    _Strategy(
        name="heading",
        header=re.compile(r"^##[ \t]+(?P<label>[^\n]*?)(?:[ \t]+#+)?[ \t]*$", re.MULTILINE),
        stop=None,
        enforce_min_length=False,
    ),
    _Strategy(
        name="emphasis",
        header=re.compile(r"^[ \t]*\*\*(?P<label>[^*\n]+?)" + _LABEL_END + r"[ \t]*", re.MULTILINE),
        stop=_NUMBERED_ITEM,
        enforce_min_length=True,
    ),
    _Strategy(
        name="enumerated",
        header=re.compile(
            r"^[ \t]*\d+[.)][ \t]+\*\*(?P<label>[^*\n]+?)" + _LABEL_END + r"[ \t]*", re.MULTILINE
        ),
        stop=_NUMBERED_ITEM,
        enforce_min_length=True,
    ),
)


def _extract(text: str, strategy: _Strategy, min_section_length: int) -> dict[str, str]:
    headers = list(strategy.header.finditer(text))
    sections: dict[str, str] = {}

    for i, match in enumerate(headers):
        start = match.end()
        end = headers[i + 1].start() if i + 1 < len(headers) else len(text)
        if strategy.stop is not None:
            boundary = strategy.stop.search(text, start, end)
            if boundary:
                end = boundary.start()

        label = match.group("label").strip()
        body = text[start:end].strip()
        if not label:
            continue
        if strategy.enforce_min_length and len(body) <= min_section_length:
            continue
        # Later duplicates overwrite earlier ones
        sections[label] = body

    return sections


def parse_sections(
    raw_text: str,
    min_section_length: int = DEFAULT_MIN_SECTION_LENGTH,
) -> dict[str, str] | None:
    """Split a persona reply into ``label -> body`` sections.

    Returns:
        The sections found by the highest-priority grammar that matched, or
        None when the reply is unstructured. None is not an error: the turn
        is kept with its raw text only.
    """
    text = raw_text.replace("\r\n", "\n")

    for strategy in _STRATEGIES:
        sections = _extract(text, strategy, min_section_length)
        logger.debug("Found %d sections with %s format", len(sections), strategy.name)
        if sections:
            return sections

    logger.info("No sections found in reply; keeping raw text (first 80 chars: %r)", text[:80])
    return None

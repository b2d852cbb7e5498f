"""Extraction of schedule entries from free-text generation output.

The collaborator is asked for a JSON array but is not guaranteed to return
only JSON. Parsing is a chain of strategies tried in order:

1. StructuredResponseParser - the whole text (minus markdown fences) is JSON,
   either an array of entries or an object with ``schedule``/``insights``.
2. BracketScanParser - the first balanced top-level ``[...]`` in the text.

Each strategy returns None when it does not apply; the chain raises
ValueError when none does.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from studygrid.models.optimization import ParsedSchedule

logger = logging.getLogger(__name__)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block (```json ... ```)."""
    content = (text or "").strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def _clean_insights(value) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    insights = [str(item).strip() for item in value if isinstance(item, str) and item.strip()]
    return insights or None


class ScheduleResponseParser(ABC):
    """One way of pulling schedule entries out of response text."""

    @abstractmethod
    def parse(self, text: str) -> Optional[ParsedSchedule]:
        """Return the parsed schedule, or None if this strategy does not apply."""


class StructuredResponseParser(ScheduleResponseParser):
    """The response is pure JSON."""

    def parse(self, text):
        try:
            data = json.loads(strip_code_fences(text))
        except (json.JSONDecodeError, TypeError):
            return None

        if isinstance(data, list):
            return ParsedSchedule(entries=data)
        if isinstance(data, dict) and isinstance(data.get("schedule"), list):
            return ParsedSchedule(entries=data["schedule"], insights=_clean_insights(data.get("insights")))
        return None


def find_first_array(text: str) -> Optional[str]:
    """Return the first balanced top-level ``[...]`` substring, or None.

    Brackets inside JSON string literals are skipped so that a topic name
    such as "Arrays [intro]" does not end the scan early.
    """
    start = text.find("[")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for pos in range(start, len(text)):
        char = text[pos]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return text[start:pos + 1]
    return None


class BracketScanParser(ScheduleResponseParser):
    """The response embeds a JSON array somewhere in prose."""

    def parse(self, text):
        candidate = find_first_array(text or "")
        if candidate is None:
            return None
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            logger.debug("Bracketed substring in response is not valid JSON")
            return None
        return ParsedSchedule(entries=data)


class ChainedResponseParser(ScheduleResponseParser):
    """Tries each parser in turn."""

    def __init__(self, parsers: Optional[Sequence[ScheduleResponseParser]] = None):
        self.parsers = list(parsers) if parsers is not None else [StructuredResponseParser(), BracketScanParser()]

    def parse(self, text):
        for parser in self.parsers:
            result = parser.parse(text)
            if result is not None:
                return result
        return None

    def parse_or_raise(self, text: str) -> ParsedSchedule:
        result = self.parse(text)
        if result is None:
            raise ValueError("No JSON array found in response")
        return result

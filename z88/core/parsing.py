"""
Helpers for turning free-form model output into structured values.
"""

import json
import re
from typing import Any, Optional

UNTITLED = "Untitled Story"
MAX_TITLE_LENGTH = 120

SCORE_PATTERN = re.compile(r"0\.\d+|1\.0")
BARE_SCORE_PATTERN = re.compile(r"\b[01]\b")
HEADING_PATTERN = re.compile(r"^#\s+(.+)$", re.MULTILINE)
JSON_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)


def parse_quality_score(text: str, default: float = 0.85) -> float:
    """
    Extract a 0.0 - 1.0 quality score from an assessor reply.

    The first decimal score wins; a bare ``0`` or ``1`` is accepted when no
    decimal is present. Anything unparseable yields ``default``.
    """
    match = SCORE_PATTERN.search(text or "")
    if not match:
        match = BARE_SCORE_PATTERN.search(text or "")
    if not match:
        return default

    score = float(match.group(0))
    return max(0.0, min(1.0, score))


def parse_ethical_verdict(text: str) -> bool:
    """True when the reviewer approved and did not lead with a rejection."""
    verdict = (text or "").strip().upper()
    if verdict.startswith("REJECTED"):
        return False
    return "APPROVED" in verdict


def extract_title(story_text: str) -> str:
    """Title from the first markdown heading, else the first non-empty line."""
    match = HEADING_PATTERN.search(story_text or "")
    if match:
        title = match.group(1)
    else:
        title = ""
        for line in (story_text or "").splitlines():
            if line.strip():
                title = line
                break

    title = title.strip().strip("#*_").strip().strip("\"'").strip()
    if not title or len(title) > MAX_TITLE_LENGTH:
        return UNTITLED
    return title


def count_words(text: str) -> int:
    return len((text or "").split())


def extract_json(text: str) -> Optional[Any]:
    """
    Parse JSON from a model reply.

    Tries the whole reply, then a fenced code block, then the first balanced
    ``{...}`` object. Returns None when nothing parses.
    """
    if not text:
        return None

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    block = JSON_BLOCK_PATTERN.search(text)
    if block:
        try:
            return json.loads(block.group(1).strip())
        except json.JSONDecodeError:
            pass

    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
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
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                try:
                    return json.loads(text[start:index + 1])
                except json.JSONDecodeError:
                    return None
    return None

"""
Parse free-form backend output back into structured content.

Backends are asked for a JSON object with `title`, `meta_description` and
`content`, but may wrap it in a markdown fence, surround it with prose, or
send only some of the fields. Every successful parse is merged over the
original so fields the backend omits stay byte-identical.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .types import Content

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_ANY_FENCE = re.compile(r"```[\w-]*\s*(.*?)```", re.DOTALL)
# C0 controls (including raw newlines inside string values) and DEL
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


class CorrectionPayload(BaseModel):
    """The correction response contract; every field optional, extras ignored."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(None, description="Corrected title")
    meta_description: str | None = Field(None, description="Corrected meta description")
    content: str | None = Field(None, description="Corrected HTML body")


def strip_code_fence(text: str) -> str:
    """Return the inside of a ```json fence, else of any fence, else the text."""
    match = _JSON_FENCE.search(text) or _ANY_FENCE.search(text)
    return match.group(1) if match else text


def clean_response_text(text: str) -> str:
    return _CONTROL_CHARS.sub("", strip_code_fence(text)).strip()


def _merge(payload: Any, original: Content) -> Optional[Content]:
    """Validate a decoded payload and merge the fields it sets over `original`."""
    if not isinstance(payload, Mapping):
        return None
    try:
        parsed = CorrectionPayload.model_validate(payload)
    except ValidationError as e:
        logger.debug(f"Correction payload rejected: {e.error_count()} field error(s)")
        return None
    return original.merged(parsed.model_dump(exclude_unset=True, exclude_none=True))


def parse_correction_response(raw: Any, original: Content) -> Optional[Content]:
    """
    Extract corrected content from a backend response.

    Args:
        raw: Response text, or an already-decoded mapping
        original: Content the correction was requested for

    Returns:
        Merged Content, or None when nothing usable could be parsed
    """
    if isinstance(raw, Mapping):
        return _merge(raw, original)
    if not isinstance(raw, str):
        return None

    cleaned = clean_response_text(raw)
    if not cleaned:
        return None

    try:
        merged = _merge(json.loads(cleaned), original)
        if merged is not None:
            return merged
    except json.JSONDecodeError:
        pass

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end <= start:
        logger.debug(f"No JSON object found in response: {cleaned[:200]}")
        return None

    try:
        return _merge(json.loads(cleaned[start : end + 1]), original)
    except json.JSONDecodeError:
        logger.debug(f"Unparseable correction response: {cleaned[:200]}")
        return None


class ResponseParser:
    """Object wrapper so the orchestrator can take a parser as a collaborator."""

    def parse(self, raw: Any, original: Content) -> Optional[Content]:
        return parse_correction_response(raw, original)

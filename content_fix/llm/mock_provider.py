# content_fix/llm/mock_provider.py
"""
Scripted generation backend for tests and dry runs.
"""

from __future__ import annotations

import json
import re
from collections import deque
from typing import Callable, Iterable, Optional, Union

from content_fix.llm.base import GenerationOptions, LLMProvider

MockResponse = Union[str, dict, Exception, Callable[[str], str]]

_CURRENT_CONTENT = re.compile(
    r"Title: (?P<title>.*?)\nMeta Description: (?P<meta>.*?)\nContent:\n(?P<body>.*?)\n\n"
    r"(?:Focus Keyword:|INSTRUCTIONS:)",
    re.DOTALL,
)


def echo_current_content(prompt: str) -> str:
    """Return the content embedded in a correction request, unchanged, as JSON."""
    match = _CURRENT_CONTENT.search(prompt)
    if not match:
        return "{}"
    return json.dumps(
        {
            "title": match.group("title"),
            "meta_description": match.group("meta"),
            "content": match.group("body"),
        }
    )


class MockProvider(LLMProvider):
    """
    Scripted mock provider.

    Responses are consumed in order; each may be a string, a dict (returned
    as-is to exercise structured responses), an exception instance (raised),
    or a callable receiving the prompt. When the script runs out, the
    provider echoes the current content back unchanged.
    """

    def __init__(
        self,
        responses: Optional[Iterable[MockResponse]] = None,
        name: str = "mock",
        model: str = "mock-model",
    ):
        self._responses: deque[MockResponse] = deque(responses or [])
        self._name = name
        self._model = model
        self.calls: list[str] = []
        self.options: list[GenerationOptions] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def model_name(self) -> str:
        return self._model

    def queue(self, *responses: MockResponse) -> None:
        """Append responses to the script."""
        self._responses.extend(responses)

    def generate(self, prompt: str, options: Optional[GenerationOptions] = None):
        self.calls.append(prompt)
        self.options.append(options or GenerationOptions())

        if not self._responses:
            return echo_current_content(prompt)

        response = self._responses.popleft()
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(prompt)
        return response

    @property
    def call_count(self) -> int:
        return len(self.calls)

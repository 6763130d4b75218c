"""
Content fingerprints: canonical checksums and structural profiles.

Both are pure functions of the content. Profiles are memoized in a bounded
LRU cache keyed by an exact digest of the content.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Optional

from cachetools import LRUCache

from content_fix.constants import IntegrityThresholds
from content_fix.services.correction.types import Content

from .types import HeadingEntry, StructuralProfile

_WHITESPACE = re.compile(r"\s+")
_BETWEEN_TAGS = re.compile(r">\s+<")
_OPEN_TAG = re.compile(r"<([a-z][a-z0-9]*)\b[^>]*>", re.IGNORECASE)
_HEADING = re.compile(r"<(h[1-6])\b[^>]*>(.*?)</\1\s*>", re.IGNORECASE | re.DOTALL)
_ANY_TAG = re.compile(r"<[^>]+>")

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
LIST_TAGS = ("ul", "ol")


def normalize_html(html: str) -> str:
    """Collapse whitespace runs and drop whitespace between tags."""
    html = _WHITESPACE.sub(" ", html)
    html = _BETWEEN_TAGS.sub("><", html)
    return html.strip()


def generate_checksum(content: Content) -> str:
    """
    SHA-256 over the normalized content.

    Title and meta description are trimmed and the body is whitespace
    normalized, so formatting-only whitespace changes keep the checksum.
    """
    normalized = {
        "title": content.title.strip(),
        "meta_description": content.meta_description.strip(),
        "content": normalize_html(content.body),
    }
    payload = json.dumps(normalized, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _content_digest(content: Content) -> str:
    """Exact (un-normalized) digest used as the profile cache key."""
    return hashlib.sha256(content.canonical_json().encode("utf-8")).hexdigest()


def count_tags(html: str) -> dict[str, int]:
    """Opening-tag counts by lowercased tag name."""
    counts: dict[str, int] = {}
    for name in _OPEN_TAG.findall(html):
        name = name.lower()
        counts[name] = counts.get(name, 0) + 1
    return counts


def extract_heading_hierarchy(html: str) -> tuple[HeadingEntry, ...]:
    """Closed headings in document order, inner markup stripped."""
    return tuple(
        HeadingEntry(level=int(tag[1]), text=_ANY_TAG.sub("", inner).strip())
        for tag, inner in _HEADING.findall(html)
    )


def build_profile(content: Content) -> StructuralProfile:
    """Compute the structural profile of a content record (uncached)."""
    body = content.body
    tags = count_tags(body)

    return StructuralProfile(
        title_length=len(content.title),
        meta_length=len(content.meta_description),
        body_length=len(body),
        tag_counts=tags,
        heading_hierarchy=extract_heading_hierarchy(body),
        paragraph_count=tags.get("p", 0),
        heading_counts={tag: tags.get(tag, 0) for tag in HEADING_TAGS},
        image_count=tags.get("img", 0),
        list_count=sum(tags.get(tag, 0) for tag in LIST_TAGS),
        link_count=tags.get("a", 0),
        checksum=generate_checksum(content),
    )


class StructureAnalyzer:
    """
    Memoizing structural profiler.

    Usage:
        analyzer = StructureAnalyzer(cache_size=256)
        profile = analyzer.analyze(content)
        analyzer.cache_size  # entries currently cached
    """

    def __init__(self, cache_size: int = IntegrityThresholds.STRUCTURE_CACHE_SIZE):
        self._cache: LRUCache = LRUCache(maxsize=cache_size)

    def analyze(self, content: Content) -> StructuralProfile:
        key = _content_digest(content)
        profile: Optional[StructuralProfile] = self._cache.get(key)
        if profile is None:
            profile = build_profile(content)
            self._cache[key] = profile
        return profile

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    @property
    def cache_capacity(self) -> int:
        return int(self._cache.maxsize)

    def reset(self) -> None:
        self._cache.clear()

"""
Event key normalization.

Turns the method, path and selected query parameter values of an
observed HTTP request into a low-cardinality key, e.g.

    GET /users/12345?op=list  ->  GET:/users/0:list

Path handling:
- whole-path rewrite rules run first, in configured order
- the result is cleaned and split into segments
- every non-empty segment is checked against the enabled heuristics
  (first match wins), asset extensions only on the last segment
"""

import logging
import re
from typing import List, Optional, Sequence

from schemas import HttpRequestEvent, NormalizerConfig, RewriteRuleConfig
from utils import (
    clean_path,
    is_font,
    is_hash,
    is_image,
    is_ip,
    is_number,
    is_uuid,
)

logger = logging.getLogger("eventkey.normalizer")

EVENT_KEY_FIELD_SEPARATOR = ":"
PATH_ITEMS_SEPARATOR = "/"

NUMBER_PLACEHOLDER = "0"
IP_PLACEHOLDER = ":ip"
HASH_PLACEHOLDER = ":hash"
UUID_PLACEHOLDER = ":uuid"
IMAGE_PLACEHOLDER = ":image"
FONT_PLACEHOLDER = ":font"


class NormalizerConfigError(ValueError):
    """Raised when the normalizer cannot be built from its configuration."""


# =========================
# Rewrite Rules
# =========================

class RewriteRule:
    """
    Replaces the whole path with `replacement` when `pattern` matches
    anywhere in it. The pattern is compiled once, on construction.
    """

    __slots__ = ("pattern", "replacement", "_compiled")

    def __init__(self, pattern: str, replacement: str):
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise NormalizerConfigError(f"failed to compile regexp {pattern!r}: {e}") from e
        self.pattern = pattern
        self.replacement = replacement
        self._compiled = compiled

    @classmethod
    def from_config(cls, rule: RewriteRuleConfig) -> "RewriteRule":
        return cls(rule.regexp, rule.replacement)

    def apply(self, raw_path: str) -> str:
        if self._compiled.search(raw_path):
            return self.replacement
        return raw_path

    def __repr__(self) -> str:
        return f"RewriteRule(pattern={self.pattern!r}, replacement={self.replacement!r})"


# =========================
# Path Sanitizer
# =========================

class PathSanitizer:
    def __init__(
        self,
        rules: Sequence[RewriteRule] = (),
        *,
        hashes: bool = False,
        numbers: bool = False,
        uuids: bool = False,
        ips: bool = False,
        images: bool = False,
        fonts: bool = False,
    ):
        self.rules = tuple(rules)
        self.hashes = hashes
        self.numbers = numbers
        self.uuids = uuids
        self.ips = ips
        self.images = images
        self.fonts = fonts

    def sanitize(self, raw_path: str) -> str:
        if raw_path == "":
            return PATH_ITEMS_SEPARATOR

        for rule in self.rules:
            raw_path = rule.apply(raw_path)

        items = clean_path(raw_path).split(PATH_ITEMS_SEPARATOR)
        items_count = len(items)
        for i, item in enumerate(items):
            if item == "":
                continue
            items[i] = self.sanitize_segment(item, last=(i + 1 == items_count))
        return PATH_ITEMS_SEPARATOR.join(items)

    def sanitize_segment(self, segment: str, last: bool = False) -> str:
        if self.hashes and is_hash(segment):
            return HASH_PLACEHOLDER
        if self.numbers and is_number(segment):
            return NUMBER_PLACEHOLDER
        if self.uuids and is_uuid(segment):
            return UUID_PLACEHOLDER
        if self.ips and is_ip(segment):
            return IP_PLACEHOLDER

        if last:
            if self.images and is_image(segment):
                return IMAGE_PLACEHOLDER
            if self.fonts and is_font(segment):
                return FONT_PLACEHOLDER

        return segment


# =========================
# Event Key Builder
# =========================

class EventKeyBuilder:
    def __init__(self, sanitizer: PathSanitizer, query_param_name: str = ""):
        self.sanitizer = sanitizer
        self.query_param_name = query_param_name

    def build_key(self, event: HttpRequestEvent) -> str:
        identifiers: List[str] = [event.method, self.sanitizer.sanitize(event.path)]
        if self.query_param_name:
            # all values of the configured parameter, in query string order
            identifiers.extend(event.query_params.get(self.query_param_name, []))
        return EVENT_KEY_FIELD_SEPARATOR.join(identifiers)


def build_key_builder(config: Optional[NormalizerConfig] = None) -> EventKeyBuilder:
    """
    Build a ready-to-use key builder.

    Every rewrite rule is compiled here, so an invalid pattern fails
    before any event is processed.
    """
    config = config or NormalizerConfig()
    rules = [RewriteRule.from_config(rule) for rule in config.replace_rules]
    sanitizer = PathSanitizer(
        rules,
        hashes=config.sanitize_hashes,
        numbers=config.sanitize_numbers,
        uuids=config.sanitize_uuids,
        ips=config.sanitize_ips,
        images=config.sanitize_images,
        fonts=config.sanitize_fonts,
    )
    logger.info(f"Normalizer built with {len(rules)} rewrite rule(s)")
    return EventKeyBuilder(sanitizer, config.get_param_with_event_identifier)

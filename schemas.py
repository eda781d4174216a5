from typing import Optional, List, Dict, Any, Tuple
from urllib.parse import urlsplit, unquote, parse_qs

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


# =========================
# Normalizer Configuration
# =========================

class RewriteRuleConfig(BaseModel):
    regexp: str
    replacement: str

    class Config:
        extra = "forbid"
        frozen = True


class NormalizerConfig(BaseModel):
    """
    Immutable normalizer configuration.

    Unknown keys are rejected. Both snake_case and the camelCase
    keys used by existing exporter YAML files are accepted.
    """
    get_param_with_event_identifier: str = ""
    replace_rules: List[RewriteRuleConfig] = Field(default_factory=list)
    sanitize_hashes: bool = False
    sanitize_numbers: bool = False
    sanitize_uuids: bool = False
    sanitize_ips: bool = False
    sanitize_images: bool = False
    sanitize_fonts: bool = False

    class Config:
        extra = "forbid"
        frozen = True
        alias_generator = to_camel
        populate_by_name = True


# =========================
# Events
# =========================

def split_url(url: str) -> Tuple[str, str]:
    """
    Return the (path, query) of `url`.

    Malformed URLs that urlsplit rejects (e.g. an unbalanced `[` in the
    host) are split by hand: fragment, query and scheme://netloc are cut
    off the raw string.
    """
    try:
        parts = urlsplit(url)
        return parts.path, parts.query
    except ValueError:
        pass

    path, _, query = url.partition("#")[0].partition("?")
    scheme_end = path.find("://")
    if scheme_end >= 0:
        path = "//" + path[scheme_end + 3:]
    if path.startswith("//"):
        slash = path.find("/", 2)
        path = path[slash:] if slash >= 0 else ""
    return path, query


class HttpRequestEvent(BaseModel):
    """
    A single observed HTTP request.

    `event_key` is filled by the normalization stage unless the
    producer already set it.
    """
    method: str
    url: str
    event_key: str = ""
    ip: Optional[str] = None
    status_code: Optional[int] = None
    duration_ms: Optional[float] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def path(self) -> str:
        return unquote(split_url(self.url)[0])

    @property
    def query_params(self) -> Dict[str, List[str]]:
        # parse_qs keeps the order values appear in for each name
        return parse_qs(split_url(self.url)[1], keep_blank_values=True)


class NormalizeRequest(BaseModel):
    events: List[HttpRequestEvent]


class NormalizeResponse(BaseModel):
    events: List[HttpRequestEvent]

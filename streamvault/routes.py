"""Canonical in-app routes and the short-link scheme used for sharing."""
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from streamvault.domain import MediaRef

HOME = "/"

SHORT_CODE_TYPES = {
    "m": "movie",
    "t": "tv",
    "p": "person",
    "c": "collection",
}
_SHORT_CODE_PREFIXES = {v: k for k, v in SHORT_CODE_TYPES.items()}
_BASE36_RE = re.compile(r"^[0-9a-z]+$")
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass
class Route:
    """A parsed route: a page name and its path parameters."""
    page: str
    params: Dict[str, str] = field(default_factory=dict)


def watch_route(media_ref: MediaRef) -> str:
    if media_ref.is_tv:
        season = media_ref.season or 1
        episode = media_ref.episode or 1
        return f"/watch/tv/{media_ref.media_id}/{season}/{episode}"
    return f"/watch/movie/{media_ref.media_id}"


def details_route(media_type: str, media_id: int) -> str:
    if media_type == "person":
        return f"/person/{media_id}"
    if media_type == "collection":
        return f"/collection/{media_id}"
    return f"/details/{media_type}/{media_id}"


def view_all_route(category_id: str) -> str:
    return f"/browse/{category_id}"


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("Only non-negative ids can be encoded")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def make_short_code(media_type: str, media_id: int) -> str:
    """Encodes a title as <typeChar><base36Id>, e.g. ("movie", 550) -> "mfa"."""
    prefix = _SHORT_CODE_PREFIXES.get(media_type)
    if prefix is None:
        raise ValueError(f"Cannot share media type {media_type!r}")
    return prefix + to_base36(media_id)


def resolve_short_code(code: Optional[str]) -> str:
    """
    Resolves a short code to its canonical details route.
    Malformed codes resolve to the home route.
    """
    if not code or len(code) < 2:
        return HOME
    code = code.strip().lower()
    media_type = SHORT_CODE_TYPES.get(code[0])
    id_part = code[1:]
    if media_type is None or not _BASE36_RE.match(id_part):
        print(f"DEBUG resolve_short_code: invalid short code {code!r}")
        return HOME
    return details_route(media_type, int(id_part, 36))


_ROUTE_PATTERNS = [
    ("watch", re.compile(r"^/watch/(?P<media_type>tv)/(?P<media_id>\d+)(?:/(?P<season>\d+)/(?P<episode>\d+))?/?$")),
    ("watch", re.compile(r"^/watch/(?P<media_type>movie)/(?P<media_id>\d+)/?$")),
    ("details", re.compile(r"^/details/(?P<media_type>movie|tv)/(?P<media_id>\d+)/?$")),
    ("person", re.compile(r"^/person/(?P<media_id>\d+)/?$")),
    ("collection", re.compile(r"^/collection/(?P<media_id>\d+)/?$")),
    ("browse", re.compile(r"^/browse/(?P<category_id>[\w\-]+)/?$")),
    ("shared", re.compile(r"^/s/(?P<code>[^/]+)/?$")),
    ("watchlist", re.compile(r"^/watchlist/?$")),
    ("liked", re.compile(r"^/liked/?$")),
    ("settings", re.compile(r"^/settings/?$")),
]


def parse_route(path: Optional[str]) -> Route:
    """Matches a path against the known routes. Unknown paths map to home."""
    path = (path or HOME).strip() or HOME
    for page, pattern in _ROUTE_PATTERNS:
        match = pattern.match(path)
        if match:
            return Route(page=page, params={k: v for k, v in match.groupdict().items() if v is not None})
    return Route(page="home")


def media_ref_from_route(route: Route) -> Optional[MediaRef]:
    """Builds the MediaRef of a watch route."""
    if route.page != "watch":
        return None
    media_type = route.params["media_type"]
    media_id = int(route.params["media_id"])
    if media_type == "tv":
        return MediaRef("tv", media_id, int(route.params.get("season", 1)), int(route.params.get("episode", 1)))
    return MediaRef("movie", media_id)

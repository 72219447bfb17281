"""Metadata catalog access through an ordered list of direct and relay strategies."""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import requests

from streamvault.config import (
    DIRECT_TIMEOUT_SECONDS,
    RELAY_TIMEOUT_SECONDS,
    TMDB_API_KEY,
    TMDB_BASE_URL,
    TMDB_LANGUAGE,
)
from streamvault.errors import AllStrategiesFailed, NotFound, Unauthorized


@dataclass(frozen=True)
class FetchStrategy:
    """One way of reaching the catalog: a URL transform plus its timeout."""
    name: str
    transform: Callable[[str], str]
    timeout: float


# Tried top-down. Direct first, then relays in order of reliability.
DEFAULT_STRATEGIES: List[FetchStrategy] = [
    FetchStrategy("direct", lambda url: url, DIRECT_TIMEOUT_SECONDS),
    FetchStrategy("codetabs", lambda url: f"https://api.codetabs.com/v1/proxy?quest={quote(url, safe='')}", RELAY_TIMEOUT_SECONDS),
    FetchStrategy("allorigins", lambda url: f"https://api.allorigins.win/raw?url={quote(url, safe='')}", RELAY_TIMEOUT_SECONDS),
    FetchStrategy("corsproxy", lambda url: f"https://corsproxy.io/?{quote(url, safe='')}", RELAY_TIMEOUT_SECONDS),
    FetchStrategy("thingproxy", lambda url: f"https://thingproxy.freeboard.io/fetch/{url}", RELAY_TIMEOUT_SECONDS),
]


class ResilientFetcher:
    """
    Issues catalog GET requests, falling back through relay strategies
    when the direct route is blocked or flaky.
    """

    def __init__(self, api_key: Optional[str] = None,
                 base_url: str = TMDB_BASE_URL,
                 language: str = TMDB_LANGUAGE,
                 strategies: Optional[List[FetchStrategy]] = None):
        self.api_key = api_key if api_key is not None else TMDB_API_KEY
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.strategies = list(strategies) if strategies is not None else list(DEFAULT_STRATEGIES)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_url(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Builds the catalog URL with credentials, language and params."""
        query: Dict[str, Any] = {"api_key": self.api_key, "language": self.language}
        for key, value in (params or {}).items():
            if value is not None:
                query[key] = value
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        return requests.Request("GET", url, params=query).prepare().url

    def fetch_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Fetches an endpoint and returns the parsed JSON body.

        Raises:
            NotFound: the catalog answered 404 (no other strategy is tried)
            Unauthorized: the catalog answered 401 (no other strategy is tried)
            AllStrategiesFailed: every strategy failed; carries the last error
        """
        target_url = self.build_url(endpoint, params)
        last_error: Optional[BaseException] = None

        for strategy in self.strategies:
            url = strategy.transform(target_url)
            try:
                response = requests.get(url, timeout=strategy.timeout)
            except requests.exceptions.Timeout as e:
                print(f"DEBUG ResilientFetcher: {strategy.name} timed out after {strategy.timeout}s for {endpoint}")
                last_error = e
                continue
            except requests.RequestException as e:
                print(f"DEBUG ResilientFetcher: {strategy.name} network error for {endpoint}: {e}")
                last_error = e
                continue

            if response.status_code == 404:
                raise NotFound(f"Not found: {endpoint}")
            if response.status_code == 401:
                print("ERROR ResilientFetcher: catalog rejected the API key (401)")
                raise Unauthorized("Invalid TMDB API key")

            if not response.ok:
                print(f"DEBUG ResilientFetcher: {strategy.name} answered {response.status_code} for {endpoint}")
                last_error = requests.HTTPError(f"HTTP {response.status_code}", response=response)
                continue

            try:
                return response.json()
            except ValueError as e:
                print(f"DEBUG ResilientFetcher: {strategy.name} returned a non-JSON body for {endpoint}")
                last_error = e
                continue

        raise AllStrategiesFailed(f"All fetch strategies failed for {endpoint}", last_error)

"""Metadata provider interface and TMDB implementation for browsing movies/TV."""
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Dict, List, Optional

from streamvault.config import TMDB_IMAGE_BASE_URL, TMDB_BACKDROP_SIZE, TMDB_POSTER_SIZE
from streamvault.fetch import ResilientFetcher

Page = Dict[str, Any]

DETAILS_APPENDS = "videos,credits,images,similar"
IMAGE_LANGUAGES = "en,null"


def filter_quality_content(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Drops results without artwork, and titles nobody has voted on.
    People, companies and collections only need an image.
    """
    kept = []
    for item in items or []:
        if not isinstance(item, dict):
            continue
        has_image = item.get("poster_path") or item.get("backdrop_path") or item.get("profile_path") or item.get("logo_path")
        if not has_image:
            continue
        if item.get("media_type") in ("person", "company", "collection"):
            kept.append(item)
        elif (item.get("vote_count") or 0) > 0:
            kept.append(item)
    return kept


class IMetadataProvider(ABC):
    """Abstract interface for metadata catalogs."""

    @abstractmethod
    def get_details(self, media_type: str, media_id: int) -> Dict[str, Any]:
        """Full details of a movie or TV show, including seasons for TV."""
        pass

    @abstractmethod
    def get_season_details(self, tv_id: int, season_number: int) -> Dict[str, Any]:
        pass

    @abstractmethod
    def get_poster_url(self, poster_path: str, size: str = TMDB_POSTER_SIZE) -> str:
        """Get full URL for a poster image."""
        pass


class TMDBProvider(IMetadataProvider):
    """TMDB (The Movie Database) metadata provider."""

    IMAGE_BASE_URL = TMDB_IMAGE_BASE_URL

    def __init__(self, fetcher: Optional[ResilientFetcher] = None):
        self.fetcher = fetcher or ResilientFetcher()
        print(f"DEBUG TMDBProvider: Initialized with API key: {'[SET]' if self.fetcher.is_configured else '[NOT SET]'}")

    @property
    def is_configured(self) -> bool:
        """Check if API key is available."""
        return self.fetcher.is_configured

    def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.fetcher.fetch_json(endpoint, params)

    def _paged(self, endpoint: str, params: Dict[str, Any], results_key: str = "results") -> Page:
        data = self._get(endpoint, params)
        return {
            "results": filter_quality_content(data.get(results_key) or []),
            "page": data.get("page", params.get("page", 1)),
            "total_pages": data.get("total_pages", 1),
            "name": data.get("name"),
        }

    # === Lists ===

    def get_page(self, endpoint: str, params: Optional[Dict[str, Any]] = None, page: int = 1,
                 results_key: str = "results") -> Page:
        """
        Fetch one page of a list endpoint (trending, popular, discover, ...).

        Returns:
            {"results": [...], "page": int, "total_pages": int, "name": str|None}
            with low-quality entries filtered out.
        """
        query = dict(params or {})
        query["page"] = page
        return self._paged(endpoint, query, results_key=results_key)

    # === Search ===

    def search(self, query: str, page: int = 1, year: Optional[int] = None,
               media_type: Optional[str] = None) -> Page:
        """Multi search, or a typed search when media_type is given."""
        if media_type in ("movie", "tv"):
            params: Dict[str, Any] = {"query": query, "page": page}
            if year:
                params["year" if media_type == "movie" else "first_air_date_year"] = year
            result = self._paged(f"/search/{media_type}", params)
            for item in result["results"]:
                item.setdefault("media_type", media_type)
            return result
        return self._paged("/search/multi", {"query": query, "page": page})

    def search_collections(self, query: str) -> List[Dict[str, Any]]:
        data = self._get("/search/collection", {"query": query})
        return [dict(item, media_type="collection") for item in data.get("results") or []]

    def search_companies(self, query: str) -> List[Dict[str, Any]]:
        data = self._get("/search/company", {"query": query})
        return [dict(item, media_type="company") for item in data.get("results") or []]

    # === Details ===

    def get_details(self, media_type: str, media_id: int) -> Dict[str, Any]:
        return self._get(f"/{media_type}/{media_id}", {
            "append_to_response": DETAILS_APPENDS,
            "include_image_language": IMAGE_LANGUAGES,
        })

    def get_season_details(self, tv_id: int, season_number: int) -> Dict[str, Any]:
        return self._get(f"/tv/{tv_id}/season/{season_number}", {"append_to_response": "videos"})

    def get_person_details(self, person_id: int) -> Dict[str, Any]:
        return self._get(f"/person/{person_id}", {"append_to_response": "combined_credits"})

    def get_person_credits(self, person_id: int) -> Dict[str, Any]:
        return self._get(f"/person/{person_id}/combined_credits")

    def get_collection_details(self, collection_id: int) -> Dict[str, Any]:
        return self._get(f"/collection/{collection_id}")

    @lru_cache(maxsize=2)
    def get_genres(self, media_type: str) -> Dict[int, str]:
        """Get genre ID to name mapping (cached)."""
        data = self._get(f"/genre/{media_type}/list")
        return {g["id"]: g["name"] for g in data.get("genres") or []}

    # === Images ===

    def get_poster_url(self, poster_path: str, size: str = TMDB_POSTER_SIZE) -> str:
        """Get full poster URL."""
        if not poster_path:
            return ""
        return f"{self.IMAGE_BASE_URL}{size}{poster_path}"

    def get_backdrop_url(self, backdrop_path: str, size: str = TMDB_BACKDROP_SIZE) -> str:
        """Get full backdrop URL."""
        if not backdrop_path:
            return ""
        return f"{self.IMAGE_BASE_URL}{size}{backdrop_path}"

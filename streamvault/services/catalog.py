from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from streamvault.cache import MetadataCache, make_cache_key
from streamvault.config import WATCH_REGION
from streamvault.domain import MediaRef, MetadataCacheEntry
from streamvault.errors import FetchError
from streamvault.providers.metadata_provider import TMDBProvider

# Try to import guessit, but make it optional
try:
    from guessit import guessit
except ImportError:
    guessit = None
    print("Warning: 'guessit' library not found. Search hints will be disabled.")

PROVIDER_SLUGS = {
    "netflix": (8, "Netflix"),
    "prime_video": (9, "Prime Video"),
    "disney_hotstar": (337, "Disney+"),
    "max": (188, "Max"),
    "apple_tv": (2, "Apple TV"),
}

_DISCOVER_DEFAULTS = {"sort_by": "popularity.desc", "vote_count.gte": 1}


@dataclass
class Category:
    """A browsable list: which endpoint feeds it and how to label it."""
    category_id: str
    title: str
    endpoint: str
    params: Dict[str, Any] = field(default_factory=dict)
    media_type: Optional[str] = None  # assumed for results that omit media_type
    results_key: str = "results"
    paginated: bool = True


@dataclass
class SearchHints:
    """What guessit could tell about a free-text query."""
    title: str
    year: Optional[int] = None
    media_type: Optional[str] = None
    season: Optional[int] = None
    episode: Optional[int] = None


def resolve_category(category_id: str) -> Optional[Category]:
    """
    Maps a category id (as used in "view all" routes) to its endpoint.
    Returns None for ids that do not describe any known list.
    """
    if not category_id:
        return None

    try:
        for slug, (provider_id, provider_name) in PROVIDER_SLUGS.items():
            if category_id.startswith(slug):
                is_movie = "movies" in category_id
                media_type = "movie" if is_movie else "tv"
                return Category(
                    category_id,
                    f"{'Movies' if is_movie else 'TV Shows'} on {provider_name}",
                    f"/discover/{media_type}",
                    dict(_DISCOVER_DEFAULTS, with_watch_providers=provider_id, watch_region=WATCH_REGION),
                    media_type,
                )

        parts = category_id.split("_")

        if category_id.startswith("network-"):
            network_id = int(category_id[len("network-"):])
            return Category(category_id, "Network Series", "/discover/tv",
                            dict(_DISCOVER_DEFAULTS, with_networks=network_id), "tv")

        if category_id.startswith("company-"):
            company_id = int(category_id[len("company-"):])
            return Category(category_id, "Production Company", "/discover/movie",
                            dict(_DISCOVER_DEFAULTS, with_companies=company_id), "movie")

        if category_id.startswith("keyword"):
            keyword_id = int(parts[1])
            return Category(category_id, "Curated Collection", "/discover/movie",
                            dict(_DISCOVER_DEFAULTS, with_keywords=keyword_id), "movie")

        if category_id.startswith("list_"):
            list_id = category_id[len("list_"):]
            return Category(category_id, "Curated List", f"/list/{list_id}",
                            results_key="items", paginated=False)

        media_type = "tv" if parts[0] == "tv" else "movie"
        label = "Movies" if media_type == "movie" else "TV Shows"

        if category_id.startswith("trending"):
            return Category(category_id, "Trending Now", "/trending/all/week")

        if "popular" in category_id:
            return Category(category_id, f"Popular {label}", f"/{media_type}/popular", media_type=media_type)

        if "top_rated" in category_id:
            return Category(category_id, f"Top Rated {label}", f"/{media_type}/top_rated", media_type=media_type)

        if "genre" in category_id:
            genre_id = int(parts[2])
            return Category(category_id, f"{'Movie' if media_type == 'movie' else 'TV'} Collection",
                            f"/discover/{media_type}", dict(_DISCOVER_DEFAULTS, with_genres=genre_id), media_type)

        if category_id.startswith("provider"):
            provider_type = "tv" if parts[1] == "tv" else "movie"
            provider_id = int(parts[2])
            return Category(category_id, "Streaming", f"/discover/{provider_type}",
                            dict(_DISCOVER_DEFAULTS, with_watch_providers=provider_id, watch_region=WATCH_REGION),
                            provider_type)

        if category_id.startswith("company_"):
            company_id = int(parts[1])
            return Category(category_id, "Production Company", "/discover/movie",
                            dict(_DISCOVER_DEFAULTS, with_companies=company_id), "movie")
    except (IndexError, ValueError):
        print(f"DEBUG resolve_category: malformed category id {category_id!r}")
        return None

    return None


def infer_media_type(item: Dict[str, Any], default: Optional[str] = None) -> str:
    if item.get("media_type"):
        return item["media_type"]
    if default:
        return default
    return "tv" if ("first_air_date" in item or ("name" in item and "title" not in item)) else "movie"


def dedupe_items(items: List[Dict[str, Any]], default_media_type: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Assembles a display list: first occurrence of each (id, media_type) wins,
    and every item carries an explicit media_type.
    """
    seen = set()
    assembled = []
    for item in items:
        media_type = infer_media_type(item, default_media_type)
        identity = (item.get("id"), media_type)
        if identity in seen:
            continue
        seen.add(identity)
        assembled.append(dict(item, media_type=media_type))
    return assembled


class CatalogService:
    """
    Read-through access to the metadata catalog.
    Lists and details are served from the cache when present so that
    back-navigation and tab switching do not hit the network again.
    """

    def __init__(self, provider: TMDBProvider, cache: Optional[MetadataCache] = None):
        self.provider = provider
        self.cache = cache if cache is not None else MetadataCache()

    # === Lists ===

    def _category_or_raise(self, category_id: str) -> Category:
        category = resolve_category(category_id)
        if category is None:
            raise ValueError(f"Unknown category: {category_id}")
        return category

    def category_key(self, category: Category) -> str:
        return make_cache_key(category.endpoint, category.params)

    def load_category(self, category_id: str, refresh: bool = False) -> MetadataCacheEntry:
        """Returns the cached list, fetching its first page on a miss."""
        category = self._category_or_raise(category_id)
        key = self.category_key(category)
        entry = self.cache.get(key)
        if entry is not None and not refresh:
            return entry

        page_data = self.provider.get_page(category.endpoint, category.params, 1, category.results_key)
        entry = MetadataCacheEntry(
            data=page_data,
            items=list(page_data["results"]),
            page=1,
            exhausted=self._is_exhausted(category, page_data, 1),
        )
        self.cache.put(key, entry)
        return entry

    def load_more(self, category_id: str) -> MetadataCacheEntry:
        """Fetches the next page of a list and appends it to the cached items."""
        category = self._category_or_raise(category_id)
        entry = self.load_category(category_id)
        if entry.exhausted:
            return entry

        next_page = entry.page + 1
        page_data = self.provider.get_page(category.endpoint, category.params, next_page, category.results_key)
        return self.cache.append_page(
            self.category_key(category),
            page_data["results"],
            next_page,
            self._is_exhausted(category, page_data, next_page),
        )

    def _is_exhausted(self, category: Category, page_data: Dict[str, Any], page: int) -> bool:
        if not category.paginated or not page_data.get("results"):
            return True
        return page >= int(page_data.get("total_pages") or page)

    def category_items(self, category_id: str) -> List[Dict[str, Any]]:
        """Display-ready items of a list loaded so far."""
        category = self._category_or_raise(category_id)
        entry = self.load_category(category_id)
        return dedupe_items(entry.items, category.media_type)

    def category_title(self, category_id: str) -> str:
        category = self._category_or_raise(category_id)
        entry = self.cache.get(self.category_key(category))
        if entry is not None and entry.data and entry.data.get("name"):
            return entry.data["name"]
        genre_id = category.params.get("with_genres")
        if genre_id is not None and category.media_type:
            try:
                genre = self.provider.get_genres(category.media_type).get(genre_id)
            except FetchError as e:
                print(f"DEBUG CatalogService.category_title: genres unavailable: {e}")
                genre = None
            if genre:
                return f"{genre} {'Movies' if category.media_type == 'movie' else 'TV Shows'}"
        return category.title

    # === Details ===

    def _cached(self, key: str, loader, refresh: bool = False) -> Any:
        entry = self.cache.get(key)
        if entry is not None and not refresh:
            return entry.data
        data = loader()
        self.cache.put(key, MetadataCacheEntry(data=data))
        return data

    def get_details(self, media_type: str, media_id: int, refresh: bool = False) -> Dict[str, Any]:
        return self._cached(make_cache_key(f"/{media_type}/{media_id}"),
                            lambda: self.provider.get_details(media_type, media_id), refresh)

    def get_season_details(self, tv_id: int, season_number: int, refresh: bool = False) -> Dict[str, Any]:
        return self._cached(make_cache_key(f"/tv/{tv_id}/season/{season_number}"),
                            lambda: self.provider.get_season_details(tv_id, season_number), refresh)

    def get_person_details(self, person_id: int, refresh: bool = False) -> Dict[str, Any]:
        return self._cached(make_cache_key(f"/person/{person_id}"),
                            lambda: self.provider.get_person_details(person_id), refresh)

    def get_collection_details(self, collection_id: int, refresh: bool = False) -> Dict[str, Any]:
        return self._cached(make_cache_key(f"/collection/{collection_id}"),
                            lambda: self.provider.get_collection_details(collection_id), refresh)

    def get_person_works(self, person_id: int, exclude_id: Optional[int] = None,
                         limit: int = 15) -> List[Dict[str, Any]]:
        """Titles a person appeared in, most voted first."""
        credits = self._cached(make_cache_key(f"/person/{person_id}/combined_credits"),
                               lambda: self.provider.get_person_credits(person_id))
        works = [
            item for item in credits.get("cast") or []
            if item.get("id") != exclude_id and item.get("poster_path")
        ]
        works.sort(key=lambda item: item.get("vote_count") or 0, reverse=True)
        return dedupe_items(works)[:limit]

    def get_actor_credits(self, details: Dict[str, Any], limit: int = 15) -> List[Dict[str, Any]]:
        """Other works of the leading actor, excluding the title itself."""
        cast = (details.get("credits") or {}).get("cast") or []
        if not cast:
            return []
        return self.get_person_works(cast[0].get("id"), exclude_id=details.get("id"), limit=limit)

    # === Search ===

    def guess_hints(self, query: str) -> SearchHints:
        """Uses guessit to pull a clean title, year and episode numbers out of a query."""
        hints = SearchHints(title=query.strip())
        if not guessit:
            return hints
        try:
            guessed = guessit(query)
        except Exception as e:
            print(f"Guessit error while parsing search query: {e}")
            return hints

        if isinstance(guessed.get("title"), str):
            hints.title = guessed["title"]
        if isinstance(guessed.get("year"), int):
            hints.year = guessed["year"]
        if guessed.get("type") == "episode" or "season" in guessed or "episode" in guessed:
            hints.media_type = "tv"
            hints.season = guessed["season"] if type(guessed.get("season")) is int else None
            hints.episode = guessed["episode"] if type(guessed.get("episode")) is int else None
        elif hints.year:
            hints.media_type = "movie"
        return hints

    def search(self, query: str) -> Dict[str, Any]:
        """
        Searches titles, collections and companies for a query.

        Returns:
            {"results": [...], "collections": [...], "companies": [...],
             "play": MediaRef|None}. "play" is set when the query names a
            specific episode (e.g. "Dark S02E03") and a matching show was found.
        """
        query = (query or "").strip()
        if not query:
            return {"results": [], "collections": [], "companies": [], "play": None}

        key = make_cache_key("/search", {"query": query.lower()})
        cached = self.cache.get(key)
        if cached is not None:
            return cached.data

        hints = self.guess_hints(query)
        if hints.media_type:
            page = self.provider.search(hints.title, year=hints.year, media_type=hints.media_type)
        else:
            page = self.provider.search(query)
        results = dedupe_items(page["results"])

        collections: List[Dict[str, Any]] = []
        companies: List[Dict[str, Any]] = []
        try:
            collections = self.provider.search_collections(query)
            companies = self.provider.search_companies(query)
        except FetchError as e:
            print(f"DEBUG CatalogService.search: secondary search failed: {e}")

        play = None
        if hints.media_type == "tv" and hints.episode and results:
            play = MediaRef("tv", int(results[0]["id"]), hints.season or 1, hints.episode)

        data = {"results": results, "collections": collections, "companies": companies, "play": play}
        self.cache.put(key, MetadataCacheEntry(data=data, items=results, page=1, exhausted=True))
        return data

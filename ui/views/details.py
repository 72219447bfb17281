from typing import Any, Callable, Dict, Optional

import streamlit as st

from streamvault.config import EPISODES_PAGE_SIZE
from streamvault.domain import MediaRef
from streamvault.errors import AllStrategiesFailed, FetchError, NotFound
from streamvault.repositories.sqlite_repository import LIKES, WATCHLIST
from streamvault.routes import make_short_code, watch_route
from streamvault.utils import format_seconds_to_human_readable
from ui.components.cards import render_grid
from ui.utils import ROUTE_PARAM, navigate, text, year_of


def load_with_retry(loader: Callable[[bool], Dict[str, Any]], what: str) -> Optional[Dict[str, Any]]:
    """
    Runs a catalog loader, showing an error with a retry button when it fails.
    The loader receives refresh=True on retry so the cache is bypassed.
    """
    retry_key = f"retry_{what}"
    try:
        return loader(st.session_state.pop(retry_key, False))
    except NotFound:
        st.info(f"This {what} could not be found.")
    except AllStrategiesFailed as e:
        st.error(f"Could not reach the catalog ({e.last_error or e}).")
        if st.button("Retry", key=f"btn_{retry_key}"):
            st.session_state[retry_key] = True
            st.rerun()
    except FetchError as e:
        st.error(f"Could not load this {what}: {e}")
    return None


def render_share_link(media_type: str, media_id: int):
    code = make_short_code(media_type, media_id)
    st.caption("Share link")
    st.code(f"?{ROUTE_PARAM}=/s/{code}", language=None)


def render_list_toggles(app, details: Dict[str, Any], media_type: str):
    library = app.library
    media_id = int(details["id"])
    c_watch, c_like = st.columns(2)
    with c_watch:
        saved = library.contains(WATCHLIST, media_type, media_id)
        if st.button("✓ In Watchlist" if saved else "+ Watchlist", use_container_width=True):
            library.toggle(WATCHLIST, details, media_type)
            st.rerun()
    with c_like:
        liked = library.contains(LIKES, media_type, media_id)
        if st.button("♥ Liked" if liked else "♡ Like", use_container_width=True):
            library.toggle(LIKES, details, media_type)
            st.rerun()


def render_episodes(app, tv_id: int, details: Dict[str, Any]):
    seasons = [s for s in details.get("seasons") or [] if (s.get("episode_count") or 0) > 0]
    if not seasons:
        return
    st.markdown('<div class="section-header">Episodes</div>', unsafe_allow_html=True)

    # Specials (season 0) are listed last
    seasons.sort(key=lambda s: (s.get("season_number") == 0, s.get("season_number") or 0))
    labels = {s["season_number"]: s.get("name") or f"Season {s['season_number']}" for s in seasons}
    season_number = st.selectbox("Season", list(labels), format_func=labels.get, key=f"season_{tv_id}")

    season = load_with_retry(lambda refresh: app.catalog.get_season_details(tv_id, season_number, refresh),
                             "season")
    if not season:
        return

    episodes = season.get("episodes") or []
    shown_key = f"episodes_shown_{tv_id}_{season_number}"
    shown = st.session_state.get(shown_key, EPISODES_PAGE_SIZE)
    for episode in episodes[:shown]:
        number = episode.get("episode_number")
        runtime = episode.get("runtime")
        col_info, col_play = st.columns([0.8, 0.2])
        with col_info:
            meta = format_seconds_to_human_readable(runtime * 60) if runtime else ""
            st.markdown(f"""<div class="episode-row">
<div class="card-title">{number}. {text(episode.get("name"))}</div>
<div class="description-preview">{text(episode.get("overview"))}</div>
<div class="stats-row"><span>{meta}</span></div>
</div>""", unsafe_allow_html=True)
        with col_play:
            if st.button("▶", key=f"ep_{tv_id}_{season_number}_{number}", use_container_width=True):
                navigate(watch_route(MediaRef("tv", tv_id, season_number, number)))

    if shown < len(episodes):
        if st.button("Show more episodes", use_container_width=True):
            st.session_state[shown_key] = shown + EPISODES_PAGE_SIZE
            st.rerun()


def render_details_page(app, media_type: str, media_id: int):
    """Renders a movie or TV show: overview, play, lists, episodes and related titles."""
    details = load_with_retry(lambda refresh: app.catalog.get_details(media_type, media_id, refresh), "title")
    if not details:
        return

    provider = app.catalog.provider
    backdrop = provider.get_backdrop_url(details.get("backdrop_path"))
    if backdrop:
        st.markdown(f'<div class="backdrop"><img src="{backdrop}" alt="" /></div>', unsafe_allow_html=True)

    title = details.get("title") or details.get("name") or ""
    genres = "".join(f'<span class="genre-tag">{text(g.get("name"))}</span>' for g in details.get("genres") or [])
    st.markdown(f'<div class="main-header">{text(title)}</div>', unsafe_allow_html=True)
    st.markdown(f"""<div class="badge-container">
<span class="badge b-year">{year_of(details)}</span>
<span class="rating-badge">★ {float(details.get("vote_average") or 0):.1f}</span>
</div>
<div class="genre-container">{genres}</div>
<p class="overview">{text(details.get("overview"))}</p>""", unsafe_allow_html=True)

    if st.button("▶ Play", type="primary"):
        record = app.progress_store.get(media_type, media_id)
        if record is not None:
            navigate(watch_route(record.media_ref))
        elif media_type == "tv":
            navigate(watch_route(MediaRef("tv", media_id, 1, 1)))
        else:
            navigate(watch_route(MediaRef("movie", media_id)))

    render_list_toggles(app, details, media_type)
    render_share_link(media_type, media_id)

    if media_type == "tv":
        render_episodes(app, media_id, details)

    cast = (details.get("credits") or {}).get("cast") or []
    if cast:
        st.markdown('<div class="section-header">Cast</div>', unsafe_allow_html=True)
        render_grid([dict(c, media_type="person") for c in cast[:10]], app.catalog, f"cast_{media_id}")

    try:
        works = app.catalog.get_actor_credits(details)
    except FetchError as e:
        print(f"DEBUG render_details_page: actor credits unavailable: {e}")
        works = []
    if works:
        st.markdown(f'<div class="section-header">More with {text(cast[0].get("name"))}</div>',
                    unsafe_allow_html=True)
        render_grid(works[:10], app.catalog, f"actor_{media_id}")

    similar = (details.get("similar") or {}).get("results") or []
    if similar:
        st.markdown('<div class="section-header">More Like This</div>', unsafe_allow_html=True)
        render_grid([dict(s, media_type=s.get("media_type") or media_type) for s in similar[:10]],
                    app.catalog, f"similar_{media_id}")


def render_person_page(app, person_id: int):
    person = load_with_retry(lambda refresh: app.catalog.get_person_details(person_id, refresh), "person")
    if not person:
        return
    st.markdown(f'<div class="main-header">{text(person.get("name"))}</div>', unsafe_allow_html=True)
    if person.get("biography"):
        st.markdown(f'<p class="overview">{text(person["biography"])}</p>', unsafe_allow_html=True)
    render_share_link("person", person_id)

    try:
        credits = app.catalog.get_person_works(person_id, limit=30)
    except FetchError as e:
        st.error(f"Could not load credits: {e}")
        return
    st.markdown('<div class="section-header">Known For</div>', unsafe_allow_html=True)
    render_grid(credits, app.catalog, f"person_{person_id}")


def render_collection_page(app, collection_id: int):
    collection = load_with_retry(lambda refresh: app.catalog.get_collection_details(collection_id, refresh),
                                 "collection")
    if not collection:
        return
    st.markdown(f'<div class="main-header">{text(collection.get("name"))}</div>', unsafe_allow_html=True)
    if collection.get("overview"):
        st.markdown(f'<p class="overview">{text(collection["overview"])}</p>', unsafe_allow_html=True)
    render_share_link("collection", collection_id)

    parts = sorted(collection.get("parts") or [], key=lambda p: p.get("release_date") or "9999")
    render_grid([dict(p, media_type=p.get("media_type") or "movie") for p in parts],
                app.catalog, f"collection_{collection_id}")

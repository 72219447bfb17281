from typing import Any, Dict, List

import streamlit as st

from streamvault.domain import WatchProgressRecord
from streamvault.routes import details_route, watch_route
from streamvault.utils import format_time_left
from ui.utils import navigate, text, year_of

GRID_COLUMNS = 5


def render_poster_card(item: Dict[str, Any], poster_url: str, key: str):
    """Renders a single catalog title: poster, title, rating and an open button."""
    media_type = item.get("media_type") or "movie"
    title = item.get("title") or item.get("name") or "Untitled"

    badges = []
    if year_of(item):
        badges.append(f'<span class="badge b-year">{year_of(item)}</span>')
    if media_type in ("tv", "person", "collection"):
        badges.append(f'<span class="badge b-folder">{media_type.upper()}</span>')
    rating_html = ""
    if item.get("vote_average"):
        rating_html = f'<span class="rating-badge">★ {float(item["vote_average"]):.1f}</span>'

    poster_html = f'<img src="{poster_url}" alt="Poster" />' if poster_url else '<div class="poster-missing"></div>'
    st.markdown(f"""<div class="sv-card">
<div class="card-poster">{poster_html}</div>
<div class="card-title">{text(title)}</div>
<div class="badge-container">{"".join(badges)}{rating_html}</div>
</div>""", unsafe_allow_html=True)

    if st.button("Open", key=f"open_{key}", use_container_width=True):
        navigate(details_route(media_type, int(item["id"])))


def render_grid(items: List[Dict[str, Any]], catalog, key_prefix: str, columns: int = GRID_COLUMNS):
    """Lays catalog items out in rows of poster cards."""
    if not items:
        st.markdown('<div class="empty-state">Nothing here yet</div>', unsafe_allow_html=True)
        return
    for row_start in range(0, len(items), columns):
        cols = st.columns(columns, gap="small")
        for col, item in zip(cols, items[row_start:row_start + columns]):
            with col:
                poster = item.get("poster_path") or item.get("profile_path")
                render_poster_card(item, catalog.provider.get_poster_url(poster),
                                   f"{key_prefix}_{item.get('media_type')}_{item.get('id')}")


def render_progress_card(record: WatchProgressRecord, poster_url: str, library_service):
    """Renders a continue-watching entry with its progress bar and controls."""
    ref = record.media_ref
    k_id = f"{ref.media_type}_{ref.media_id}"

    subtitle = ""
    if ref.is_tv and ref.season is not None and ref.episode is not None:
        subtitle = f'<span class="badge b-season">S{ref.season:02d} · E{ref.episode:02d}</span>'

    progress_pct = record.progress_percent
    poster_html = f'<img src="{poster_url}" alt="Poster" />' if poster_url else '<div class="poster-missing"></div>'
    st.markdown(f"""<div class="sv-card">
<div class="card-poster">{poster_html}</div>
<div class="card-title">{text(record.display.title) or "Untitled"}</div>
<div class="badge-container">{subtitle}</div>
<div class="stats-row"><span class="time-remaining">{format_time_left(record.watched_seconds, record.total_seconds)}</span></div>
<div class="card-progress-container">
<div class="card-progress-fill" style="width: {progress_pct:.1f}%"></div>
</div>
</div>""", unsafe_allow_html=True)

    c_play, c_del = st.columns([3, 1], gap="small")
    with c_play:
        if st.button("Continue", key=f"resume_{k_id}", use_container_width=True):
            navigate(watch_route(ref))
    with c_del:
        if st.button("✕", key=f"dismiss_{k_id}", help="Remove from Continue Watching", use_container_width=True):
            library_service.dismiss(ref.media_id, ref.media_type)
            st.rerun()

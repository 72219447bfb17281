import streamlit as st

from streamvault.config import CONTINUE_WATCHING_LIMIT
from streamvault.errors import FetchError, Unauthorized
from streamvault.routes import details_route, view_all_route, watch_route
from ui.components.cards import GRID_COLUMNS, render_grid, render_progress_card
from ui.utils import navigate, text

HOME_ROWS = [
    "trending",
    "movie_popular",
    "tv_popular",
    "movie_top_rated",
    "tv_top_rated",
    "netflix_tv",
    "prime_video_movies",
    "disney_hotstar_movies",
]


def render_search_results(app, query: str):
    st.markdown(f'<div class="sub-header">Results for “{text(query)}”</div>', unsafe_allow_html=True)
    try:
        found = app.catalog.search(query)
    except FetchError as e:
        st.error(f"Search failed: {e}")
        return

    play = found["play"]
    if play is not None:
        if st.button(f"▶ Play S{play.season:02d}E{play.episode:02d} of the top result", type="primary"):
            navigate(watch_route(play))

    render_grid(found["results"], app.catalog, "search")

    if found["collections"]:
        st.markdown('<div class="section-header">Collections</div>', unsafe_allow_html=True)
        for collection in found["collections"][:GRID_COLUMNS]:
            if st.button(collection.get("name") or "Collection", key=f"col_{collection.get('id')}"):
                navigate(details_route("collection", int(collection["id"])))
    if found["companies"]:
        st.markdown('<div class="section-header">Studios</div>', unsafe_allow_html=True)
        for company in found["companies"][:GRID_COLUMNS]:
            if st.button(company.get("name") or "Studio", key=f"co_{company.get('id')}"):
                navigate(view_all_route(f"company-{company['id']}"))


def render_continue_watching(app):
    records = app.library.continue_watching(CONTINUE_WATCHING_LIMIT)
    if not records:
        return
    st.markdown('<div class="section-header">Continue Watching</div>', unsafe_allow_html=True)
    for row_start in range(0, len(records), GRID_COLUMNS):
        cols = st.columns(GRID_COLUMNS, gap="small")
        for col, record in zip(cols, records[row_start:row_start + GRID_COLUMNS]):
            with col:
                render_progress_card(record, app.catalog.provider.get_poster_url(record.display.poster_path),
                                     app.library)


def render_category_row(app, category_id: str):
    try:
        items = app.catalog.category_items(category_id)
    except Unauthorized:
        raise
    except FetchError as e:
        print(f"DEBUG render_category_row: {category_id} unavailable: {e}")
        return

    col_title, col_more = st.columns([0.8, 0.2])
    with col_title:
        st.markdown(f'<div class="section-header">{text(app.catalog.category_title(category_id))}</div>',
                    unsafe_allow_html=True)
    with col_more:
        if st.button("View all", key=f"more_{category_id}", use_container_width=True):
            navigate(view_all_route(category_id))
    render_grid(items[:GRID_COLUMNS], app.catalog, f"row_{category_id}")


def render_home_page(app):
    """Renders the landing page: search results or continue watching plus category rows."""
    query = (st.session_state.get("search_query") or "").strip()
    if query:
        render_search_results(app, query)
        return

    if not app.catalog.provider.is_configured:
        st.warning("No TMDB API key configured. Set TMDB_API_KEY in your environment or .env file.")

    render_continue_watching(app)
    try:
        for category_id in HOME_ROWS:
            render_category_row(app, category_id)
    except Unauthorized:
        st.error("The catalog rejected the API key. Check TMDB_API_KEY.")

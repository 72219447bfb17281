import streamlit as st

from streamvault.repositories.sqlite_repository import LIKES, WATCHLIST
from ui.components.cards import render_grid

LIST_TITLES = {
    WATCHLIST: ("Watchlist.", "Saved for later"),
    LIKES: ("Liked.", "Titles you liked"),
}


def render_list_page(app, list_name: str):
    """Renders the watchlist or the liked titles."""
    title, subtitle = LIST_TITLES[list_name]
    items = app.library.list_items(list_name)
    st.markdown(f'<div class="main-header">{title}</div>', unsafe_allow_html=True)
    st.markdown(f'<div class="sub-header">{subtitle} • {len(items)} items</div>', unsafe_allow_html=True)

    if not items:
        st.info("Nothing saved yet. Use the buttons on a title's page to add it here.")
        return

    render_grid([
        {
            "id": item.media_id,
            "media_type": item.media_type,
            "title": item.title,
            "poster_path": item.poster_path,
            "vote_average": item.vote_average,
            "release_date": item.release_date,
        }
        for item in items
    ], app.catalog, list_name)

import streamlit as st

from ui.utils import current_route, navigate

PAGES = [
    ("Home", "/"),
    ("Watchlist", "/watchlist"),
    ("Liked", "/liked"),
    ("Settings", "/settings"),
]


def render_sidebar():
    """Renders the sidebar navigation and the search box."""
    route = current_route()
    with st.sidebar:
        st.markdown('<div class="main-header">StreamVault.</div>', unsafe_allow_html=True)

        for label, target in PAGES:
            if st.button(label, use_container_width=True,
                         type="primary" if route == target else "secondary"):
                navigate(target)

        st.markdown("---")

        st.text_input("Search", key="search_query", placeholder="Titles, people, \"Show S01E03\"...")
        if st.session_state.get("search_query") and route != "/":
            if st.button("Show results", use_container_width=True):
                navigate("/")

import os
from html import escape
from typing import Optional

import streamlit as st

from streamvault.routes import HOME

ROUTE_PARAM = "route"
STYLES_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "styles.css")


def load_css(file_name: str = STYLES_PATH, accent_color: Optional[str] = None):
    """Injects the app stylesheet, with the user's accent color as a CSS variable."""
    with open(file_name, encoding="utf-8") as f:
        css = f.read()
    if accent_color:
        css = f"{css}\n:root {{ --accent: {accent_color}; }}"
    st.markdown(f"<style>{css}</style>", unsafe_allow_html=True)


def current_route() -> str:
    return st.query_params.get(ROUTE_PARAM, HOME) or HOME


def set_route(route: str):
    """Points the browser URL at a route without interrupting the current run."""
    if current_route() != route:
        st.query_params[ROUTE_PARAM] = route


def navigate(route: str):
    """Switches page: updates the URL and reruns the script."""
    set_route(route)
    st.rerun()


def text(value) -> str:
    """HTML-escapes catalog text before it goes into markdown blocks."""
    return escape(str(value or ""))


def year_of(item: dict) -> str:
    date = item.get("release_date") or item.get("first_air_date") or ""
    return date[:4]

import streamlit as st

from streamvault.app_context import AppContext
from streamvault.errors import Unauthorized
from streamvault.repositories.sqlite_repository import LIKES, WATCHLIST
from streamvault.routes import media_ref_from_route, parse_route, resolve_short_code
from ui.components.sidebar import render_sidebar
from ui.utils import current_route, load_css, navigate
from ui.views.browse import render_browse_page
from ui.views.details import render_collection_page, render_details_page, render_person_page
from ui.views.home import render_home_page
from ui.views.lists import render_list_page
from ui.views.settings import render_settings_page
from ui.views.watch import render_watch_page, stop_active_session

# === CONSTANTS & CONFIGURATION ===
PAGE_TITLE = "StreamVault"
PAGE_ICON = "🎬"


@st.cache_resource
def get_app() -> AppContext:
    return AppContext()


# === MAIN ENTRY POINT ===
def main():
    st.set_page_config(page_title=PAGE_TITLE, page_icon=PAGE_ICON, layout="wide",
                       initial_sidebar_state="expanded")
    app = get_app()
    load_css(accent_color=app.library.accent_color)

    route = parse_route(current_route())
    if route.page == "shared":
        navigate(resolve_short_code(route.params["code"]))

    if route.page != "watch":
        stop_active_session()

    render_sidebar()

    try:
        if route.page == "watch":
            render_watch_page(app, media_ref_from_route(route))
        elif route.page == "details":
            render_details_page(app, route.params["media_type"], int(route.params["media_id"]))
        elif route.page == "person":
            render_person_page(app, int(route.params["media_id"]))
        elif route.page == "collection":
            render_collection_page(app, int(route.params["media_id"]))
        elif route.page == "browse":
            render_browse_page(app, route.params["category_id"])
        elif route.page == "watchlist":
            render_list_page(app, WATCHLIST)
        elif route.page == "liked":
            render_list_page(app, LIKES)
        elif route.page == "settings":
            render_settings_page(app)
        else:
            render_home_page(app)
    except Unauthorized:
        st.error("The catalog rejected the API key. Check TMDB_API_KEY in your environment or .env file.")


if __name__ == "__main__":
    main()

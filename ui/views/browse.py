import streamlit as st

from streamvault.errors import FetchError
from ui.components.cards import render_grid
from ui.utils import text


def render_browse_page(app, category_id: str):
    """Renders a "view all" list with incremental loading."""
    catalog = app.catalog
    try:
        items = catalog.category_items(category_id)
    except ValueError:
        st.info("This list does not exist.")
        return
    except FetchError as e:
        st.error(f"Could not load this list: {e}")
        if st.button("Retry"):
            catalog.load_category(category_id, refresh=True)
            st.rerun()
        return

    st.markdown(f'<div class="main-header">{text(catalog.category_title(category_id))}</div>',
                unsafe_allow_html=True)
    st.markdown(f'<div class="sub-header">{len(items)} titles</div>', unsafe_allow_html=True)
    render_grid(items, catalog, f"browse_{category_id}")

    if not catalog.load_category(category_id).exhausted:
        if st.button("Load more", use_container_width=True):
            try:
                catalog.load_more(category_id)
            except FetchError as e:
                st.error(f"Could not load more: {e}")
                return
            st.rerun()

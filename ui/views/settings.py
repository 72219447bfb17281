import streamlit as st

from streamvault.config import DEFAULT_ACCENT_COLOR


def render_settings_page(app):
    """Renders preferences: accent color and data reset."""
    st.markdown('<div class="main-header">Settings.</div>', unsafe_allow_html=True)

    library = app.library
    st.markdown('<div class="section-header">Appearance</div>', unsafe_allow_html=True)
    color = st.color_picker("Accent color", value=library.accent_color)
    col_save, col_reset = st.columns(2)
    with col_save:
        if st.button("Save color", use_container_width=True):
            library.set_accent_color(color.upper())
            st.rerun()
    with col_reset:
        if st.button("Reset to default", use_container_width=True):
            library.set_accent_color(DEFAULT_ACCENT_COLOR)
            st.rerun()

    st.markdown('<div class="section-header">Data</div>', unsafe_allow_html=True)
    if st.session_state.get("confirm_clear"):
        st.warning("This removes continue watching, your watchlist and liked titles.")
        c_yes, c_no = st.columns(2)
        with c_yes:
            if st.button("Yes, clear everything", type="primary", use_container_width=True):
                library.clear_all_data()
                app.cache.clear()
                st.session_state.pop("confirm_clear", None)
                st.rerun()
        with c_no:
            if st.button("Cancel", use_container_width=True):
                st.session_state.pop("confirm_clear", None)
                st.rerun()
    elif st.button("Clear all data", use_container_width=True):
        st.session_state["confirm_clear"] = True
        st.rerun()

import streamlit as st

from streamvault.domain import MediaRef
from streamvault.routes import details_route
from streamvault.services.playback import PlaybackSessionController, SessionState
from ui.components.player import player_frame
from ui.utils import navigate, set_route, text

SESSION_KEY = "playback_controller"
SEEK_STEP_SECONDS = 10


def stop_active_session():
    """Tears down the playback session, if any. Called whenever the watch page is left."""
    controller = st.session_state.pop(SESSION_KEY, None)
    if controller is not None:
        controller.stop()


def get_session(app, media_ref: MediaRef) -> PlaybackSessionController:
    """
    Returns the controller for media_ref, reusing the running one when the route
    is where it already is (e.g. after it followed an in-player episode change).
    """
    controller = st.session_state.get(SESSION_KEY)
    if controller is not None and controller.state is not SessionState.TERMINATED \
            and controller.media_ref == media_ref:
        return controller

    stop_active_session()
    controller = app.create_session(media_ref, navigate=set_route)
    controller.start()
    st.session_state[SESSION_KEY] = controller
    return controller


def render_watch_page(app, media_ref: MediaRef):
    """Renders the player and the playback controls for one movie or episode."""
    controller = get_session(app, media_ref)

    batch = player_frame(
        controller.embed_url,
        surface_key=f"{controller.surface_ref.media_type}:{controller.surface_ref.media_id}:"
                    f"{controller.surface_ref.season}:{controller.surface_ref.episode}",
        channel=controller.player.channel,
        commands=controller.player.pending_commands(),
    )
    if batch is not None:
        controller.player.receive_batch(batch)

    ref = controller.media_ref
    title = controller.session.display.title
    if ref.is_tv:
        title = f"{title} · S{ref.season:02d}E{ref.episode:02d}"
    st.markdown(f'<div class="sub-header">{text(title)}</div>', unsafe_allow_html=True)

    c_back, c_skip, c_next, c_fwd = st.columns(4)
    with c_back:
        st.button(f"⏪ {SEEK_STEP_SECONDS}s", use_container_width=True,
                  on_click=controller.seek, args=(-SEEK_STEP_SECONDS,))
    with c_skip:
        if controller.show_skip_intro:
            st.button("Skip Intro", type="primary", use_container_width=True,
                      on_click=controller.handle_skip_intro)
    with c_next:
        if ref.is_tv and controller.show_next_episode:
            st.button("Next Episode ▶", type="primary", use_container_width=True,
                      on_click=controller.handle_next_episode)
    with c_fwd:
        st.button(f"{SEEK_STEP_SECONDS}s ⏩", use_container_width=True,
                  on_click=controller.seek, args=(SEEK_STEP_SECONDS,))

    if st.button("← Back to details"):
        stop_active_session()
        navigate(details_route(ref.media_type, ref.media_id))

import os
from typing import Any, Dict, List, Optional

import streamlit.components.v1 as components

_FRONTEND_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "player_frontend")
_player_component = components.declare_component("streamvault_player", path=_FRONTEND_DIR)

PLAYER_HEIGHT = 540


def player_frame(embed_url: str, surface_key: str, channel: str, commands: List[Dict[str, Any]],
                 height: int = PLAYER_HEIGHT, key: str = "player") -> Optional[Dict[str, Any]]:
    """
    Hosts the embedded player and relays messages both ways.

    The iframe is only reloaded when surface_key changes. Commands are
    forwarded to the player once each; ids restart when channel changes.

    Returns:
        The latest {"token", "seq", "channel", "ack", "messages"} batch, where
        ack is the highest command id forwarded on channel, or None before
        the first one arrives.
    """
    return _player_component(
        src=embed_url,
        surface_key=surface_key,
        channel=channel,
        commands=commands,
        height=height,
        key=key,
        default=None,
    )

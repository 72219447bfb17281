from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

from streamvault.config import DEFAULT_ACCENT_COLOR, PLAYER_BASE_URL
from streamvault.domain import MediaRef
from streamvault.interfaces import IPlayerDriver, MessageListener


class EmbedPlayerDriver(IPlayerDriver):
    """
    Message boundary to an embedded third-party web player.

    Outbound commands are queued with increasing ids so the page hosting the
    iframe can forward each one exactly once. Inbound messages arrive in
    batches from the host page and are dispatched in arrival order. A batch
    tagged with this driver's channel also acknowledges the highest command id
    forwarded so far, and acknowledged commands leave the outbox.
    """

    def __init__(self, base_url: str = PLAYER_BASE_URL, transport: Optional[Callable[[dict], None]] = None):
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.request_id_counter = 0
        self.outbox: List[Dict[str, Any]] = []
        self._listeners: List[MessageListener] = []
        self._last_batch_seq = -1
        self._batch_token: Any = None
        self.channel = str(id(self))

    def embed_url(self, media_ref: MediaRef, accent_color: str = DEFAULT_ACCENT_COLOR) -> str:
        params = {
            "color": (accent_color or DEFAULT_ACCENT_COLOR).lstrip("#"),
            "overlay": "true",
            "autoplayNextEpisode": "true",
            "episodeSelector": "true",
        }
        if media_ref.is_tv:
            season = media_ref.season or 1
            episode = media_ref.episode or 1
            params["nextEpisode"] = "true"
            return f"{self.base_url}/tv/{media_ref.media_id}/{season}/{episode}?{urlencode(params)}"
        return f"{self.base_url}/movie/{media_ref.media_id}?{urlencode(params)}"

    # === Outbound ===

    def post_message(self, message: dict) -> None:
        self.request_id_counter += 1
        self.outbox.append({"id": self.request_id_counter, "payload": message})
        if self.transport is not None:
            self.transport(message)

    def pending_commands(self, after_id: int = 0) -> List[Dict[str, Any]]:
        """Commands queued after the given id, oldest first."""
        return [command for command in self.outbox if command["id"] > after_id]

    def acknowledge(self, command_id: int) -> None:
        """Drops commands up to and including command_id."""
        self.outbox = [command for command in self.outbox if command["id"] > command_id]

    # === Inbound ===

    def add_listener(self, listener: MessageListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: MessageListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def dispatch(self, raw: Any) -> None:
        """Delivers one raw message to every listener."""
        for listener in list(self._listeners):
            try:
                listener(raw)
            except Exception as e:
                print(f"Error in player message listener: {e}")

    def receive_batch(self, batch: Any) -> int:
        """
        Dispatches a {"token": str, "seq": n, "messages": [...]} batch from the host page.
        Batches already seen (same or lower seq) are ignored. An optional
        "ack" is honored only when "channel" matches this driver.

        Returns:
            Number of messages dispatched.
        """
        if not isinstance(batch, dict):
            return 0
        seq = batch.get("seq")
        messages = batch.get("messages")
        if not isinstance(seq, int) or isinstance(seq, bool) or not isinstance(messages, list):
            return 0
        # A reloaded host page restarts its numbering under a new token
        token = batch.get("token")
        if token != self._batch_token:
            self._batch_token = token
            self._last_batch_seq = -1
        if seq <= self._last_batch_seq:
            return 0
        self._last_batch_seq = seq
        ack = batch.get("ack")
        if batch.get("channel") == self.channel and isinstance(ack, int) and not isinstance(ack, bool):
            self.acknowledge(ack)
        for raw in messages:
            self.dispatch(raw)
        return len(messages)

from shared.logging.logger import get_logger
from shared.storage.kv import KeyValueStore, StorageUnavailable

log = get_logger("widget.preferences", runtime="widget")

BGM_MUTED_KEY = "bgmMuted"


class BgmPreference:
    """
    Persisted mute toggle for the page's background music.

    Only the preference lives here; the audio element is the page's concern.
    An unreadable store means "not muted", an unwritable one keeps the
    in-memory value for the session.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._muted = self._load()

    def _load(self) -> bool:
        try:
            saved = self.store.get(BGM_MUTED_KEY)
        except StorageUnavailable:
            return False
        return saved == "true"

    def _persist(self) -> None:
        try:
            self.store.set(BGM_MUTED_KEY, "true" if self._muted else "false")
        except StorageUnavailable as e:
            log.debug(f"BGM preference not persisted: {e}")

    def is_muted(self) -> bool:
        return self._muted

    def toggle(self) -> bool:
        self._muted = not self._muted
        self._persist()
        return self._muted

    def playback_blocked(self) -> None:
        # Unmuting failed to start playback; fall back to muted.
        self._muted = True
        self._persist()

    def label(self) -> str:
        return "BGM OFF" if self._muted else "BGM ON"

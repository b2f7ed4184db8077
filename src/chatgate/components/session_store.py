"""
In-memory session state for the gateway.

Holds per-user language preferences and the append-only message history.
Nothing survives a restart.
"""

from collections.abc import Callable
import logging
import threading

from .schemas import AudioHistoryEntry, TextHistoryEntry


logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"


class SessionStore:
    """
    Language preferences and message history.

    A single lock serializes writers; it is held only for the dict/list
    operation itself.
    """

    def __init__(self, default_language: str = DEFAULT_LANGUAGE) -> None:
        self.default_language = default_language
        self._languages: dict[str, str] = {}
        self._history: list[TextHistoryEntry | AudioHistoryEntry] = []
        self._lock = threading.Lock()

    def set_language(self, user_id: str, language: str) -> None:
        """Store a user's preferred language. Last write wins."""
        with self._lock:
            self._languages[user_id] = language
        logger.info("User %s language set to: %s", user_id, language)

    def get_preference(self, user_id: str) -> str | None:
        """Return the stored preference, or None if the user never set one."""
        with self._lock:
            return self._languages.get(user_id)

    def get_language(self, user_id: str) -> str:
        """Return the stored preference, or the default language."""
        return self.get_preference(user_id) or self.default_language

    def append_history(self, entry: TextHistoryEntry | AudioHistoryEntry) -> None:
        with self._lock:
            self._history.append(entry)

    def query_history(
        self, user_id: str | None = None, limit: int = 50
    ) -> list[TextHistoryEntry | AudioHistoryEntry]:
        """
        Return the most recent ``limit`` entries, oldest first.

        Args:
            user_id: Only return entries for this user when given
            limit: Maximum number of entries (must be positive)

        Raises:
            ValueError: If limit is not a positive integer
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"limit must be a positive integer (got {limit!r})")

        matches: Callable[[TextHistoryEntry | AudioHistoryEntry], bool]
        if user_id:
            matches = lambda entry: entry.user_id == user_id  # noqa: E731
        else:
            matches = lambda _entry: True  # noqa: E731

        with self._lock:
            snapshot = list(self._history)

        # Newest first, then restore insertion order.
        selected = []
        for entry in reversed(snapshot):
            if matches(entry):
                selected.append(entry)
                if len(selected) == limit:
                    break
        selected.reverse()
        return selected

    def history_size(self) -> int:
        with self._lock:
            return len(self._history)

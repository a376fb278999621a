"""Session-scoped clipboard slot for copy/paste."""

from loguru import logger


class Clipboard:
    """Holds the id of the last copied element.

    One instance lives for an editing session and is handed to every editor
    it opens, so a copy survives loading another page. Paste reads without
    consuming.
    """

    def __init__(self) -> None:
        self._element_id: str | None = None

    def get(self) -> str | None:
        return self._element_id

    def set(self, element_id: str) -> None:
        logger.debug("Clipboard holds {}", element_id)
        self._element_id = element_id

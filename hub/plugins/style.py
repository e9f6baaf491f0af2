"""Style registry - the single optional custom stylesheet."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from hub.errors import PersistenceError, RemoteFetchError, RequestError
from hub.models.messages import MessageType, Outcome
from hub.models.plugin import Style
from hub.plugins.store import StoreWriteError, WriteStage, atomic_write_text
from hub.utils.fetcher import fetch_text

logger = logging.getLogger(__name__)


class StyleRegistry:
    """Sole writer of the stylesheet file (cardinality 0..1)."""

    def __init__(self, style_file: Path):
        self.style_file = style_file
        self._lock = asyncio.Lock()

    def exists(self) -> bool:
        return self.style_file.is_file()

    def style_path(self) -> Optional[Path]:
        return self.style_file if self.exists() else None

    async def get_style(self) -> Outcome:
        style = Style.served() if self.exists() else Style()
        return Outcome.reply(MessageType.GET_STYLE, style.to_wire())

    async def set_style(self, data: Any) -> Outcome:
        """Replace the stylesheet with inline CSS or the body of a URL.

        Args:
            data: ``{"inline": <css>}`` or ``{"url": <stylesheet url>}``
        """
        try:
            style = Style.model_validate(data)
        except ValidationError as e:
            raise RequestError("Failed to parse data.") from e

        if style.inline is not None:
            css = style.inline
        elif style.url is not None:
            try:
                css = await fetch_text(style.url)
            except RemoteFetchError as e:
                raise RemoteFetchError("Failed to get style.") from e
        else:
            raise RequestError("Failed to get style.")

        async with self._lock:
            try:
                self.style_file.parent.mkdir(parents=True, exist_ok=True)
                atomic_write_text(self.style_file, css)
            except StoreWriteError as e:
                logger.error(f"[Style] Cannot write {self.style_file}: {e}")
                if e.stage == WriteStage.CREATE:
                    raise PersistenceError("Failed to open style file.") from e
                raise PersistenceError("Failed to write style.") from e
            except OSError as e:
                logger.error(f"[Style] Cannot create {self.style_file.parent}: {e}")
                raise PersistenceError("Failed to open style file.") from e

        logger.info(f"[Style] Stylesheet updated ({len(css)} chars)")
        return Outcome.publish(MessageType.SET_STYLE, Style.served().to_wire())

    async def remove_style(self) -> Outcome:
        async with self._lock:
            try:
                self.style_file.unlink()
            except OSError as e:
                logger.warning(f"[Style] Cannot remove {self.style_file}: {e}")
                raise PersistenceError("Failed to remove style.") from e

        logger.info("[Style] Stylesheet removed")
        return Outcome.publish(MessageType.REMOVE_STYLE, None)

"""Plugin registry - CRUD over the directory-per-plugin store."""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from hub.constants import META_FILE, SCRIPT_FILE
from hub.errors import PersistenceError, RemoteFetchError, RequestError
from hub.models.messages import MessageType, Outcome
from hub.models.plugin import ConfigValue, PluginMeta, is_safe_name
from hub.plugins.store import (
    PluginTransaction,
    StoreWriteError,
    WriteStage,
    atomic_write_text,
    read_json,
    remove_tree,
)
from hub.utils.fetcher import fetch_json, fetch_text

logger = logging.getLogger(__name__)

_config_values = TypeAdapter(List[ConfigValue])


class PluginRegistry:
    """Sole writer of ``plugins/<name>/``.

    Query operations return unicast outcomes; mutations return broadcast
    outcomes carrying the canonical post-mutation value. Failures raise a
    ``HubError`` whose message is sent back to the requester.

    Mutations on the same plugin name are serialised with a per-name lock.
    """

    def __init__(self, plugins_dir: Path):
        self.plugins_dir = plugins_dir
        self._locks: Dict[str, asyncio.Lock] = {}
        self._holders: Dict[str, int] = {}

    @asynccontextmanager
    async def _mutation(self, name: str) -> AsyncIterator[None]:
        """Hold the lock for ``name``; the entry is dropped once nobody holds or awaits it."""
        lock = self._locks.setdefault(name, asyncio.Lock())
        self._holders[name] = self._holders.get(name, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[name] -= 1
            if not self._holders[name]:
                del self._holders[name]
                del self._locks[name]

    def _plugin_dir(self, name: str) -> Path:
        return self.plugins_dir / name

    def _load_meta(self, plugin_dir: Path) -> PluginMeta:
        return PluginMeta.model_validate(read_json(plugin_dir / META_FILE))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all(self) -> List[PluginMeta]:
        """Load every plugin whose meta record is readable, in name order.

        Entries with a missing or corrupt ``meta.json`` are skipped.
        """
        if not self.plugins_dir.is_dir():
            return []

        plugins = []
        for item in sorted(self.plugins_dir.iterdir()):
            if not item.is_dir():
                continue
            try:
                meta = self._load_meta(item)
            except (OSError, ValueError) as e:
                logger.debug(f"[Plugins] Skipping {item.name}: {e}")
                continue
            plugins.append(meta.canonical())
        return plugins

    def get(self, name: str) -> Optional[PluginMeta]:
        if not is_safe_name(name):
            return None
        try:
            return self._load_meta(self._plugin_dir(name)).canonical()
        except (OSError, ValueError):
            return None

    async def list_plugins(self) -> Outcome:
        plugins = self.get_all()
        return Outcome.reply(MessageType.LIST_PLUGINS, [p.to_wire() for p in plugins])

    def script_path(self, name: str) -> Optional[Path]:
        """Stored script of a plugin, or None if unsafe or missing."""
        if not is_safe_name(name):
            return None
        path = self._plugin_dir(name) / SCRIPT_FILE
        return path if path.is_file() else None

    def asset_path(self, name: str, filename: str) -> Optional[Path]:
        """A static file shipped inside a plugin directory."""
        if not is_safe_name(name) or not is_safe_name(filename):
            return None
        path = self._plugin_dir(name) / filename
        return path if path.is_file() else None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def _resolve_meta(self, data: Any) -> Any:
        if not isinstance(data, dict):
            raise RequestError("Failed to get meta.")

        url = data.get("url")
        if isinstance(url, str):
            try:
                return await fetch_json(url)
            except RemoteFetchError as e:
                raise RemoteFetchError("Failed to get meta.") from e

        meta = data.get("meta")
        if meta is None:
            raise RequestError("Failed to get meta.")
        return meta

    async def _resolve_script(self, meta: PluginMeta) -> str:
        if meta.script.inline is not None:
            return meta.script.inline
        try:
            return await fetch_text(meta.script.url)
        except RemoteFetchError as e:
            raise RemoteFetchError("Failed to get the script file.") from e

    async def add_plugin(self, data: Any) -> Outcome:
        """Install or replace a plugin.

        Args:
            data: ``{"url": <meta url>}`` or ``{"meta": <PluginMeta object>}``

        Returns:
            Broadcast ``addPlugin`` outcome with the canonical metadata
        """
        raw_meta = await self._resolve_meta(data)

        try:
            meta = PluginMeta.model_validate(raw_meta)
        except ValidationError as e:
            logger.warning(f"[Plugins] Invalid meta: {e}")
            raise RequestError("Failed to parse meta.") from e

        if meta.script.inline is None and meta.script.url is None:
            raise RequestError("Failed to get script.")

        meta = meta.with_defaults()
        script = await self._resolve_script(meta)

        try:
            raw = meta.model_dump_json()
        except ValueError as e:
            raise PersistenceError("Failed to serialize meta.") from e

        plugin_dir = self._plugin_dir(meta.name)
        async with self._mutation(meta.name):
            if plugin_dir.exists():
                try:
                    remove_tree(plugin_dir)
                except OSError as e:
                    logger.error(f"[Plugins] Cannot remove old {meta.name}: {e}")
                    raise PersistenceError("Failed to remove old plugin.") from e
                logger.info(f"[Plugins] Replacing plugin: {meta.name}")

            with PluginTransaction(plugin_dir) as tx:
                try:
                    tx.write(META_FILE, raw)
                except StoreWriteError as e:
                    logger.error(f"[Plugins] Meta write failed for {meta.name}: {e}")
                    if e.stage == WriteStage.CREATE:
                        raise PersistenceError("Failed to create meta file.") from e
                    raise PersistenceError("Failed to write to meta file.") from e

                try:
                    tx.write(SCRIPT_FILE, script)
                except StoreWriteError as e:
                    logger.error(f"[Plugins] Script write failed for {meta.name}: {e}")
                    if e.stage == WriteStage.CREATE:
                        raise PersistenceError("Failed to create script file.") from e
                    raise PersistenceError("Failed to write to script file.") from e

                tx.commit()

        logger.info(f"[Plugins] Added plugin: {meta.name} ({meta.version})")
        return Outcome.publish(MessageType.ADD_PLUGIN, meta.canonical().to_wire())

    async def remove_plugin(self, data: Any) -> Outcome:
        """Delete a plugin directory.

        Args:
            data: ``{"name": <plugin name>}``
        """
        name = data.get("name") if isinstance(data, dict) else None
        if not isinstance(name, str):
            raise RequestError("Failed to get plugin.")
        if not is_safe_name(name):
            raise RequestError("Plugin not found.")

        plugin_dir = self._plugin_dir(name)
        async with self._mutation(name):
            if not plugin_dir.exists():
                raise RequestError("Plugin not found.")
            try:
                remove_tree(plugin_dir)
            except OSError as e:
                logger.error(f"[Plugins] Cannot remove {name}: {e}")
                raise PersistenceError("Failed to remove plugin.") from e

        logger.info(f"[Plugins] Removed plugin: {name}")
        return Outcome.publish(MessageType.REMOVE_PLUGIN, {"name": name})

    async def config_plugin(self, data: Any) -> Outcome:
        """Apply config value overrides to a stored plugin.

        Args:
            data: ``{"name": <plugin name>, "configs": [{"name", "value"}, ...]}``

        Returns:
            Broadcast ``configPlugin`` outcome with the full canonical metadata
        """
        name = data.get("name") if isinstance(data, dict) else None
        if not isinstance(name, str):
            raise RequestError("Failed to get plugin.")

        try:
            overrides = _config_values.validate_python(data.get("configs"))
        except ValidationError as e:
            raise RequestError("Failed to parse configs.") from e

        if not is_safe_name(name):
            raise RequestError("Failed to read meta file.")

        meta_file = self._plugin_dir(name) / META_FILE
        async with self._mutation(name):
            try:
                raw = read_json(meta_file)
            except OSError as e:
                raise RequestError("Failed to read meta file.") from e
            except ValueError as e:
                raise PersistenceError("Failed to parse meta file.") from e

            try:
                meta = PluginMeta.model_validate(raw)
            except ValidationError as e:
                raise PersistenceError("Failed to parse meta file.") from e

            meta = meta.apply(overrides)

            try:
                serialized = meta.model_dump_json()
            except ValueError as e:
                raise PersistenceError("Failed to serialize meta.") from e

            try:
                atomic_write_text(meta_file, serialized)
            except OSError as e:
                logger.error(f"[Plugins] Cannot update meta of {name}: {e}")
                raise PersistenceError("Failed to update meta file.") from e

        logger.info(f"[Plugins] Configured plugin: {name} ({len(overrides)} value(s))")
        return Outcome.publish(MessageType.CONFIG_PLUGIN, meta.canonical().to_wire())

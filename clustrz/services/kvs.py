"""Remote key-value store: one file per key under the store directory.

Values are JSON. Sets and tuples are tagged so they come back as the
same type; dict keys must be strings.
"""

import json
import logging
from typing import TYPE_CHECKING, Any, Final

from clustrz.exceptions import RemoteCommandError
from clustrz.utils.shell import build_command, join_path
from clustrz.utils.validation import validate_key

if TYPE_CHECKING:
    from clustrz.config import Config
    from clustrz.models import Node
    from clustrz.services.executors import RemoteExecutor
    from clustrz.services.transfer import FileTransfer

logger = logging.getLogger(__name__)

_SET_TAG: Final[str] = "__set__"
_TUPLE_TAG: Final[str] = "__tuple__"


class _NotFound:
    """Sentinel type returned for keys with no stored value."""

    _instance: "_NotFound | None" = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND: Final = _NotFound()


def _tag(value: Any) -> Any:
    """Rewrite sets and tuples into tagged JSON objects, recursively."""
    if isinstance(value, (set, frozenset)):
        items = sorted(
            (_tag(v) for v in value), key=lambda v: json.dumps(v, sort_keys=True)
        )
        return {_SET_TAG: items}
    if isinstance(value, tuple):
        return {_TUPLE_TAG: [_tag(v) for v in value]}
    if isinstance(value, list):
        return [_tag(v) for v in value]
    if isinstance(value, dict):
        for k in value:
            if not isinstance(k, str):
                raise TypeError(f"Keys must be strings, got {type(k).__name__}: {k!r}")
        return {k: _tag(v) for k, v in value.items()}
    return value


def _untag(obj: dict[str, Any]) -> Any:
    """Turn tagged JSON objects back into frozensets and tuples.

    Decoding runs innermost first, so every set is built frozen; members of
    a set must stay hashable however deeply they are nested.
    """
    if len(obj) == 1:
        if _SET_TAG in obj:
            return frozenset(obj[_SET_TAG])
        if _TUPLE_TAG in obj:
            return tuple(obj[_TUPLE_TAG])
    return obj


def _thaw(value: Any) -> Any:
    """Turn frozensets outside of other sets back into plain sets."""
    if isinstance(value, frozenset):
        return set(value)
    if isinstance(value, tuple):
        return tuple(_thaw(v) for v in value)
    if isinstance(value, list):
        return [_thaw(v) for v in value]
    if isinstance(value, dict):
        return {k: _thaw(v) for k, v in value.items()}
    return value


def dumps(value: Any) -> str:
    """Serialize a value to the store's text format."""
    return json.dumps(_tag(value), sort_keys=True)


def loads(text: str) -> Any:
    """Rebuild a value from the store's text format."""
    return _thaw(json.loads(text, object_hook=_untag))


class RemoteKVStore:
    """Key-value accessor backed by files in ``<base_dir>/kvs/`` on a node.

    There is no locking: concurrent writers to one key race and the last
    write wins.
    """

    def __init__(
        self,
        config: "Config",
        executor: "RemoteExecutor",
        transfer: "FileTransfer",
    ) -> None:
        self.config = config
        self.executor = executor
        self.transfer = transfer

    def path_for(self, key: str) -> str:
        """Remote file path holding ``key``."""
        return join_path(self.config.kvs_dir, validate_key(key))

    async def put(self, node: "Node", key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Raises:
            ValueError: If the key is not a plain file name
            TypeError: If the value cannot be serialized
        """
        path = self.path_for(key)
        text = dumps(value)
        await self.executor.mkdir(node, self.config.kvs_dir)
        await self.transfer.write_text(node, path, text + "\n")
        logger.debug("%s: put %s", node.host, key)

    async def get(self, node: "Node", key: str, default: Any = NOT_FOUND) -> Any:
        """Fetch the value stored under ``key``.

        Args:
            node: Node to read from
            key: Key to read
            default: Returned when nothing is stored (default: NOT_FOUND)

        Returns:
            The stored value, or ``default`` when the key is absent

        Raises:
            RemoteCommandError: If the file exists but cannot be read
            ValueError: If the stored text is not valid JSON
        """
        path = self.path_for(key)
        command = f"LC_ALL=C {build_command('cat', paths=(path,))}"
        result = await self.executor.execute(node, command)

        if not result.ok:
            if "No such file or directory" in result.stderr:
                logger.debug("%s: %s not found", node.host, key)
                return default
            raise RemoteCommandError(node.host, command, result.exit_code, result.stderr)

        return loads(result.stdout)

    async def delete(self, node: "Node", key: str) -> None:
        """Remove ``key``; deleting an absent key is a no-op."""
        await self.executor.remove(node, self.path_for(key))
        logger.debug("%s: deleted %s", node.host, key)

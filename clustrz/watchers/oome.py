"""Out-of-memory watcher.

Polls the last line of an OOME log on each node. When its timestamp is
newer than the watermark stored in the node's key-value store, the
service is restarted and the watermark advanced, so one event triggers
one restart no matter how often the check runs.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from clustrz.exceptions import ParseError
from clustrz.models import ExecResult, Node
from clustrz.services.dispatch import dispatch_all
from clustrz.services.kvs import NOT_FOUND
from clustrz.utils.parser import parse_bash_time

if TYPE_CHECKING:
    from clustrz.services.executors import RemoteExecutor
    from clustrz.services.kvs import RemoteKVStore

logger = logging.getLogger(__name__)


class OOMEState(Enum):
    """Outcome of checking one node."""

    UNKNOWN = "unknown"
    NO_NEW_EVENT = "no_new_event"
    RESTARTED = "restarted"


@dataclass
class WatcherSettings:
    """Where to look for OOMEs and how to react to them."""

    oome_log: str
    restart_command: str
    watermark_key: str = "last-seen-oome"
    initial_watermark: str = "Fri Dec 3 02:22:22 PST 2008"


class OOMEWatcher:
    """Restarts a service on nodes that logged a new OOME."""

    def __init__(
        self,
        settings: WatcherSettings,
        executor: "RemoteExecutor",
        kvs: "RemoteKVStore",
    ) -> None:
        self.settings = settings
        self.executor = executor
        self.kvs = kvs
        self.states: dict[Node, OOMEState] = {}

    def state(self, node: Node) -> OOMEState:
        """Last known state of a node; UNKNOWN before its first check."""
        return self.states.get(node, OOMEState.UNKNOWN)

    async def prepare(self, node: Node) -> None:
        """Seed the node's watermark with the initial (far past) timestamp."""
        await self.kvs.put(node, self.settings.watermark_key, self.settings.initial_watermark)

    async def _watermark(self, node: Node) -> datetime:
        stored = await self.kvs.get(node, self.settings.watermark_key)
        if stored is NOT_FOUND:
            logger.info("%s: no watermark stored, assuming %s", node.host, self.settings.initial_watermark)
            stored = self.settings.initial_watermark
        if not isinstance(stored, str):
            raise ParseError(repr(stored), "Watermark is not a timestamp string")
        return parse_bash_time(stored)

    async def check(self, node: Node) -> OOMEState:
        """Check one node and restart its service on a new OOME.

        Raises:
            ParseError: If the log line or watermark is not a timestamp
            RemoteCommandError: If reading the log or restarting fails
        """
        candidate_text = (await self.executor.last_line(node, self.settings.oome_log)).strip()
        candidate = parse_bash_time(candidate_text)
        watermark = await self._watermark(node)

        if candidate > watermark:
            logger.info("%s: found new OOME: %s", node.host, candidate_text)
            await self.executor.must_succeed(node, self.settings.restart_command)
            logger.info("%s: restarted", node.host)
            await self.kvs.put(node, self.settings.watermark_key, candidate_text)
            logger.info("%s: updated %s to %s", node.host, self.settings.watermark_key, candidate_text)
            await self.executor.log_at(node, f"Restarted due to recent OOME: {candidate_text}")
            state = OOMEState.RESTARTED
        else:
            logger.info("%s: no new OOMEs", node.host)
            await self.executor.log_at(node, "No new OOMEs")
            state = OOMEState.NO_NEW_EVENT

        self.states[node] = state
        return state

    async def check_all(
        self, nodes: Iterable[Node], max_concurrency: int | None = None
    ) -> list[ExecResult]:
        """Check every node concurrently; one node's failure spares the rest."""
        node_list = list(nodes)
        logger.info("Checking %d node(s) for OOMEs", len(node_list))
        return await dispatch_all(self.check, node_list, max_concurrency=max_concurrency)

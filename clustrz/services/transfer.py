"""File transfer between the local machine and nodes."""

import logging
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import asyncssh

from clustrz.exceptions import RemoteCommandError, TransportError
from clustrz.services.connection import open_connection
from clustrz.utils.shell import build_command, quote_path, sftp_path

if TYPE_CHECKING:
    from clustrz.config import Config
    from clustrz.models import Node
    from clustrz.services.executors import RemoteExecutor

logger = logging.getLogger(__name__)


@dataclass
class TransferResult:
    """Result of a file copy."""

    source: str
    destination: str
    bytes_transferred: int = 0


def temp_name(path: str) -> str:
    """Collision-resistant temporary file name beside ``path``."""
    return f"{path}.{secrets.token_hex(8)}.tmp"


class FileTransfer:
    """Copies files to and from nodes and writes remote text files."""

    def __init__(self, config: "Config", executor: "RemoteExecutor") -> None:
        self.config = config
        self.executor = executor

    async def copy_to(self, local_path: str | Path, node: "Node", remote_path: str) -> TransferResult:
        """Upload a local file to a node with SCP.

        Raises:
            FileNotFoundError: If the local file does not exist
            TransportError: If the copy fails
        """
        source = Path(local_path)
        if not source.is_file():
            raise FileNotFoundError(f"Source file not found: {source}")

        size = source.stat().st_size
        async with open_connection(node, self.config) as conn:
            try:
                await asyncssh.scp(str(source), (conn, sftp_path(remote_path)))
            except (OSError, asyncssh.Error) as e:
                raise TransportError(node.host, e) from e

        logger.info("Uploaded %s -> %s:%s (%d bytes)", source, node.target, remote_path, size)
        return TransferResult(
            source=str(source),
            destination=f"{node.target}:{remote_path}",
            bytes_transferred=size,
        )

    async def copy_from(self, node: "Node", remote_path: str, local_path: str | Path) -> TransferResult:
        """Download a file from a node with SCP.

        Raises:
            TransportError: If the copy fails
        """
        destination = Path(local_path)
        async with open_connection(node, self.config) as conn:
            try:
                await asyncssh.scp((conn, sftp_path(remote_path)), str(destination))
            except (OSError, asyncssh.Error) as e:
                raise TransportError(node.host, e) from e

        size = destination.stat().st_size if destination.is_file() else 0
        logger.info("Downloaded %s:%s -> %s (%d bytes)", node.target, remote_path, destination, size)
        return TransferResult(
            source=f"{node.target}:{remote_path}",
            destination=str(destination),
            bytes_transferred=size,
        )

    async def slurp(self, node: "Node", path: str) -> str:
        """Read a whole remote file, trailing newline included.

        Raises:
            RemoteCommandError: If the file cannot be read
        """
        command = build_command("cat", paths=(path,))
        result = await self.executor.execute(node, command)
        if not result.ok:
            raise RemoteCommandError(node.host, command, result.exit_code, result.stderr)
        return result.stdout

    async def write_text(self, node: "Node", path: str, text: str) -> None:
        """Create or overwrite a remote file with ``text`` over SFTP.

        Not atomic: concurrent writers to the same path race.

        Raises:
            TransportError: If the file cannot be written
        """
        async with open_connection(node, self.config) as conn:
            try:
                async with conn.start_sftp_client() as sftp:
                    async with sftp.open(sftp_path(path), "w") as remote_file:
                        await remote_file.write(text)
            except (OSError, asyncssh.Error) as e:
                raise TransportError(node.host, e) from e

        logger.debug("Wrote %d chars to %s:%s", len(text), node.target, path)

    async def _discard(self, node: "Node", path: str) -> None:
        """Best-effort removal of a partially written file."""
        try:
            await self.executor.execute(node, build_command("rm -f", paths=(path,)))
        except TransportError as e:
            logger.warning("%s: could not remove %s: %s", node.host, path, e)

    async def append_text(self, node: "Node", path: str, text: str) -> None:
        """Append ``text`` to a remote file.

        The text is staged in a uniquely named temporary file, then
        concatenated onto the destination; the temporary file is removed
        whether or not the append succeeds.

        Raises:
            TransportError: If the staging write fails
            RemoteCommandError: If the append fails
        """
        staged = temp_name(path)
        try:
            await self.write_text(node, staged, text)
        except TransportError:
            await self._discard(node, staged)
            raise
        await self.executor.must_succeed(
            node,
            f"cat {quote_path(staged)} >> {quote_path(path)}; status=$?; "
            f"rm -f {quote_path(staged)}; exit $status",
        )

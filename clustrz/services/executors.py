"""Remote command execution over SSH."""

import logging
from typing import TYPE_CHECKING

import asyncssh

from clustrz.exceptions import RemoteCommandError, TransportError
from clustrz.models import ProcessInfo, ShellResult
from clustrz.services.connection import open_connection
from clustrz.utils.parser import PS_FORMAT, parse_ps_output
from clustrz.utils.shell import build_command, quote_arg, quote_path

if TYPE_CHECKING:
    from clustrz.config import Config
    from clustrz.models import Node

logger = logging.getLogger(__name__)


def _decode(value: str | bytes | None) -> str:
    """Normalize channel output to text."""
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def trim_newline(text: str) -> str:
    r"""Drop one trailing line ending, either ``\n`` or ``\r\n``."""
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


class RemoteExecutor:
    """Runs shell commands on nodes, one connection per command."""

    def __init__(self, config: "Config") -> None:
        self.config = config

    async def execute(self, node: "Node", command: str) -> ShellResult:
        """Run a command on a node.

        A non-zero exit status is a normal result, not an error.

        Args:
            node: Node to run on
            command: Literal command string for the remote shell

        Returns:
            ShellResult with exit code, stdout and stderr

        Raises:
            TransportError: If the node cannot be reached
        """
        logger.debug("%s $ %s", node.target, command)
        async with open_connection(node, self.config) as conn:
            try:
                result = await conn.run(command, check=False)
            except (OSError, asyncssh.Error) as e:
                raise TransportError(node.host, e) from e

        # None means the remote process died on a signal
        exit_code = result.returncode if result.returncode is not None else -1
        return ShellResult(
            exit_code=exit_code,
            stdout=_decode(result.stdout),
            stderr=_decode(result.stderr),
        )

    async def must_succeed(self, node: "Node", command: str) -> str:
        """Run a command and return its stdout minus one trailing newline.

        Success is decided by exit status alone; output on stderr from a
        command that exits 0 is ignored.

        Raises:
            RemoteCommandError: If the command exits non-zero
            TransportError: If the node cannot be reached
        """
        result = await self.execute(node, command)
        if not result.ok:
            raise RemoteCommandError(node.host, command, result.exit_code, result.stderr)
        return trim_newline(result.stdout)

    async def uptime(self, node: "Node") -> str:
        """Fetch the raw uptime string from a node."""
        return await self.must_succeed(node, "uptime")

    async def ls(self, node: "Node", path: str) -> list[str]:
        """List entry names in a remote directory."""
        output = await self.must_succeed(node, build_command("ls -1", paths=(path,)))
        return output.splitlines()

    async def mkdir(self, node: "Node", path: str) -> None:
        """Create a remote directory and its parents; existing is fine."""
        await self.must_succeed(node, build_command("mkdir -p", paths=(path,)))

    async def remove(self, node: "Node", path: str) -> None:
        """Remove a remote file; a missing file is not an error."""
        await self.must_succeed(node, build_command("rm -f", paths=(path,)))

    async def chmod(self, node: "Node", path: str, mode: str) -> None:
        """Change the mode of a remote file."""
        await self.must_succeed(node, build_command("chmod", mode, paths=(path,)))

    async def fetch_url(self, node: "Node", url: str, path: str) -> None:
        """Have the node download a URL to a local path with wget."""
        await self.must_succeed(
            node, f"wget -q -O {quote_path(path)} {quote_arg(url)}"
        )

    async def tail(self, node: "Node", path: str, lines: int = 1) -> str:
        """Return the last ``lines`` lines of a remote file."""
        if lines < 1:
            raise ValueError(f"lines must be >= 1, got {lines}")
        return await self.must_succeed(node, build_command(f"tail -n {lines}", paths=(path,)))

    async def last_line(self, node: "Node", path: str) -> str:
        """Return the last line of a remote file."""
        return await self.tail(node, path, 1)

    async def ps(self, node: "Node") -> list[ProcessInfo]:
        """Fetch the node user's running processes.

        Raises:
            ParseError: If a line of ps output is malformed
        """
        cmd = f"ps --no-header -u {quote_arg(node.user)} -o {quote_arg(PS_FORMAT)}"
        return parse_ps_output(await self.must_succeed(node, cmd))

    async def is_up(self, node: "Node", pid: int) -> bool:
        """Check whether a process id is alive on the node."""
        result = await self.execute(node, f"ps --no-header -p {int(pid)}")
        return bool(result.stdout.strip())

    async def is_down(self, node: "Node", pid: int) -> bool:
        """Inverse of :meth:`is_up`."""
        return not await self.is_up(node, pid)

    async def log_at(self, node: "Node", message: str) -> None:
        """Append a timestamped line to the node's activity log."""
        cmd = (
            f"{build_command('mkdir -p', paths=(self.config.base_dir,))} && "
            f"printf '%s: %s\\n' \"$(date)\" {quote_arg(message)} "
            f">> {quote_path(self.config.node_log)}"
        )
        await self.must_succeed(node, cmd)

    async def get_log(self, node: "Node") -> str:
        """Read the node's activity log."""
        return await self.must_succeed(node, build_command("cat", paths=(self.config.node_log,)))

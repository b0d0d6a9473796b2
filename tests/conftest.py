"""Shared fixtures: an in-memory stand-in for remote nodes."""

import shlex

import pytest

from clustrz.config import Config
from clustrz.exceptions import RemoteCommandError
from clustrz.models import Node, ShellResult
from clustrz.services.executors import trim_newline


class FakeExecutor:
    """Executor double that serves ``cat`` from an in-memory filesystem."""

    def __init__(self, files: dict[tuple[str, str], str]) -> None:
        self.files = files
        self.commands: list[tuple[str, str]] = []
        self.logs: dict[str, list[str]] = {}
        self.dirs: set[tuple[str, str]] = set()

    async def execute(self, node: Node, command: str) -> ShellResult:
        self.commands.append((node.host, command))
        tokens = shlex.split(command)
        if "cat" in tokens:
            path = tokens[-1]
            if (node.host, path) in self.files:
                return ShellResult(exit_code=0, stdout=self.files[(node.host, path)], stderr="")
            return ShellResult(
                exit_code=1, stdout="", stderr=f"cat: {path}: No such file or directory\n"
            )
        return ShellResult(exit_code=0, stdout="", stderr="")

    async def must_succeed(self, node: Node, command: str) -> str:
        result = await self.execute(node, command)
        if not result.ok:
            raise RemoteCommandError(node.host, command, result.exit_code, result.stderr)
        return trim_newline(result.stdout)

    async def mkdir(self, node: Node, path: str) -> None:
        self.dirs.add((node.host, path))

    async def remove(self, node: Node, path: str) -> None:
        self.files.pop((node.host, path), None)

    async def last_line(self, node: Node, path: str) -> str:
        content = self.files.get((node.host, path), "")
        lines = content.splitlines()
        return lines[-1] if lines else ""

    async def log_at(self, node: Node, message: str) -> None:
        self.logs.setdefault(node.host, []).append(message)


class FakeTransfer:
    """Transfer double writing into the same in-memory filesystem."""

    def __init__(self, files: dict[tuple[str, str], str]) -> None:
        self.files = files

    async def write_text(self, node: Node, path: str, text: str) -> None:
        self.files[(node.host, path)] = text


@pytest.fixture
def config() -> Config:
    """Config with host key checking disabled and default layout."""
    return Config()


@pytest.fixture
def node() -> Node:
    """A single test node."""
    return Node(host="vot013", user="rails_deploy")


@pytest.fixture
def remote_files() -> dict[tuple[str, str], str]:
    """Remote filesystem contents keyed by (host, path)."""
    return {}


@pytest.fixture
def fake_executor(remote_files: dict[tuple[str, str], str]) -> FakeExecutor:
    return FakeExecutor(remote_files)


@pytest.fixture
def fake_transfer(remote_files: dict[tuple[str, str], str]) -> FakeTransfer:
    return FakeTransfer(remote_files)

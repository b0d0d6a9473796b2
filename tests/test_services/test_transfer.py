"""Tests for remote file transfer."""

import re
from collections.abc import AsyncIterator, Generator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from clustrz.config import Config
from clustrz.exceptions import RemoteCommandError, TransportError
from clustrz.models import Node, ShellResult
from clustrz.services.transfer import FileTransfer, temp_name


@pytest.fixture
def mock_connection() -> Generator[MagicMock, None, None]:
    """Patch connection opening to hand out one mock connection with SFTP."""
    conn = MagicMock()

    @asynccontextmanager
    async def fake_open(node: Node, config: Config) -> AsyncIterator[Any]:
        yield conn

    with patch("clustrz.services.transfer.open_connection", fake_open):
        yield conn


@pytest.fixture
def executor() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def transfer(config: Config, executor: AsyncMock) -> FileTransfer:
    return FileTransfer(config, executor)


class TestCopy:
    """Test SCP upload and download."""

    @pytest.mark.asyncio
    async def test_copy_to(
        self, transfer: FileTransfer, node: Node, mock_connection: MagicMock, tmp_path: Path
    ) -> None:
        local = tmp_path / "app.conf"
        local.write_text("port=8080\n")

        with patch("asyncssh.scp", new_callable=AsyncMock) as mock_scp:
            result = await transfer.copy_to(local, node, "~/conf/app.conf")

        mock_scp.assert_awaited_once_with(str(local), (mock_connection, "conf/app.conf"))
        assert result.bytes_transferred == 10
        assert result.destination == "rails_deploy@vot013:~/conf/app.conf"

    @pytest.mark.asyncio
    async def test_copy_to_missing_local_file(
        self, transfer: FileTransfer, node: Node, tmp_path: Path
    ) -> None:
        with pytest.raises(FileNotFoundError):
            await transfer.copy_to(tmp_path / "missing", node, "/tmp/x")

    @pytest.mark.asyncio
    async def test_copy_to_failure(
        self, transfer: FileTransfer, node: Node, mock_connection: MagicMock, tmp_path: Path
    ) -> None:
        local = tmp_path / "app.conf"
        local.write_text("x")

        with patch("asyncssh.scp", new_callable=AsyncMock) as mock_scp:
            mock_scp.side_effect = OSError("No space left on device")
            with pytest.raises(TransportError):
                await transfer.copy_to(local, node, "/tmp/app.conf")

    @pytest.mark.asyncio
    async def test_copy_from(
        self, transfer: FileTransfer, node: Node, mock_connection: MagicMock, tmp_path: Path
    ) -> None:
        local = tmp_path / "oome.log"

        async def fake_scp(src: Any, dst: str) -> None:
            Path(dst).write_text("Fri Dec 3 02:51:12 PST 2010\n")

        with patch("asyncssh.scp", side_effect=fake_scp) as mock_scp:
            result = await transfer.copy_from(node, "/u/apps/oome.log", local)

        assert mock_scp.call_args[0][0] == (mock_connection, "/u/apps/oome.log")
        assert result.bytes_transferred == 28
        assert local.read_text().startswith("Fri Dec 3")


class TestText:
    """Test reading and writing remote text."""

    @pytest.mark.asyncio
    async def test_slurp_keeps_trailing_newline(
        self, transfer: FileTransfer, node: Node, executor: AsyncMock
    ) -> None:
        executor.execute.return_value = ShellResult(0, "a\nb\n", "")

        assert await transfer.slurp(node, "~/.clustrz/node.log") == "a\nb\n"
        executor.execute.assert_awaited_once_with(node, "cat ~/.clustrz/node.log")

    @pytest.mark.asyncio
    async def test_slurp_missing_file(
        self, transfer: FileTransfer, node: Node, executor: AsyncMock
    ) -> None:
        executor.execute.return_value = ShellResult(1, "", "cat: x: No such file or directory")

        with pytest.raises(RemoteCommandError):
            await transfer.slurp(node, "x")

    @pytest.mark.asyncio
    async def test_write_text_uses_sftp(
        self, transfer: FileTransfer, node: Node, mock_connection: MagicMock
    ) -> None:
        sftp = MagicMock()
        remote_file = AsyncMock()
        mock_connection.start_sftp_client.return_value.__aenter__.return_value = sftp
        sftp.open.return_value.__aenter__.return_value = remote_file

        await transfer.write_text(node, "~/.clustrz/kvs/k", '"v"\n')

        sftp.open.assert_called_once_with(".clustrz/kvs/k", "w")
        remote_file.write.assert_awaited_once_with('"v"\n')

    @pytest.mark.asyncio
    async def test_append_text_stages_and_cleans_up(
        self, transfer: FileTransfer, node: Node, executor: AsyncMock
    ) -> None:
        transfer.write_text = AsyncMock()

        await transfer.append_text(node, "~/.clustrz/node.log", "line with 'quotes'\n")

        staged = transfer.write_text.call_args[0][1]
        assert re.fullmatch(r"~/\.clustrz/node\.log\.[0-9a-f]{16}\.tmp", staged)
        transfer.write_text.assert_awaited_once_with(node, staged, "line with 'quotes'\n")

        command = executor.must_succeed.call_args[0][1]
        assert f"cat {staged} >> ~/.clustrz/node.log" in command
        assert f"rm -f {staged}" in command
        assert command.endswith("exit $status")


    @pytest.mark.asyncio
    async def test_append_text_removes_staged_file_when_write_fails(
        self, transfer: FileTransfer, node: Node, executor: AsyncMock
    ) -> None:
        transfer.write_text = AsyncMock(side_effect=TransportError("vot013", OSError("Broken pipe")))

        with pytest.raises(TransportError):
            await transfer.append_text(node, "~/.clustrz/node.log", "line\n")

        staged = transfer.write_text.call_args[0][1]
        executor.execute.assert_awaited_once_with(node, f"rm -f {staged}")
        executor.must_succeed.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_append_text_cleanup_failure_keeps_original_error(
        self, transfer: FileTransfer, node: Node, executor: AsyncMock
    ) -> None:
        write_error = TransportError("vot013", OSError("Broken pipe"))
        transfer.write_text = AsyncMock(side_effect=write_error)
        executor.execute.side_effect = TransportError("vot013", OSError("Connection reset"))

        with pytest.raises(TransportError) as exc_info:
            await transfer.append_text(node, "~/.clustrz/node.log", "line\n")

        assert exc_info.value is write_error


def test_temp_names_are_unique() -> None:
    names = {temp_name("/tmp/log") for _ in range(100)}
    assert len(names) == 100

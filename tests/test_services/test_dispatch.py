"""Tests for parallel dispatch across nodes."""

import asyncio
import time
from unittest.mock import AsyncMock

import pytest

from clustrz.exceptions import RemoteCommandError
from clustrz.models import Cluster, Node
from clustrz.services.dispatch import dispatch_all, dispatch_one, run_all, summarize


@pytest.fixture
def cluster() -> Cluster:
    return Cluster.of("quartz", "rails_deploy", ["vot004", "vot005", "vot006", "vot007"])


class TestDispatchAll:
    """Test dispatch_all."""

    @pytest.mark.asyncio
    async def test_one_result_per_node_in_order(self, cluster: Cluster) -> None:
        async def upper(node: Node) -> str:
            # Later nodes finish first
            await asyncio.sleep(0.01 * (len(cluster) - cluster.nodes.index(node)))
            return node.host.upper()

        results = await dispatch_all(upper, cluster)

        assert [r.host for r in results] == cluster.hosts
        assert [r.output for r in results] == ["VOT004", "VOT005", "VOT006", "VOT007"]
        assert all(r.ok for r in results)

    @pytest.mark.asyncio
    async def test_failures_do_not_abort_batch(self, cluster: Cluster) -> None:
        async def flaky(node: Node) -> str:
            if node.host == "vot005":
                raise RemoteCommandError(node.host, "uptime", 255, "boom")
            return "ok"

        results = await dispatch_all(flaky, cluster)

        assert len(results) == 4
        failed = [r for r in results if not r.ok]
        assert [r.host for r in failed] == ["vot005"]
        assert isinstance(failed[0].error, RemoteCommandError)
        assert failed[0].error.exit_code == 255
        assert failed[0].output is None

    @pytest.mark.asyncio
    async def test_runs_concurrently(self, cluster: Cluster) -> None:
        async def slow(node: Node) -> None:
            await asyncio.sleep(0.2)

        start = time.perf_counter()
        await dispatch_all(slow, cluster)

        assert time.perf_counter() - start < 0.6

    @pytest.mark.asyncio
    async def test_records_elapsed_ms(self) -> None:
        async def slow(node: Node) -> None:
            await asyncio.sleep(0.05)

        result = await dispatch_one(slow, Node("vot004", "deploy"))

        assert result.elapsed_ms >= 40

    @pytest.mark.asyncio
    async def test_blocking_callables_run_in_threads(self, cluster: Cluster) -> None:
        def blocking(node: Node) -> str:
            time.sleep(0.2)
            return node.host

        start = time.perf_counter()
        results = await dispatch_all(blocking, cluster)

        assert [r.output for r in results] == cluster.hosts
        assert time.perf_counter() - start < 0.6

    @pytest.mark.asyncio
    async def test_callable_returning_awaitable(self, cluster: Cluster) -> None:
        executor = AsyncMock()
        executor.uptime.return_value = "up"

        results = await dispatch_all(lambda n: executor.uptime(n), cluster)

        assert [r.output for r in results] == ["up"] * 4

    @pytest.mark.asyncio
    async def test_max_concurrency_bounds_fan_out(self, cluster: Cluster) -> None:
        running = 0
        peak = 0

        async def track(node: Node) -> None:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.02)
            running -= 1

        results = await dispatch_all(track, cluster, max_concurrency=2)

        assert len(results) == 4
        assert peak == 2

    @pytest.mark.asyncio
    async def test_invalid_max_concurrency(self, cluster: Cluster) -> None:
        async def noop(node: Node) -> None:
            return None

        with pytest.raises(ValueError):
            await dispatch_all(noop, cluster, max_concurrency=0)

    @pytest.mark.asyncio
    async def test_empty_nodes(self) -> None:
        async def noop(node: Node) -> None:
            return None

        assert await dispatch_all(noop, []) == []


class TestDispatchOne:
    """Test dispatch_one."""

    @pytest.mark.asyncio
    async def test_unwrapped_result(self) -> None:
        async def host(node: Node) -> str:
            return node.host

        result = await dispatch_one(host, Node("vot013", "deploy"))

        assert result.host == "vot013"
        assert result.output == "vot013"

    @pytest.mark.asyncio
    async def test_failure_captured(self) -> None:
        async def boom(node: Node) -> None:
            raise RuntimeError("boom")

        result = await dispatch_one(boom, Node("vot013", "deploy"))

        assert not result.ok
        with pytest.raises(RuntimeError):
            result.unwrap()


@pytest.mark.asyncio
async def test_run_all(cluster: Cluster) -> None:
    executor = AsyncMock()
    executor.must_succeed.return_value = "load average: 0.00"

    results = await run_all(executor, cluster, "uptime")

    assert [r.output for r in results] == ["load average: 0.00"] * 4
    assert executor.must_succeed.await_count == 4
    executor.must_succeed.assert_any_await(cluster.nodes[0], "uptime")


@pytest.mark.asyncio
async def test_summarize(cluster: Cluster) -> None:
    async def flaky(node: Node) -> str:
        if node.host in ("vot005", "vot007"):
            raise RuntimeError(f"{node.host} down")
        return "ok"

    summary = summarize(await dispatch_all(flaky, cluster))

    assert summary["succeeded"] == ["vot004", "vot006"]
    assert summary["failed"] == {
        "vot005": "RuntimeError: vot005 down",
        "vot007": "RuntimeError: vot007 down",
    }

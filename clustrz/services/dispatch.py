"""Parallel dispatch of a function across a set of nodes.

Each node gets its own task (coroutine functions) or worker thread (plain
callables). Results come back in input order, one per node, with failures
captured instead of aborting the rest of the batch.
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from clustrz.models import ExecResult, Node

if TYPE_CHECKING:
    from clustrz.services.executors import RemoteExecutor

logger = logging.getLogger(__name__)

# Coroutine function or blocking callable taking a node
NodeFunc = Callable[[Node], Any]


async def _invoke(fn: NodeFunc, node: Node) -> Any:
    """Call fn for one node, off the event loop when it is blocking."""
    if inspect.iscoroutinefunction(fn):
        return await fn(node)
    result = await asyncio.to_thread(fn, node)
    if inspect.isawaitable(result):
        return await result
    return result


async def _timed(
    fn: NodeFunc, node: Node, semaphore: asyncio.Semaphore | None
) -> ExecResult[Any]:
    """Run fn for one node and wrap the outcome with host and duration."""
    if semaphore is not None:
        await semaphore.acquire()
    start = time.perf_counter()
    try:
        output = await _invoke(fn, node)
    except Exception as e:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.warning(
            "%s failed after %dms: %s: %s", node.host, elapsed_ms, type(e).__name__, e
        )
        return ExecResult(host=node.host, output=None, elapsed_ms=elapsed_ms, error=e)
    finally:
        if semaphore is not None:
            semaphore.release()

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    logger.debug("%s completed in %dms", node.host, elapsed_ms)
    return ExecResult(host=node.host, output=output, elapsed_ms=elapsed_ms)


async def dispatch_all(
    fn: NodeFunc,
    nodes: Iterable[Node],
    max_concurrency: int | None = None,
) -> list[ExecResult[Any]]:
    """Apply fn to every node concurrently.

    Args:
        fn: Coroutine function or blocking callable taking a node
        nodes: Nodes to apply fn to
        max_concurrency: Upper bound on simultaneous invocations
            (default: one per node)

    Returns:
        One ExecResult per node, in input order

    Raises:
        ValueError: If max_concurrency is not positive
    """
    if max_concurrency is not None and max_concurrency <= 0:
        raise ValueError(f"max_concurrency must be > 0, got {max_concurrency}")

    node_list = list(nodes)
    if not node_list:
        return []

    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None
    logger.debug(
        "Dispatching to %d node(s) (max_concurrency=%s)",
        len(node_list),
        max_concurrency or "unbounded",
    )
    results = await asyncio.gather(*(_timed(fn, n, semaphore) for n in node_list))
    return list(results)


async def dispatch_one(fn: NodeFunc, node: Node) -> ExecResult[Any]:
    """Apply fn to a single node; same wrapping as :func:`dispatch_all`."""
    results = await dispatch_all(fn, [node])
    return results[0]


async def run_all(
    executor: "RemoteExecutor",
    nodes: Iterable[Node],
    command: str,
    max_concurrency: int | None = None,
) -> list[ExecResult[str]]:
    """Run one command on every node, collecting stdout per host.

    Non-zero exits surface as RemoteCommandError on that node's result.
    """

    async def run_single(node: Node) -> str:
        return await executor.must_succeed(node, command)

    return await dispatch_all(run_single, nodes, max_concurrency=max_concurrency)


def summarize(results: Iterable[ExecResult[Any]]) -> dict[str, Any]:
    """Split results into succeeded hosts and failed hosts with messages."""
    succeeded: list[str] = []
    failed: dict[str, str] = {}
    for result in results:
        if result.ok:
            succeeded.append(result.host)
        else:
            failed[result.host] = f"{type(result.error).__name__}: {result.error}"
    return {"succeeded": succeeded, "failed": failed}

"""Command-line entry point for clustrz."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

from clustrz.config import Config, Settings
from clustrz.dependencies import Dependencies
from clustrz.models import Cluster, ExecResult, Node
from clustrz.services.dispatch import dispatch_all, summarize
from clustrz.services.kvs import NOT_FOUND
from clustrz.utils.console import ColorfulFormatter
from clustrz.watchers import OOMEWatcher, WatcherSettings

logger = logging.getLogger("clustrz")


def configure_logging(settings: Settings) -> None:
    """Attach a colorful stderr handler to the clustrz logger."""
    use_colors = settings.log_colors and sys.stderr.isatty()

    clustrz_logger = logging.getLogger("clustrz")
    clustrz_logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    if not clustrz_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        clustrz_logger.addHandler(handler)
        clustrz_logger.propagate = False

    for noisy_logger in ["asyncssh", "httpx", "httpcore"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clustrz", description="Operate a cluster of Linux hosts over SSH."
    )
    parser.add_argument(
        "--hosts",
        nargs="+",
        default=None,
        help="Hosts to operate on (default: every host in SSH config)",
    )
    parser.add_argument(
        "--user",
        default=None,
        help="Login user for --hosts; without it hosts are looked up in SSH config",
    )
    parser.add_argument("--cluster", default="default", help="Cluster name used in logs")

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a shell command on every host")
    run.add_argument("shell_command", help="Command line for the remote shell")

    sub.add_parser("uptime", help="Show uptime of every host")
    sub.add_parser("ps", help="List the login user's processes on every host")
    sub.add_parser("log", help="Print each host's clustrz activity log")

    kv_get = sub.add_parser("kv-get", help="Read a key from every host")
    kv_get.add_argument("key")

    kv_put = sub.add_parser("kv-put", help="Store a JSON value under a key on every host")
    kv_put.add_argument("key")
    kv_put.add_argument("value", help="JSON text")

    kv_delete = sub.add_parser("kv-delete", help="Delete a key on every host")
    kv_delete.add_argument("key")

    oome = sub.add_parser("oome", help="Restart the service on hosts with a new OOME")
    oome.add_argument("--log", dest="oome_log", default=None, help="Remote OOME log path")
    oome.add_argument("--restart", default=None, help="Remote restart command")
    oome.add_argument(
        "--prepare", action="store_true", help="Seed the watermark instead of checking"
    )

    return parser


def resolve_cluster(args: argparse.Namespace, config: Config) -> Cluster:
    """Build the target cluster from command-line options."""
    if args.user:
        if not args.hosts:
            raise SystemExit("--user requires --hosts")
        return Cluster.of(args.cluster, args.user, args.hosts)
    return config.cluster(args.cluster, args.hosts)


def _format_output(output: Any) -> str:
    if output is None or output is NOT_FOUND:
        return "(none)"
    if isinstance(output, str):
        return output
    if isinstance(output, list):
        return "\n".join(str(item) for item in output)
    return str(output)


def report(results: Sequence[ExecResult]) -> int:
    """Print per-host results and return the process exit code."""
    for result in results:
        if result.ok:
            print(f"[{result.host}] ({result.elapsed_ms}ms)")
            print(_format_output(result.output))
        else:
            print(f"[{result.host}] FAILED ({result.elapsed_ms}ms): {result.error}")

    summary = summarize(results)
    logger.info(
        "%d succeeded, %d failed", len(summary["succeeded"]), len(summary["failed"])
    )
    return 1 if summary["failed"] else 0


async def run_command(args: argparse.Namespace, deps: Dependencies, cluster: Cluster) -> int:
    """Dispatch the selected subcommand across the cluster."""
    executor, kvs = deps.executor, deps.kvs

    if args.command == "oome":
        settings = deps.config.settings
        watcher_settings = WatcherSettings(
            oome_log=args.oome_log or settings.oome_log,
            restart_command=args.restart or settings.restart_command,
        )
        if not args.prepare and (
            not watcher_settings.oome_log or not watcher_settings.restart_command
        ):
            raise SystemExit("oome needs --log and --restart (or CLUSTRZ_OOME_LOG/CLUSTRZ_RESTART_COMMAND)")
        watcher = OOMEWatcher(watcher_settings, executor, kvs)
        if args.prepare:
            results = await dispatch_all(watcher.prepare, cluster, deps.max_concurrency)
        else:
            results = await watcher.check_all(cluster, deps.max_concurrency)
        return report(results)

    async def apply(node: Node) -> Any:
        if args.command == "run":
            return await executor.must_succeed(node, args.shell_command)
        if args.command == "uptime":
            return await executor.uptime(node)
        if args.command == "ps":
            return [f"{p.pid:>7} {p.time} {p.cpu_percent:5.1f} {p.command}" for p in await executor.ps(node)]
        if args.command == "log":
            return await executor.get_log(node)
        if args.command == "kv-get":
            return json.dumps(await kvs.get(node, args.key, default=None), default=list)
        if args.command == "kv-put":
            await kvs.put(node, args.key, json.loads(args.value))
            return "ok"
        if args.command == "kv-delete":
            await kvs.delete(node, args.key)
            return "ok"
        raise ValueError(f"Unknown command: {args.command}")

    return report(await dispatch_all(apply, cluster, deps.max_concurrency))


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, run the command, and return an exit code."""
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings)

    try:
        config = Config.from_env(settings)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 2

    try:
        cluster = resolve_cluster(args, config)
    except KeyError as e:
        logger.error("%s", e.args[0])
        return 2
    if not cluster.nodes:
        logger.error("No hosts to operate on")
        return 2

    logger.info("Running %s on %d host(s): %s", args.command, len(cluster), ", ".join(cluster.hosts))
    deps = Dependencies.from_config(config)
    return asyncio.run(run_command(args, deps, cluster))


if __name__ == "__main__":
    sys.exit(main())

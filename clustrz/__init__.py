"""clustrz: operate a fleet of Linux hosts over SSH."""

from clustrz.config import Config, Settings
from clustrz.dependencies import Dependencies
from clustrz.exceptions import (
    ClustrzError,
    JMXError,
    ParseError,
    RemoteCommandError,
    TransportError,
)
from clustrz.models import Cluster, ExecResult, JMXCredentials, Node, ProcessInfo, ShellResult
from clustrz.services import (
    NOT_FOUND,
    FileTransfer,
    JMXClient,
    RemoteExecutor,
    RemoteKVStore,
    dispatch_all,
    dispatch_one,
    run_all,
)
from clustrz.watchers import OOMEState, OOMEWatcher, WatcherSettings

__all__ = [
    "NOT_FOUND",
    "ClustrzError",
    "Cluster",
    "Config",
    "Dependencies",
    "ExecResult",
    "FileTransfer",
    "JMXClient",
    "JMXCredentials",
    "JMXError",
    "Node",
    "OOMEState",
    "OOMEWatcher",
    "ParseError",
    "ProcessInfo",
    "RemoteCommandError",
    "RemoteExecutor",
    "RemoteKVStore",
    "Settings",
    "ShellResult",
    "TransportError",
    "WatcherSettings",
    "dispatch_all",
    "dispatch_one",
    "run_all",
]

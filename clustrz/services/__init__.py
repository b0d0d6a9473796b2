"""Services for clustrz."""

from clustrz.services.connection import open_connection
from clustrz.services.dispatch import dispatch_all, dispatch_one, run_all, summarize
from clustrz.services.executors import RemoteExecutor
from clustrz.services.jmx import JMXClient
from clustrz.services.kvs import NOT_FOUND, RemoteKVStore
from clustrz.services.transfer import FileTransfer, TransferResult

__all__ = [
    "NOT_FOUND",
    "FileTransfer",
    "JMXClient",
    "RemoteExecutor",
    "RemoteKVStore",
    "TransferResult",
    "dispatch_all",
    "dispatch_one",
    "open_connection",
    "run_all",
    "summarize",
]

"""Data models for clustrz."""

from clustrz.models.command import ShellResult
from clustrz.models.dispatch import ExecResult
from clustrz.models.node import Cluster, JMXCredentials, Node
from clustrz.models.process import ProcessInfo

__all__ = [
    "Cluster",
    "ExecResult",
    "JMXCredentials",
    "Node",
    "ProcessInfo",
    "ShellResult",
]

"""Node and cluster data models."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class JMXCredentials:
    """JMX endpoint exposed through a Jolokia agent on the node."""

    port: int
    user: str | None = None
    password: str | None = field(default=None, repr=False)
    path: str = "/jolokia"


@dataclass(frozen=True)
class Node:
    """A remote Linux host reachable over SSH.

    Two nodes are the same node when host and user match; port, key and
    JMX settings do not take part in equality.
    """

    host: str
    user: str
    port: int = field(default=22, compare=False)
    identity_file: str | None = field(default=None, compare=False)
    jmx: JMXCredentials | None = field(default=None, compare=False)

    @property
    def target(self) -> str:
        """SSH-style ``user@host`` string."""
        return f"{self.user}@{self.host}"

    def __str__(self) -> str:
        return self.target


@dataclass
class Cluster:
    """A named, ordered collection of nodes operated on uniformly."""

    name: str
    nodes: list[Node] = field(default_factory=list)

    @classmethod
    def of(cls, name: str, user: str, hosts: Iterable[str]) -> "Cluster":
        """Build a cluster of nodes sharing one login user.

        Args:
            name: Cluster name
            user: SSH user for every node
            hosts: Host names, in order

        Returns:
            Cluster with one node per host
        """
        return cls(name=name, nodes=[Node(host=h, user=user) for h in hosts])

    @property
    def hosts(self) -> list[str]:
        """Host names in cluster order."""
        return [node.host for node in self.nodes]

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

"""Application configuration.

Delegates to specialized components:
- Settings: Environment variables
- HostKeyVerifier: Manages known_hosts
- SSHConfigParser: Reads ~/.ssh/config
"""

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field

from clustrz.config.host_keys import HostKeyVerifier
from clustrz.config.parser import SSHConfigParser
from clustrz.config.settings import Settings
from clustrz.models import Cluster, Node

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Application configuration.

    Passed explicitly to every component that needs the remote layout,
    host key policy or transport limits.
    """

    settings: Settings = field(default_factory=Settings)
    host_keys: HostKeyVerifier = field(default_factory=HostKeyVerifier.disabled)
    parser: SSHConfigParser = field(default_factory=SSHConfigParser)
    _nodes_cache: dict[str, Node] = field(default_factory=dict, init=False, repr=False)

    @classmethod
    def from_env(cls, settings: Settings | None = None) -> "Config":
        """Create config from environment.

        Args:
            settings: Already loaded settings (default: read from environment)

        Returns:
            Configured instance with all components initialized
        """
        host_keys = HostKeyVerifier(
            known_hosts_path=os.getenv("CLUSTRZ_KNOWN_HOSTS"),
            strict_checking=os.getenv("CLUSTRZ_STRICT_HOST_KEY_CHECKING", "true").lower()
            != "false",
        )
        parser = SSHConfigParser(config_path=os.getenv("CLUSTRZ_SSH_CONFIG") or None)
        return cls(settings=settings or Settings.from_env(), host_keys=host_keys, parser=parser)

    def get_nodes(self) -> dict[str, Node]:
        """Get nodes defined in SSH config, keyed by alias.

        Lazy loads and caches on first call.
        """
        if not self._nodes_cache:
            self._nodes_cache = self.parser.parse()
        return self._nodes_cache

    def cluster(self, name: str, hosts: Iterable[str] | None = None) -> Cluster:
        """Build a cluster from SSH config entries.

        Args:
            name: Cluster name
            hosts: Aliases to include, in order (default: every entry)

        Returns:
            Cluster of the selected nodes

        Raises:
            KeyError: If an alias is not defined in SSH config
        """
        nodes = self.get_nodes()
        if hosts is None:
            return Cluster(name=name, nodes=list(nodes.values()))

        hosts = list(hosts)

        missing = [h for h in hosts if h not in nodes]
        if missing:
            available = ", ".join(sorted(nodes)) or "none"
            raise KeyError(f"Unknown host(s) {', '.join(missing)}. Available: {available}")
        return Cluster(name=name, nodes=[nodes[h] for h in hosts])

    @property
    def base_dir(self) -> str:
        """Remote base directory."""
        return self.settings.base_dir

    @property
    def kvs_dir(self) -> str:
        """Remote key-value store directory."""
        return self.settings.kvs_dir

    @property
    def node_log(self) -> str:
        """Remote activity log path."""
        return self.settings.node_log

    @property
    def known_hosts_path(self) -> str | None:
        """Path to known_hosts file or None if disabled."""
        return self.host_keys.get_known_hosts_path()

    @property
    def strict_host_key_checking(self) -> bool:
        """Whether to reject unknown host keys."""
        return self.host_keys.strict_checking

"""SSH config file parser.

Reads ~/.ssh/config and turns host entries into nodes.
"""

import logging
import os
import re
from pathlib import Path

from clustrz.models import Node

logger = logging.getLogger(__name__)


class SSHConfigParser:
    """Parser for SSH config files.

    Understands ``Host``, ``HostName``, ``User``, ``Port`` and
    ``IdentityFile``. Values under ``Host *`` act as defaults for every
    later host; other wildcard patterns are skipped.
    """

    def __init__(self, config_path: Path | str | None = None, default_user: str = "root"):
        """Initialize SSH config parser.

        Args:
            config_path: Path to SSH config file (default: ~/.ssh/config)
            default_user: User for entries without a ``User`` line
        """
        if config_path is None:
            config_path = Path.home() / ".ssh" / "config"

        self.config_path = Path(config_path)
        self.default_user = default_user

    def parse(self) -> dict[str, Node]:
        """Parse SSH config and return nodes keyed by host alias.

        Returns:
            Dictionary mapping alias to Node, in file order
        """
        if not self.config_path.exists():
            logger.warning("SSH config not found: %s", self.config_path)
            return {}

        try:
            content = self.config_path.read_text()
        except OSError as e:
            logger.warning("Cannot read SSH config %s: %s", self.config_path, e)
            return {}

        nodes: dict[str, Node] = {}
        current_host: str | None = None
        current_data: dict[str, str] = {}
        global_defaults: dict[str, str] = {}

        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            host_match = re.match(r"^Host\s+(\S+)", line, re.IGNORECASE)
            if host_match:
                self._save(nodes, current_host, current_data)
                current_host = host_match.group(1)
                if current_host != "*" and ("*" in current_host or "?" in current_host):
                    current_host = None
                current_data = global_defaults.copy() if current_host != "*" else {}
                continue

            kv_match = re.match(r"^(\w+)\s*=?\s*(.+)$", line)
            if kv_match and current_host:
                key = kv_match.group(1).lower()
                value = kv_match.group(2).strip()
                if key == "identityfile":
                    value = os.path.expanduser(value)
                current_data[key] = value
                if current_host == "*":
                    global_defaults[key] = value

        self._save(nodes, current_host, current_data)

        logger.debug("Parsed %d node(s) from %s", len(nodes), self.config_path)
        return nodes

    def _save(self, nodes: dict[str, Node], alias: str | None, data: dict[str, str]) -> None:
        """Store the entry being built, if it is a concrete host."""
        if not alias or alias == "*":
            return

        try:
            port = int(data.get("port", "22"))
        except ValueError:
            logger.warning("Invalid port for %s: %s, using 22", alias, data.get("port"))
            port = 22

        nodes[alias] = Node(
            host=data.get("hostname", alias),
            user=data.get("user", self.default_user),
            port=port,
            identity_file=data.get("identityfile"),
        )

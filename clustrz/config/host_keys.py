"""SSH host key verification.

Manages the known_hosts file handed to the SSH client.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class HostKeyVerifier:
    """SSH host key verification policy."""

    def __init__(
        self,
        known_hosts_path: str | None = None,
        strict_checking: bool = True,
    ):
        """Initialize host key verifier.

        Args:
            known_hosts_path: Path to known_hosts file or 'none' to disable
            strict_checking: Reject unknown host keys

        Raises:
            FileNotFoundError: If strict mode and file missing
        """
        self.strict_checking = strict_checking
        self._known_hosts = self._resolve_known_hosts(known_hosts_path)

    @classmethod
    def disabled(cls) -> "HostKeyVerifier":
        """Verifier that accepts any host key."""
        return cls(known_hosts_path="none", strict_checking=False)

    def _resolve_known_hosts(self, value: str | None) -> str | None:
        """Resolve known_hosts path.

        Returns:
            Path to known_hosts file or None to disable verification

        Raises:
            FileNotFoundError: If strict mode and file missing
        """
        if value and value.lower() == "none":
            logger.warning(
                "SSH host key verification disabled (CLUSTRZ_KNOWN_HOSTS=none)"
            )
            return None

        path = Path(os.path.expanduser(value)) if value else Path.home() / ".ssh" / "known_hosts"
        if not path.exists():
            if self.strict_checking:
                raise FileNotFoundError(
                    f"SSH host key verification required but known_hosts "
                    f"not found at {path}.\n\n"
                    f"To fix this:\n"
                    f"1. Add host keys: ssh-keyscan <hostname> >> {path}\n"
                    f"2. Or point CLUSTRZ_KNOWN_HOSTS at another file\n"
                    f"3. Or disable verification (NOT RECOMMENDED): "
                    f"export CLUSTRZ_KNOWN_HOSTS=none"
                )
            logger.warning(
                "known_hosts not found at %s, verification disabled", path
            )
            return None

        return str(path)

    def get_known_hosts_path(self) -> str | None:
        """Get path to known_hosts file, or None if verification is disabled."""
        return self._known_hosts

    def is_enabled(self) -> bool:
        """Check if host key verification is enabled."""
        return self._known_hosts is not None

"""Per-operation SSH connections.

Every remote operation opens its own connection and closes it when done;
nothing is pooled or reused between calls.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import asyncssh

from clustrz.exceptions import TransportError

if TYPE_CHECKING:
    from clustrz.config import Config
    from clustrz.models import Node

logger = logging.getLogger(__name__)


def _connect_kwargs(node: "Node", config: "Config", known_hosts: str | None) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "port": node.port,
        "username": node.user,
        "known_hosts": known_hosts,
        "client_keys": [node.identity_file] if node.identity_file else None,
    }
    if config.settings.connect_timeout:
        kwargs["connect_timeout"] = config.settings.connect_timeout
    return kwargs


async def _connect(node: "Node", config: "Config") -> asyncssh.SSHClientConnection:
    """Open a connection, honouring the host key policy."""
    known_hosts = config.known_hosts_path
    try:
        return await asyncssh.connect(
            node.host, **_connect_kwargs(node, config, known_hosts)
        )
    except asyncssh.HostKeyNotVerifiable as e:
        if config.strict_host_key_checking:
            logger.error(
                "Host key verification failed for %s: %s. Add the host key to %s "
                "or set CLUSTRZ_STRICT_HOST_KEY_CHECKING=false",
                node.host,
                e,
                known_hosts,
            )
            raise
        logger.warning(
            "Host key not verified for %s (strict mode disabled): %s", node.host, e
        )
        return await asyncssh.connect(node.host, **_connect_kwargs(node, config, None))


@asynccontextmanager
async def open_connection(
    node: "Node", config: "Config"
) -> AsyncIterator[asyncssh.SSHClientConnection]:
    """Open a fresh SSH connection to a node for the duration of one operation.

    Args:
        node: Node to connect to
        config: Config supplying host key policy and timeouts

    Yields:
        Connected SSH client connection

    Raises:
        TransportError: If the connection cannot be established
    """
    logger.debug("Opening SSH connection to %s:%d", node.target, node.port)
    try:
        conn = await _connect(node, config)
    except (OSError, asyncssh.Error) as e:
        raise TransportError(node.host, e) from e

    try:
        yield conn
    finally:
        conn.close()
        await conn.wait_closed()
        logger.debug("Closed SSH connection to %s", node.target)

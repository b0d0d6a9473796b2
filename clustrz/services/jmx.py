"""JMX access through a Jolokia agent running beside the JVM."""

import logging
from typing import TYPE_CHECKING, Any

import httpx

from clustrz.exceptions import JMXError, TransportError
from clustrz.utils.validation import validate_host

if TYPE_CHECKING:
    from clustrz.config import Config
    from clustrz.models import Node

logger = logging.getLogger(__name__)


class JMXClient:
    """Reads managed beans from nodes that carry JMX credentials.

    Each call opens its own HTTP client; nothing is cached between calls.
    """

    def __init__(
        self, config: "Config", transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        self.config = config
        self._transport = transport

    def endpoint(self, node: "Node") -> str:
        """Jolokia base URL for a node.

        Raises:
            ValueError: If the node has no JMX credentials
        """
        if node.jmx is None:
            raise ValueError(f"Node {node.host} has no JMX credentials")
        path = "/" + node.jmx.path.strip("/")
        return f"http://{validate_host(node.host)}:{node.jmx.port}{path}"

    async def _request(self, node: "Node", payload: dict[str, Any]) -> Any:
        """POST one Jolokia request and return its ``value``."""
        url = self.endpoint(node)
        jmx = node.jmx
        auth = (jmx.user, jmx.password or "") if jmx and jmx.user else None

        logger.debug("JMX %s %s", url, payload)
        try:
            async with httpx.AsyncClient(
                auth=auth,
                timeout=self.config.settings.jmx_timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(url, json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as e:
            raise TransportError(node.host, e) from e
        except ValueError as e:
            raise JMXError(node.host, f"Invalid JSON response: {e}") from e

        status = body.get("status")
        if status != 200:
            raise JMXError(node.host, body.get("error") or f"status {status}")
        return body.get("value")

    async def list_beans(self, node: "Node") -> set[str]:
        """Return the object names of every registered managed bean."""
        tree = await self._request(node, {"type": "list", "config": {"maxDepth": 2}})
        return {
            f"{domain}:{props}"
            for domain, beans in (tree or {}).items()
            for props in beans
        }

    async def read_bean(self, node: "Node", domain: str, bean_type: str) -> dict[str, Any]:
        """Read all attributes of ``<domain>:type=<bean_type>``.

        Example:
            >>> await client.read_bean(node, "java.lang", "Memory")
            {'HeapMemoryUsage': {...}, 'ObjectPendingFinalizationCount': 0, ...}
        """
        value = await self._request(
            node, {"type": "read", "mbean": f"{domain}:type={bean_type}"}
        )
        return dict(value or {})

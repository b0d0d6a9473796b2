"""Dependency container wiring clustrz services to one configuration."""

from dataclasses import dataclass

from clustrz.config import Config
from clustrz.services.executors import RemoteExecutor
from clustrz.services.jmx import JMXClient
from clustrz.services.kvs import RemoteKVStore
from clustrz.services.transfer import FileTransfer


@dataclass
class Dependencies:
    """Container for clustrz services.

    Example:
        deps = Dependencies.create()
        await deps.kvs.put(node, "deployed", "v42")
    """

    config: Config
    executor: RemoteExecutor
    transfer: FileTransfer
    kvs: RemoteKVStore
    jmx: JMXClient

    @classmethod
    def create(cls) -> "Dependencies":
        """Create dependencies with configuration from the environment."""
        return cls.from_config(Config.from_env())

    @classmethod
    def from_config(cls, config: Config) -> "Dependencies":
        """Create dependencies with custom configuration.

        Args:
            config: Custom Config instance

        Returns:
            Dependencies sharing that config
        """
        executor = RemoteExecutor(config)
        transfer = FileTransfer(config, executor)
        return cls(
            config=config,
            executor=executor,
            transfer=transfer,
            kvs=RemoteKVStore(config, executor, transfer),
            jmx=JMXClient(config),
        )

    @property
    def max_concurrency(self) -> int | None:
        """Dispatch bound from settings, None when unbounded."""
        return self.config.settings.max_concurrency or None

"""Process listing data models."""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessInfo:
    """One row of a remote ``ps`` listing."""

    pid: int
    time: str
    cpu_percent: float
    command: str

    @property
    def executable(self) -> str:
        """First word of the command line."""
        parts = self.command.split()
        return parts[0] if parts else ""

    def is_java(self) -> bool:
        """Whether the process is a JVM."""
        return self.executable.endswith("java")

    def is_clojure(self) -> bool:
        """Whether the process runs ``clojure.main``."""
        return re.search(r"\sclojure\.main(\s|$)", self.command) is not None

    def matches(self, pattern: str) -> bool:
        """Check the command line against a regular expression."""
        return re.search(pattern, self.command) is not None

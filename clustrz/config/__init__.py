"""Configuration module for clustrz.

Provides focused classes for different configuration concerns:
- Config: Main configuration class (aggregates all components)
- SSHConfigParser: Parses ~/.ssh/config files into nodes
- HostKeyVerifier: Manages SSH host key verification
- Settings: Environment variable configuration
"""

from clustrz.config.host_keys import HostKeyVerifier
from clustrz.config.main import Config
from clustrz.config.parser import SSHConfigParser
from clustrz.config.settings import Settings

__all__ = ["Config", "HostKeyVerifier", "SSHConfigParser", "Settings"]

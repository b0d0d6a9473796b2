"""Utilities for clustrz."""

from clustrz.utils.console import ColorfulFormatter
from clustrz.utils.parser import parse_bash_time, parse_ps_line, parse_ps_output
from clustrz.utils.shell import build_command, join_path, quote_arg, quote_path, sftp_path
from clustrz.utils.validation import validate_host, validate_key

__all__ = [
    "ColorfulFormatter",
    "build_command",
    "join_path",
    "parse_bash_time",
    "parse_ps_line",
    "parse_ps_output",
    "quote_arg",
    "quote_path",
    "sftp_path",
    "validate_host",
    "validate_key",
]

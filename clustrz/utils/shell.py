"""Shell command construction and quoting.

Every command string sent to a node is assembled here so that paths and
arguments are always quoted.
"""

import shlex


def quote_arg(arg: str) -> str:
    """Safely quote a shell argument.

    Args:
        arg: Argument to quote

    Returns:
        Shell-safe quoted argument
    """
    return shlex.quote(arg)


def quote_path(path: str) -> str:
    """Safely quote a remote path for shell commands.

    A leading ``~/`` is left unquoted so the remote shell still expands it
    to the login user's home directory.

    Args:
        path: File system path to quote

    Returns:
        Shell-safe quoted path
    """
    if path == "~":
        return path
    if path.startswith("~/"):
        rest = path[2:]
        return "~/" + shlex.quote(rest) if rest else "~/"
    return shlex.quote(path)


def build_command(program: str, *args: str, paths: tuple[str, ...] = ()) -> str:
    """Join a program, quoted arguments and quoted paths into one command.

    Args:
        program: Program name or fixed flag prefix, inserted verbatim
        *args: Arguments quoted with :func:`quote_arg`
        paths: Trailing paths quoted with :func:`quote_path`

    Returns:
        Command string
    """
    parts = [program]
    parts.extend(quote_arg(a) for a in args)
    parts.extend(quote_path(p) for p in paths)
    return " ".join(parts)


def join_path(base: str, name: str) -> str:
    """Join a remote directory and a file name with a single slash."""
    return base.rstrip("/") + "/" + name


def sftp_path(path: str) -> str:
    """Translate a ``~/``-relative path for SCP/SFTP, which start in $HOME."""
    if path == "~":
        return "."
    if path.startswith("~/"):
        return path[2:] or "."
    return path

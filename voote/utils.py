"""Console output helpers for Voote."""

import sys
from typing import Dict, Mapping, TextIO

# ANSI color codes
RESET = "\033[0m"
BOLD = "\033[1m"
RED = "\033[31m"
YELLOW = "\033[33m"
GREEN = "\033[32m"
BLUE = "\033[34m"
CYAN = "\033[36m"


def _stdout(stream: TextIO | None) -> TextIO:
    return stream if stream is not None else sys.stdout


def _stderr(stream: TextIO | None) -> TextIO:
    return stream if stream is not None else sys.stderr


def section_header(title: str, stream: TextIO | None = None) -> None:
    """Print a section header."""
    out = _stdout(stream)
    print(file=out)
    print(f"--- {title} ---", file=out)


def error(message: str, stream: TextIO | None = None) -> None:
    """Print an error message in red."""
    print(f"{RED}[error]{RESET} {message}", file=_stderr(stream))


def warn(message: str, stream: TextIO | None = None) -> None:
    """Print a warning message in yellow."""
    print(f"{YELLOW}[warn]{RESET} {message}", file=_stderr(stream))


def info(message: str, stream: TextIO | None = None) -> None:
    """Print an info message in blue."""
    print(f"{BLUE}[info]{RESET} {message}", file=_stdout(stream))


def success(message: str, stream: TextIO | None = None) -> None:
    """Print a success message in green."""
    print(f"{GREEN}[success]{RESET} {message}", file=_stdout(stream))


def result(message: str, stream: TextIO | None = None) -> None:
    """Print a result message in cyan."""
    print(f"{CYAN}[result]{RESET} {message}", file=_stdout(stream))


def bold(message: str) -> str:
    """Return a bold formatted message."""
    return f"{BOLD}{message}{RESET}"


def print_table(title: str, rows: Mapping[str, object], stream: TextIO | None = None) -> None:
    """Print key/value rows under a header, keys padded to a common width.

    Args:
        title: Header printed above the rows
        rows: Ordered mapping of labels to values
        stream: Output stream (default: stdout)
    """
    out = _stdout(stream)
    section_header(title, out)
    width = max((len(key) for key in rows), default=0)
    for key, value in rows.items():
        print(f"  {bold(key.ljust(width))}  {value}", file=out)


def redact(secret: str, visible: int = 4) -> str:
    """Mask all but the last ``visible`` characters of a secret."""
    if len(secret) <= visible:
        return "*" * len(secret)
    return "*" * 8 + secret[-visible:]


def flatten(prefix: str, values: Mapping[str, object]) -> Dict[str, object]:
    """Flatten one level of nested mappings into dotted keys."""
    flat: Dict[str, object] = {}
    for key, value in values.items():
        name = f"{prefix}.{key}" if prefix else key
        if isinstance(value, Mapping):
            flat.update(flatten(name, value))
        else:
            flat[name] = value
    return flat

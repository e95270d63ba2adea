"""Utility functions for the server setup tool."""
import os
import shutil

_verbose = False


class SetupError(RuntimeError):
    """Base error for failures raised by the setup pipeline itself."""


def command_exists(command: str) -> bool:
    """Check if a command exists in the system PATH."""
    return shutil.which(command) is not None


def is_root() -> bool:
    """Check if the script is running with an effective uid of root."""
    return os.geteuid() == 0


def log_info(message: str) -> None:
    """Log an informational message."""
    print(f"[INFO] {message}")


def log_action(message: str) -> None:
    """Log an action being performed."""
    print(f"  -> {message}")


def log_debug(message: str) -> None:
    """Log a detail message, shown only in verbose mode."""
    if _verbose:
        print(f"  .. {message}")


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    global _verbose
    _verbose = verbose

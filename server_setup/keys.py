"""Enrollment of SSH public keys for the new user."""
from typing import Callable

import sh

from server_setup.config import SetupConfig
from server_setup.utils import log_action


def add_ssh_keys(username: str, config: SetupConfig, ask: Callable[[str], str]) -> int:
    """Append keys to authorized_keys until an empty line is entered.

    Keys are written as typed; their format is not checked.
    """
    ssh_dir = config.home_of(username) / ".ssh"
    if not ssh_dir.exists():
        log_action(f"Creating {ssh_dir}...")
        ssh_dir.mkdir(mode=0o700)

    authorized_keys = ssh_dir / "authorized_keys"
    added = 0
    while True:
        key = ask("Enter ssh public key")
        if not key:
            break
        with open(authorized_keys, 'a') as f:
            f.write(key + "\n")
        added += 1

    if authorized_keys.exists():
        authorized_keys.chmod(0o600)
    sh.chown("-R", f"{username}:{username}", str(ssh_dir))
    log_action(f"Added {added} key(s) to {authorized_keys}")
    return added

"""Creation of the administrative user."""
import re
import shutil
from functools import partial
from pathlib import Path
from typing import Callable, Optional

import sh

from server_setup.config import SetupConfig
from server_setup.prompts import ask_until
from server_setup.steps import Step
from server_setup.utils import log_action, log_info

USERNAME_PATTERN = re.compile(r'\w+', re.ASCII)


def is_valid_username(name: str) -> bool:
    """Check the name is only ASCII letters, digits and underscores."""
    return USERNAME_PATTERN.fullmatch(name) is not None


def read_username(ask: Callable[[str], str], max_attempts: Optional[int] = None) -> str:
    """Prompt until a username made only of word characters is entered."""
    return ask_until("Username", is_valid_username, ask=ask, max_attempts=max_attempts)


def create_account(username: str, config: SetupConfig) -> None:
    """Create the account with a home directory, admin groups and shell."""
    log_action(f"Creating user {username}...")
    sh.useradd("-m", "-G", ",".join(config.user_groups), "-s", config.shell, username)


def set_initial_password(username: str) -> None:
    """Set the password to the username; the operator must change it."""
    sh.chpasswd(_in=f"{username}:{username}\n")


def _copy_artifact(source: Path, destination: Path) -> None:
    """Copy a file or directory tree, keeping symlinks as links."""
    if source.is_dir():
        shutil.copytree(source, destination, symlinks=True)
    else:
        shutil.copy2(source, destination)


def _chown_tree(username: str, path: Path) -> None:
    """Give the user ownership of everything under path."""
    sh.chown("-R", f"{username}:{username}", str(path))


def replicate_shell_files(username: str, config: SetupConfig) -> None:
    """Copy root's shell setup into the new home. Failures are only logged."""
    home = config.home_of(username)
    for artifact in config.shell_framework.artifacts:
        source = config.root_home / artifact
        destination = home / artifact
        if destination.exists():
            log_info(f"{destination} already exists.")
            continue
        Step(f"copy {source}", partial(_copy_artifact, source, destination), isolate=True).run()

    Step(f"fix ownership of {home}", partial(_chown_tree, username, home), isolate=True).run()


def _run_as(username: str, command: str) -> None:
    """Run a shell command as another user with their home as HOME."""
    sh.sudo("-u", username, "-H", "bash", "-c", command)


def install_toolchain(username: str, url: Optional[str]) -> bool:
    """Run a language toolchain installer as the new user."""
    if not url:
        return False

    log_action(f"Installing toolchain for {username} from {url}...")
    return Step("install toolchain", partial(_run_as, username, f"curl -fsSL {url} | bash"), isolate=True).run().ok


def add_new_user(config: SetupConfig, ask: Callable[[str], str]) -> str:
    """Create the admin account and return its name."""
    username = read_username(ask, config.prompt_attempts)
    create_account(username, config)
    set_initial_password(username)
    replicate_shell_files(username, config)
    install_toolchain(username, config.toolchain_installer)
    return username

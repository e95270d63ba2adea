"""Provisioning workflow steps."""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from server_setup.config import SetupConfig
from server_setup.utils import log_action, log_debug, log_info


@dataclass
class StepOutcome:
    ok: bool
    value: Any = None
    error: Optional[Exception] = None


@dataclass
class Step:
    """A unit of work with its failure policy.

    An isolated step logs its failure and lets the run continue. A step that
    is not isolated lets the exception propagate and stops the run.
    """
    title: str
    action: Callable[[], Any]
    isolate: bool = False

    def run(self) -> StepOutcome:
        log_debug(f"Running: {self.title}")
        if not self.isolate:
            return StepOutcome(ok=True, value=self.action())
        try:
            return StepOutcome(ok=True, value=self.action())
        except Exception as e:
            log_action(f"Failed to {self.title}: {e}")
            return StepOutcome(ok=False, error=e)


@dataclass
class SetupReport:
    packages: Any = None
    services: Dict[str, str] = field(default_factory=dict)
    username: str = ""
    keys_added: int = 0


def provision_system(config: SetupConfig, ask: Optional[Callable[[str], str]] = None) -> SetupReport:
    """Main provisioning workflow."""
    from server_setup import prompts
    from server_setup.packages import install_packages
    from server_setup.hardening import configure_system
    from server_setup.users import add_new_user
    from server_setup.keys import add_ssh_keys

    ask = ask or prompts.ask
    report = SetupReport()

    # Phase 1: Packages (best effort per item)
    log_info("Installing packages...")
    report.packages = install_packages(config)

    # Phase 2: sshd, fail2ban and system settings
    log_info("Setting up ssh and other configs...")
    report.services = configure_system(config)

    # Phase 3: Admin user
    log_info("Adding new user...")
    report.username = add_new_user(config, ask)

    # Phase 4: Authorized keys
    if report.username:
        log_info("Adding ssh public keys to authorized list...")
        report.keys_added = add_ssh_keys(report.username, config, ask)

    return report

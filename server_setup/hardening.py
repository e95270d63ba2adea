"""sshd and fail2ban hardening plus a few system settings.

Nothing in here is best effort. A half-applied sshd or fail2ban change is
worse than a failed run, so every error propagates to the caller.
"""
import shutil
from typing import Dict, List

import sh

from server_setup.config import SetupConfig
from server_setup.configfile import INI, SSHD, ConfigPatchError, Directive, apply_directives, patch_file
from server_setup.utils import log_action, log_info


def sshd_directives(config: SetupConfig) -> List[Directive]:
    """Desired sshd_config lines: no root login, no passwords, custom port."""
    return [
        Directive("PermitRootLogin", "no"),
        Directive("PasswordAuthentication", "no"),
        Directive("Port", str(config.ssh_port)),
    ]


def jail_directives(config: SetupConfig) -> List[Directive]:
    """Desired jail.local lines for the sshd jail and the ban defaults."""
    return [
        Directive("backend", config.ssh_jail_backend, section="sshd"),
        Directive("bantime", config.ban_time, section="DEFAULT"),
        Directive("findtime", config.find_time, section="DEFAULT"),
        Directive("maxretry", str(config.max_retry), section="DEFAULT"),
    ]


def harden_sshd(config: SetupConfig) -> bool:
    """Disable root and password logins, move sshd to the configured port.

    The new config is checked with ``sshd -t -f`` as a side file and only
    then moved over the live one, so a rejected config never lands on disk.
    """
    path = config.sshd_config_path
    log_action(f"Hardening {path}...")
    original = path.read_text()
    updated = apply_directives(original, sshd_directives(config), SSHD)

    candidate = path.with_name(path.name + ".new")
    candidate.write_text(updated)
    try:
        shutil.copymode(path, candidate)
        sh.sshd("-t", "-f", str(candidate))
    except Exception:
        candidate.unlink()
        raise

    if updated == original:
        candidate.unlink()
        log_info(f"{path} already hardened.")
        return False
    candidate.replace(path)
    log_action(f"Updated {path}")
    return True


def effective_sshd_settings(output: str) -> Dict[str, List[str]]:
    """Group ``sshd -T`` output into lowercase key -> values."""
    settings = {}
    for line in output.splitlines():
        key, _, value = line.strip().partition(" ")
        if key:
            settings.setdefault(key.lower(), []).append(value.strip())
    return settings


def verify_sshd(config: SetupConfig) -> None:
    """Check the settings sshd actually uses, drop-in files included."""
    effective = effective_sshd_settings(str(sh.sshd("-T")))
    for directive in sshd_directives(config):
        values = effective.get(directive.key.lower(), [])
        if [v.lower() for v in values] != [directive.value.lower()]:
            raise ConfigPatchError(
                f"sshd uses {directive.key} {' '.join(values) or '(unset)'} instead of "
                f"{directive.value}; check the files under sshd_config.d"
            )


def reset_jail_local(config: SetupConfig) -> None:
    """Recreate jail.local from the packaged jail.conf."""
    local = config.jail_local_path
    if local.exists():
        local.unlink()
    shutil.copyfile(config.jail_conf_path, local)


def configure_fail2ban(config: SetupConfig) -> None:
    """Rebuild jail.local and apply the sshd jail overrides."""
    log_action(f"Rebuilding {config.jail_local_path}...")
    reset_jail_local(config)
    patch_file(config.jail_local_path, jail_directives(config), INI)


def restart_service(name: str) -> None:
    """Restart a systemd unit."""
    sh.systemctl("restart", name)


def service_status(name: str) -> str:
    """Return what ``systemctl is-active`` says about a service."""
    try:
        output = sh.systemctl("is-active", name)
    except sh.ErrorReturnCode as e:
        # non-zero exit just means "not active"; the state is still on stdout
        return e.stdout.decode().strip() or "unknown"
    return str(output).strip()


def restart_services(config: SetupConfig) -> Dict[str, str]:
    """Restart sshd and fail2ban and report whether they came back up."""
    labels = {
        config.ssh_service: "SSH",
        config.fail2ban_service: "Fail2ban",
    }
    statuses = {}
    for service, label in labels.items():
        log_action(f"Restarting {service}...")
        restart_service(service)
        statuses[service] = service_status(service)
        log_info(f"{label}: {statuses[service]}")
    return statuses


def set_login_shell(user: str, shell: str) -> None:
    """Change the login shell of an existing user."""
    sh.chsh("-s", shell, user)


def set_timezone(timezone: str) -> None:
    """Set the system timezone."""
    sh.timedatectl("set-timezone", timezone)


def configure_system(config: SetupConfig) -> Dict[str, str]:
    """Apply sshd and fail2ban changes, restart both, set root shell and timezone."""
    harden_sshd(config)
    verify_sshd(config)
    configure_fail2ban(config)
    statuses = restart_services(config)

    log_action(f"Setting root shell to {config.shell}...")
    set_login_shell("root", config.shell)
    log_action(f"Setting timezone to {config.timezone}...")
    set_timezone(config.timezone)
    return statuses

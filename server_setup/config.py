"""Built-in setup profiles."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

OH_MY_ZSH_INSTALLER = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"
GRML_ZSHRC = "https://git.grml.org/f/grml-etc-core/etc/zsh/zshrc"
DOCKER_INSTALLER = "https://get.docker.com"
BUN_INSTALLER = "https://bun.sh/install"

BASE_PACKAGES = [
    'sudo',
    'ufw',
    'fail2ban',
    'htop',
    'curl',
    'nginx',
    'tmux',
    'git',
    'certbot',
    'python3-certbot-dns-cloudflare',
    'zsh',
    'nmap',
]


@dataclass(frozen=True)
class ShellFramework:
    """A shell enhancement installed for root and copied to the new user.

    ``mode`` is ``"run"`` when the url points at an installer script, or
    ``"template"`` when it points at a zshrc to drop in place.
    """
    name: str
    installer_url: str
    mode: str = "run"
    artifacts: Tuple[str, ...] = (".zshrc",)


OH_MY_ZSH = ShellFramework("oh-my-zsh", OH_MY_ZSH_INSTALLER, "run", (".oh-my-zsh", ".zshrc"))
GRML = ShellFramework("grml", GRML_ZSHRC, "template", (".zshrc",))


@dataclass(frozen=True)
class SetupConfig:
    packages: List[str] = field(default_factory=lambda: list(BASE_PACKAGES))
    ssh_port: int = 2222
    ssh_service: str = "ssh"
    fail2ban_service: str = "fail2ban"
    shell: str = "/usr/bin/zsh"
    shell_framework: ShellFramework = OH_MY_ZSH
    timezone: str = "America/Phoenix"
    user_groups: Tuple[str, ...] = ("sudo", "docker")
    toolchain_installer: Optional[str] = BUN_INSTALLER
    sshd_config_path: Path = Path("/etc/ssh/sshd_config")
    jail_conf_path: Path = Path("/etc/fail2ban/jail.conf")
    jail_local_path: Path = Path("/etc/fail2ban/jail.local")
    root_home: Path = Path("/root")
    home_root: Path = Path("/home")
    prompt_attempts: Optional[int] = None
    ssh_jail_backend: str = "systemd"
    ban_time: str = "60m"
    find_time: str = "60m"
    max_retry: int = 3

    def home_of(self, username: str) -> Path:
        """Home directory a new user gets under home_root."""
        return self.home_root / username


PROFILES = {
    "ohmyzsh": SetupConfig(packages=BASE_PACKAGES + ['autojump']),
    "grml": SetupConfig(
        packages=BASE_PACKAGES + ['zsh-syntax-highlighting', 'dnsutils', 'build-essential'],
        ssh_port=2022,
        shell_framework=GRML,
    ),
}

DEFAULT_PROFILE = "ohmyzsh"


def get_profile(name: str) -> SetupConfig:
    """Look up a built-in profile by name."""
    try:
        return PROFILES[name]
    except KeyError:
        raise KeyError(f"Unknown profile '{name}'. Choose from: {', '.join(sorted(PROFILES))}")

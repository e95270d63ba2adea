"""Package installation for Debian-based servers."""
import os
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Iterable, List

import sh

from server_setup.config import DOCKER_INSTALLER, SetupConfig, ShellFramework
from server_setup.steps import Step
from server_setup.utils import command_exists, log_action, log_info


@dataclass
class InstallResult:
    installed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def _apt_env() -> dict:
    return {**os.environ, "DEBIAN_FRONTEND": "noninteractive"}


def _refresh_index() -> None:
    """apt-get update followed by upgrade."""
    sh.apt_get("update", "-y", "-qq", _env=_apt_env())
    sh.apt_get("upgrade", "-y", "-qq", _env=_apt_env())


def refresh_index() -> bool:
    """Update the package index and upgrade installed packages."""
    log_action("Refreshing package index...")
    return Step("refresh package index", _refresh_index, isolate=True).run().ok


def install_package(package: str) -> None:
    """Install a single package without prompting."""
    sh.apt_get("-y", "-qq", "install", package, _env=_apt_env())


def install_all(packages: Iterable[str]) -> InstallResult:
    """Install each package on its own so one failure can't block the rest."""
    result = InstallResult()
    for package in packages:
        log_action(f"Installing {package}...")
        outcome = Step(f"install {package}", partial(install_package, package), isolate=True).run()
        if outcome.ok:
            result.installed.append(package)
        else:
            result.failed.append(package)
    return result


def _run_remote_script(url: str, *args: str) -> None:
    """Fetch a shell script and run it with bash, passing args through."""
    script = sh.curl("-fsSL", url)
    sh.bash("-c", str(script), *args)


def install_container_runtime() -> bool:
    """Install Docker through its convenience script unless already present."""
    if command_exists('docker'):
        log_info("Docker is already installed.")
        return True

    log_action("docker not found. Installing Docker...")
    return Step("install docker", partial(_run_remote_script, DOCKER_INSTALLER), isolate=True).run().ok


def _install_framework(framework: ShellFramework, root_home: Path) -> None:
    """Run the framework installer, or save its zshrc template for root."""
    if framework.mode == "template":
        content = sh.curl("-fsSL", framework.installer_url)
        (root_home / ".zshrc").write_text(str(content))
    else:
        _run_remote_script(framework.installer_url, "--", "--unattended")


def install_shell_framework(framework: ShellFramework, root_home: Path) -> bool:
    """Install the shell framework for root; failures are not fatal."""
    if framework.mode == "run" and (root_home / framework.artifacts[0]).exists():
        log_info(f"{framework.name} is already installed.")
        return True

    log_action(f"Installing {framework.name}...")
    return Step(f"install {framework.name}", partial(_install_framework, framework, root_home), isolate=True).run().ok


def install_packages(config: SetupConfig) -> InstallResult:
    """Install the configured package set, Docker and the shell framework."""
    refresh_index()
    result = install_all(config.packages)
    log_info(f"Installed {len(result.installed)} of {len(config.packages)} packages.")
    if result.failed:
        log_info(f"Failed packages: {', '.join(result.failed)}")
    install_container_runtime()
    install_shell_framework(config.shell_framework, config.root_home)
    return result

"""Shared fixtures for the server setup tests."""
import dataclasses

import pytest

from server_setup import utils
from server_setup.config import get_profile

from samples import JAIL_CONF, SSHD_CONFIG


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep verbose output from leaking between tests."""
    monkeypatch.setattr(utils, "_verbose", False)


@pytest.fixture
def config(tmp_path):
    """The default profile pointed at files under tmp_path."""
    root_home = tmp_path / "root"
    home_root = tmp_path / "home"
    fail2ban = tmp_path / "fail2ban"
    for directory in (root_home, home_root, fail2ban):
        directory.mkdir()

    sshd_config = tmp_path / "sshd_config"
    sshd_config.write_text(SSHD_CONFIG)
    jail_conf = fail2ban / "jail.conf"
    jail_conf.write_text(JAIL_CONF)

    return dataclasses.replace(
        get_profile("ohmyzsh"),
        sshd_config_path=sshd_config,
        jail_conf_path=jail_conf,
        jail_local_path=fail2ban / "jail.local",
        root_home=root_home,
        home_root=home_root,
    )

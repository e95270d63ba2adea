"""Tests for server_setup.utils module."""
import pytest
from unittest.mock import patch
from server_setup import utils


def test_command_exists_when_command_found():
    """Test command_exists returns True when command is found."""
    with patch('shutil.which', return_value='/usr/bin/docker'):
        assert utils.command_exists('docker') is True


def test_command_exists_when_command_not_found():
    """Test command_exists returns False when command not found."""
    with patch('shutil.which', return_value=None):
        assert utils.command_exists('nonexistent') is False


def test_is_root_when_root():
    """Test is_root returns True when running as root."""
    with patch('os.geteuid', return_value=0):
        assert utils.is_root() is True


def test_is_root_when_not_root():
    """Test is_root returns False when not running as root."""
    with patch('os.geteuid', return_value=1000):
        assert utils.is_root() is False


def test_is_root_ignores_user_variable():
    """Test a spoofed USER variable does not grant root."""
    with patch.dict('os.environ', {'USER': 'root'}), patch('os.geteuid', return_value=1000):
        assert utils.is_root() is False


def test_log_info(capsys):
    """Test log_info outputs formatted message."""
    utils.log_info("Test message")
    captured = capsys.readouterr()
    assert "[INFO] Test message\n" == captured.out


def test_log_action(capsys):
    """Test log_action outputs indented message."""
    utils.log_action("Installing package")
    captured = capsys.readouterr()
    assert "  -> Installing package\n" == captured.out


def test_log_debug_hidden_by_default(capsys):
    """Test log_debug prints nothing unless verbose."""
    utils.setup_logging(verbose=False)
    utils.log_debug("Running: install git")
    assert capsys.readouterr().out == ""


def test_log_debug_verbose(capsys):
    """Test log_debug prints in verbose mode."""
    utils.setup_logging(verbose=True)
    utils.log_debug("Running: install git")
    assert capsys.readouterr().out == "  .. Running: install git\n"


def test_setup_error_is_runtime_error():
    with pytest.raises(RuntimeError):
        raise utils.SetupError("boom")

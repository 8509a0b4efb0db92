from unittest import mock
import logging

import pytest

from githubfs.__main__ import main
from githubfs.constants import GITHUBFS_ERROR_CODE
from githubfs.errors import AuthFailureError, InvalidConfigurationError
from githubfs.logger import log


def test_no_args():
    with pytest.raises(SystemExit):
        main([])


def test_debug_flag_set():
    with mock.patch("githubfs.operations.MountOperations"):
        with pytest.raises(SystemExit):
            main(["--debug", "acme", "/mnt/acme"])

        assert log.getEffectiveLevel() == logging.DEBUG


def test_debug_flag_not_set():
    with mock.patch("githubfs.operations.MountOperations"):
        with pytest.raises(SystemExit):
            main(["acme", "/mnt/acme"])

        assert log.getEffectiveLevel() == logging.INFO


def test_mount_operations():
    with mock.patch("githubfs.operations.MountOperations") as mock_operations:
        mock_operations().run.return_value = 0

        with pytest.raises(SystemExit) as e:
            main(["acme", "/mnt/acme"])

        assert mock_operations().run.called
        assert e.value.code == 0


def test_config_is_passed_along(tmp_path):
    (tmp_path / "config").write_text("[cache]\ndirectory_ttl = 12\n")

    with mock.patch("githubfs.operations.MountOperations") as mock_operations:
        with pytest.raises(SystemExit):
            main(["--config", str(tmp_path / "config"), "acme"])

    args, config = mock_operations.call_args[0]

    assert args.owner == "acme"
    assert config.cache.directory_ttl == 12


def test_invalid_mount_options(tmp_path, caplog):
    with pytest.raises(SystemExit) as e:
        main(["-o", "rw", "acme", str(tmp_path / "mnt")])

    assert e.value.code == GITHUBFS_ERROR_CODE
    assert "invalid configuration: githubfs must be mounted read-only" in caplog.text

    # Nothing is created for a mount that is rejected
    assert not (tmp_path / "mnt").exists()


def test_invalid_configuration(caplog):
    with mock.patch("githubfs.operations.MountOperations") as mock_operations:
        mock_operations().run.side_effect = InvalidConfigurationError("foo")

        with pytest.raises(SystemExit) as e:
            main(["acme"])

    assert e.value.code == GITHUBFS_ERROR_CODE
    assert "invalid configuration: foo" in caplog.text


def test_rejected_credentials(caplog):
    with mock.patch("githubfs.operations.MountOperations") as mock_operations:
        mock_operations().run.side_effect = AuthFailureError("Bad credentials")

        with pytest.raises(SystemExit) as e:
            main(["acme"])

    assert e.value.code == GITHUBFS_ERROR_CODE
    assert "credentials were rejected" in caplog.text


def test_mount_failure(caplog):
    with mock.patch("githubfs.operations.MountOperations") as mock_operations:
        mock_operations().run.side_effect = Exception("foo")

        with pytest.raises(SystemExit) as e:
            main(["acme"])

    assert e.value.code == GITHUBFS_ERROR_CODE
    assert "failed to mount file system: foo" in caplog.text


def test_interrupt():
    with mock.patch("githubfs.operations.MountOperations") as mock_operations:
        mock_operations().run.side_effect = KeyboardInterrupt()

        with pytest.raises(SystemExit) as e:
            main(["acme"])

    assert e.value.code == 130

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from mitmconf import log
from mitmconf.models import NetworkInfo


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo setup_logging so caplog keeps receiving mitmconf records."""
    yield
    logger = logging.getLogger("mitmconf")
    for handler in log._installed:
        logger.removeHandler(handler)
        handler.close()
    log._installed.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Run from an empty directory with no home config file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
    return tmp_path


@pytest.fixture
def host_env():
    """Root privileges and a default route on eth0."""
    with patch("mitmconf.network.is_privileged", return_value=True), patch(
        "mitmconf.network.default_route_iface", return_value="eth0"
    ):
        yield


@pytest.fixture
def net():
    return NetworkInfo(iface="eth0", ip="192.168.1.5", mac="aa:bb:cc:dd:ee:01", gateway="192.168.1.1")

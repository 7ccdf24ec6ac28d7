"""Pytest fixtures for outtree tests."""

import platformdirs
import pytest


@pytest.fixture(autouse=True)
def isolated_config_dirs(tmp_path, monkeypatch):
    """Point user and machine config lookups at empty temporary directories.

    Keeps a developer's own outtree config from leaking into test runs.
    """
    monkeypatch.setattr(platformdirs, "user_config_dir", lambda appname: str(tmp_path / "user" / appname))
    monkeypatch.setattr(platformdirs, "site_config_dir", lambda appname: str(tmp_path / "site" / appname))

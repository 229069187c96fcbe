import stat

import pytest


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory, monkeypatch):
    """Keep settings and log files out of the real home directory."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("NIMSFOREST_LOG_FILE", str(home / "nimsforestpm.log"))
    for var in ("NIMSFOREST_LOG_LEVEL", "NIMSFOREST_DISCOVERY_TIMEOUT", "NIMSFOREST_EXECUTE_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def make_script(tmp_path):
    """Write an executable /bin/sh script and return its path."""
    def _make(relpath: str, body: str, executable: bool = True):
        path = tmp_path / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("#!/bin/sh\n" + body + "\n")
        if executable:
            path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        else:
            path.chmod(0o644)
        return path
    return _make

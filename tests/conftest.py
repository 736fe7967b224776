import pytest


@pytest.fixture(autouse=True)
def isolate_home_config(tmp_path, monkeypatch):
    """Point gitp at an empty per-test config directory.

    Tests must never read or rewrite the user's real ``~/.gitp`` file,
    nor reach the package index for the update check.
    """
    config_dir = tmp_path / "gitp_home"
    monkeypatch.setenv("GITP_HOME", str(config_dir))
    monkeypatch.setenv("GITP_NO_UPDATE_CHECK", "1")
    return config_dir

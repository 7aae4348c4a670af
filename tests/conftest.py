from __future__ import annotations  # noqa: D100

import pytest


@pytest.fixture(autouse=True)
def no_user_cfg(tmp_path, monkeypatch):
    """
    This fixture ensures that tests don't pick up the user's
    ``~/.config/helm.cfg``.
    """
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("HELM_TB", raising=False)

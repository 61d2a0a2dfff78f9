"""
tests/test_cli.py -- Tests for the init-db command in main.py.
"""

from __future__ import annotations

import pytest

import main
from auth.store import UserStore
from auth.tokens import verify_password
from core.config import Settings


@pytest.fixture()
def settings(tmp_path, monkeypatch) -> Settings:
    s = Settings(debug=True, database_url=f"sqlite:///{tmp_path / 'cli.db'}", admin_password="")
    monkeypatch.setattr(main, "get_settings", lambda: s)
    return s


def test_init_db_seeds_admin_once(settings: Settings, capsys) -> None:
    argv = ["init-db", "--admin-email", "root@test.local", "--admin-password", "rootpass123"]
    assert main.main(argv) == 0
    assert "created" in capsys.readouterr().out

    assert main.main(argv[:-1] + ["otherpass123"]) == 0
    assert "left unchanged" in capsys.readouterr().out

    store = UserStore(settings.database_url)
    try:
        admin = store.get_by_email("root@test.local")
        assert admin.role == "admin"
        assert verify_password("rootpass123", admin.hashed_password)
    finally:
        store.close()


def test_init_db_requires_password(settings: Settings, capsys) -> None:
    assert main.main(["init-db"]) == 2
    assert "password" in capsys.readouterr().out.lower()


def test_init_db_rejects_long_password(settings: Settings) -> None:
    assert main.main(["init-db", "--admin-password", "x" * 73]) == 2


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        main.main([])

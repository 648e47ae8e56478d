"""
tests/test_cli.py -- The admin CLI in main.py, run in-process against a temp SQLite file.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import inspect

from auth.store import UserStore
from auth.tokens import verify_password
from core.database import create_db_engine
from main import main


@pytest.fixture()
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'cli.db'}"


def test_init_db_creates_all_tables(db_url: str, capsys) -> None:
    assert main(["init-db", "--db-url", db_url]) == 0
    engine = create_db_engine(db_url)
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert {"users", "expenses", "assets", "liabilities", "categories"} <= tables
    out = capsys.readouterr().out
    assert "Database ready" in out
    assert "No accounts yet" in out


def test_init_db_is_idempotent(db_url: str, capsys) -> None:
    assert main(["init-db", "--db-url", db_url]) == 0
    assert main(["create-user", "--email", "a@example.com", "--password", "Abcdefg1", "--db-url", db_url]) == 0
    capsys.readouterr()
    assert main(["init-db", "--db-url", db_url]) == 0
    assert "No accounts yet" not in capsys.readouterr().out


def test_create_user(db_url: str) -> None:
    code = main(
        ["create-user", "--email", "Admin@Example.com", "--password", "Abcdefg1", "--first-name", "Grace", "--db-url", db_url]
    )
    assert code == 0
    engine = create_db_engine(db_url)
    try:
        user = UserStore(engine).get_by_email("admin@example.com")
    finally:
        engine.dispose()
    assert user is not None
    assert user.first_name == "Grace"
    assert verify_password("Abcdefg1", user.password_hash)


def test_create_user_rejects_weak_password(db_url: str, capsys) -> None:
    assert main(["create-user", "--email", "a@example.com", "--password", "short", "--db-url", db_url]) == 1
    assert "at least 8 characters" in capsys.readouterr().err


def test_create_user_rejects_bad_email(db_url: str, capsys) -> None:
    assert main(["create-user", "--email", "nope", "--password", "Abcdefg1", "--db-url", db_url]) == 1
    assert "Invalid email format" in capsys.readouterr().err


def test_create_user_duplicate(db_url: str, capsys) -> None:
    args = ["create-user", "--email", "a@example.com", "--password", "Abcdefg1", "--db-url", db_url]
    assert main(args) == 0
    assert main(args) == 1
    assert "already exists" in capsys.readouterr().err


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "init-db" in capsys.readouterr().out

"""
Unit tests for database.py
"""
import database


def test_sessions_share_one_engine(db_url):
    first, second = database.get_db(), database.get_db()
    try:
        assert first.get_bind() is second.get_bind()
        assert first.get_bind() is database.init_db()
    finally:
        first.close()
        second.close()


def test_new_url_gets_its_own_engine(db_url, tmp_path, monkeypatch):
    original = database.init_db()
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'other.db'}")
    assert database.init_db() is not original


def test_conversation_title():
    assert database.conversation_title("  Denver  ") == "Denver"
    assert database.conversation_title("x" * 60) == "x" * 50 + "..."

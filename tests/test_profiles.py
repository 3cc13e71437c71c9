import sqlite3

from services.profiles import InMemoryProfileStore, SqliteProfileStore


def test_in_memory_unknown_is_empty():
    store = InMemoryProfileStore({"u1": {"react": 3}})
    assert store.get("u1") == {"react": 3}
    assert store.get("nobody") == {}


def test_in_memory_returns_copies():
    store = InMemoryProfileStore({"u1": {"react": 3}})
    store.get("u1")["react"] = 99
    assert store.get("u1") == {"react": 3}


def test_sqlite_roundtrip(tmp_path):
    store = SqliteProfileStore(tmp_path / "profiles.db")
    store.upsert("u1", {"React": 5, "Node.js": 3})
    assert store.get("u1") == {"React": 5, "Node.js": 3}

    store.upsert("u1", {"Go": 1})
    assert store.get("u1") == {"Go": 1}
    assert store.get("nobody") == {}


def test_sqlite_errors_read_as_no_profile(tmp_path, monkeypatch):
    store = SqliteProfileStore(tmp_path / "profiles.db")

    def boom():
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(store, "_connect", boom)
    assert store.get("u1") == {}

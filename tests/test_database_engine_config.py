
def test_get_engine_kwargs_sqlite_has_check_same_thread(monkeypatch):
    # Import lazily so monkeypatch can affect env usage deterministically.
    from ponto.database import database as db

    kwargs = db.get_engine_kwargs("sqlite:///./ponto.db")
    assert "connect_args" in kwargs
    assert kwargs["connect_args"]["check_same_thread"] is False
    # SQLite should not require pool sizing knobs.
    assert "pool_size" not in kwargs
    assert "max_overflow" not in kwargs
    assert kwargs["pool_pre_ping"] is True


def test_get_engine_kwargs_postgres_has_conservative_pooling(monkeypatch):
    from ponto.database import database as db

    monkeypatch.setenv("DB_POOL_SIZE", "7")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "3")
    monkeypatch.setenv("DB_POOL_TIMEOUT_SEC", "15")

    kwargs = db.get_engine_kwargs("postgresql+psycopg://u:p@localhost:5432/ponto")
    assert "connect_args" not in kwargs
    assert kwargs["pool_pre_ping"] is True
    assert kwargs["pool_size"] == 7
    assert kwargs["max_overflow"] == 3
    assert kwargs["pool_timeout"] == 15


def test_debug_turns_on_echo(monkeypatch):
    from ponto.database import database as db

    monkeypatch.setenv("DEBUG", "true")
    assert db.get_engine_kwargs("sqlite:///./ponto.db")["echo"] is True


def test_sqlite_pragmas_listener_is_guarded():
    from ponto.database import database as db

    assert db._is_sqlite_url("sqlite:///./ponto.db") is True
    assert db._is_sqlite_url("postgresql+psycopg://u:p@localhost/db") is False


def test_init_db_creates_documents_table(tmp_path, monkeypatch):
    """init_db registers the document table on the metadata."""
    from sqlalchemy import create_engine, inspect
    from ponto.database import database as db

    engine = create_engine(f"sqlite:///{tmp_path / 'ponto.db'}", connect_args={"check_same_thread": False})
    monkeypatch.setattr(db, "engine", engine)

    db.init_db()

    assert "documents" in inspect(engine).get_table_names()

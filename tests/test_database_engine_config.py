def test_get_engine_kwargs_sqlite_has_check_same_thread(monkeypatch):
    # Import lazily so monkeypatch can affect env usage deterministically.
    from studygrid.database import database as db

    kwargs = db.get_engine_kwargs("sqlite:///./studygrid.db")
    assert "connect_args" in kwargs
    assert kwargs["connect_args"]["check_same_thread"] is False
    # SQLite should not require pool sizing knobs.
    assert "pool_size" not in kwargs
    assert "max_overflow" not in kwargs
    assert kwargs["pool_pre_ping"] is True


def test_get_engine_kwargs_postgres_has_conservative_pooling(monkeypatch):
    from studygrid.database import database as db

    monkeypatch.setenv("DB_POOL_SIZE", "3")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "2")
    monkeypatch.setenv("DB_POOL_TIMEOUT_SEC", "10")

    kwargs = db.get_engine_kwargs("postgresql+psycopg://u:p@localhost:5432/db")
    assert "connect_args" not in kwargs
    assert kwargs["pool_pre_ping"] is True
    assert kwargs["pool_size"] == 3
    assert kwargs["max_overflow"] == 2
    assert kwargs["pool_timeout"] == 10


def test_debug_enables_echo(monkeypatch):
    from studygrid.database import database as db

    monkeypatch.setenv("DEBUG", "true")
    assert db.get_engine_kwargs("sqlite:///./studygrid.db")["echo"] is True


def test_sqlite_pragmas_listener_is_guarded():
    # Verify the helper used by the connect event guard behaves as expected.
    from studygrid.database import database as db

    assert db._is_sqlite_url("sqlite:///./studygrid.db") is True
    assert db._is_sqlite_url("postgresql+psycopg://u:p@localhost/db") is False


def test_init_db_creates_schedule_blocks_table_for_sqlite(tmp_path, monkeypatch):
    """SQLite databases get their schema from create_all, without Alembic."""
    from sqlalchemy import inspect
    from studygrid.database import database as db

    url = f"sqlite:///{tmp_path / 'fresh.db'}"
    engine = db.build_engine(url)
    monkeypatch.setattr(db, "engine", engine)
    monkeypatch.setenv("RUN_MIGRATIONS", "true")

    db.init_db()

    inspector = inspect(engine)
    assert "schedule_blocks" in inspector.get_table_names()
    columns = {column["name"] for column in inspector.get_columns("schedule_blocks")}
    assert {"user_id", "topic_name", "day_of_week", "start_hour", "end_hour", "status", "order_index"} <= columns

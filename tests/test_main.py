import logging

from sqlalchemy import create_engine, inspect

from taskdesk import main
from taskdesk.core.config import settings

APP_LOGGERS = ("taskdesk.core.errors", "taskdesk.services.auth", "taskdesk.services.tasks", "taskdesk.main")


def test_prod_migrations_keep_app_logging(monkeypatch, tmp_path):
    db_file = tmp_path / "prod.db"
    monkeypatch.setattr(settings, "env", "prod")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("AUTO_APPLY_MIGRATIONS", "1")
    loggers = [logging.getLogger(name) for name in APP_LOGGERS]
    root = logging.getLogger()
    handlers_before = list(root.handlers)
    level_before = root.level

    main._run_migrations_if_needed()

    assert [lg.disabled for lg in loggers] == [False] * len(loggers)
    assert root.handlers == handlers_before
    assert root.level == level_before

    engine = create_engine(f"sqlite:///{db_file}")
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert {"users", "tasks", "alembic_version"} <= tables


def test_migrations_skipped_outside_prod(monkeypatch, tmp_path):
    db_file = tmp_path / "dev.db"
    monkeypatch.setattr(settings, "env", "dev")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    main._run_migrations_if_needed()
    assert not db_file.exists()

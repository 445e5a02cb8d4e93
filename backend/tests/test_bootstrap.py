import pytest
from sqlalchemy import create_engine, text

from jot.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_schema_gaps_report_missing_tables_and_columns():
    engine = create_engine("sqlite+pysqlite://")
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE users (id VARCHAR(36) PRIMARY KEY, email VARCHAR(320))"))
        missing_tables, missing_columns = bootstrap.find_schema_gaps(connection)

    assert missing_tables == ["email_otps", "files", "folders", "notes"]
    assert missing_columns == {
        "users": ["full_name", "hashed_password", "mobile_number", "profile_picture_url"],
    }
    engine.dispose()


def test_complete_schema_has_no_gaps(session_factory):
    engine = session_factory.kw["bind"]
    with engine.connect() as connection:
        assert bootstrap.find_schema_gaps(connection) == ([], {})

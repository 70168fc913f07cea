"""Unit tests for the per-backend bounds of the order transaction."""

from __future__ import annotations

from unittest.mock import MagicMock, call

import pytest

from django.conf import settings as django_settings

from modules.orders.transaction import bounded_transaction

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _timeouts(settings):
    settings.ORDER_LOCK_TIMEOUT = 5
    settings.ORDER_STATEMENT_TIMEOUT = 10


def _connection(vendor):
    # The atomic block itself runs on the real test database.
    conn = MagicMock(vendor=vendor, alias="default")
    cursor = conn.cursor.return_value.__enter__.return_value
    return conn, cursor


class TestPostgres:
    def test_sets_transaction_scoped_timeouts(self):
        conn, cursor = _connection("postgresql")

        with bounded_transaction(conn):
            pass

        assert cursor.execute.call_args_list == [
            call("SET LOCAL lock_timeout = '5s'"),
            call("SET LOCAL statement_timeout = '10s'"),
        ]


class TestMySQL:
    def test_sets_lock_wait_then_restores_previous_value(self):
        conn, cursor = _connection("mysql")
        cursor.fetchone.return_value = (50,)

        with bounded_transaction(conn):
            assert cursor.execute.call_count == 2

        assert cursor.execute.call_args_list == [
            call("SELECT @@SESSION.innodb_lock_wait_timeout"),
            call("SET SESSION innodb_lock_wait_timeout = %s", [5]),
            call("SET SESSION innodb_lock_wait_timeout = %s", [50]),
        ]

    def test_restores_previous_value_when_the_body_fails(self):
        conn, cursor = _connection("mysql")
        cursor.fetchone.return_value = (50,)

        with pytest.raises(RuntimeError):
            with bounded_transaction(conn):
                raise RuntimeError("step failed")

        assert cursor.execute.call_args_list[-1] == call(
            "SET SESSION innodb_lock_wait_timeout = %s", [50]
        )


class TestSQLite:
    def test_issues_no_statements(self):
        conn, cursor = _connection("sqlite")

        with bounded_transaction(conn):
            pass

        conn.cursor.assert_not_called()

    def test_writers_take_the_lock_at_begin(self):
        database = django_settings.DATABASES["default"]
        if database["ENGINE"] != "django.db.backends.sqlite3":
            pytest.skip("SQLite-only settings")

        assert database["OPTIONS"]["transaction_mode"] == "IMMEDIATE"
        # Threads need a shared file, not a per-connection in-memory database.
        assert database["TEST"]["NAME"].endswith(".sqlite3")

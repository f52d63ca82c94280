"""Tests for driver kinds, argument mapping, and the connection factory."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from mintdb.database.drivers import (
    DRIVER_SPECS,
    DriverKind,
    build_connect_args,
    connect,
    default_port,
    load_driver_module,
    translate_placeholders,
)
from mintdb.database.models import ConnectionConfig
from mintdb.exceptions import DatabaseConnectionError, UnsupportedDriverError


class TestDriverKind:
    """Test driver name parsing and defaults."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("mariadb", DriverKind.MARIADB),
            ("MySQL", DriverKind.MYSQL),
            (" postgres ", DriverKind.POSTGRES),
            ("sqlite", DriverKind.SQLITE),
            ("ODBC", DriverKind.ODBC),
            (DriverKind.SQLITE, DriverKind.SQLITE),
        ],
    )
    def test_parse(self, raw, expected):
        """Test known names resolve case-insensitively."""
        assert DriverKind.parse(raw) is expected

    def test_parse_unknown(self):
        """Test unknown names raise UnsupportedDriverError."""
        with pytest.raises(UnsupportedDriverError):
            DriverKind.parse("oracle")

    @pytest.mark.parametrize(
        ("driver", "port"),
        [
            ("mariadb", 3306),
            ("mysql", 3306),
            ("postgres", 5432),
            ("sqlite", None),
            ("odbc", None),
            ("oracle", None),
        ],
    )
    def test_default_port(self, driver, port):
        """Test default ports per driver."""
        assert default_port(driver) == port

    def test_every_kind_has_a_driver_module(self):
        """Test each driver kind is served by a module."""
        assert set(DRIVER_SPECS) == set(DriverKind)


class TestBuildConnectArgs:
    """Test mapping a configuration to driver arguments."""

    def test_server_drivers(self):
        """Test MariaDB/MySQL/PostgreSQL arguments."""
        config = ConnectionConfig(
            driver="postgres",
            host="localhost",
            dbname="app",
            user="bob",
            password="secret",  # pragma: allowlist secret
        )
        assert build_connect_args(config) == {
            "dbname": "app",
            "host": "localhost",
            "user": "bob",
            "password": "secret",  # pragma: allowlist secret
            "port": 5432,
        }

    def test_explicit_port(self):
        """Test an explicit port wins over the default."""
        config = ConnectionConfig(driver="mysql", host="db", port=3307)
        assert build_connect_args(config)["port"] == 3307

    def test_invalid_port_omitted(self):
        """Test a non-positive port is left out."""
        config = ConnectionConfig(driver="mariadb", host="db", port=0)
        assert "port" not in build_connect_args(config)

    def test_sqlite_prefers_filepath(self):
        """Test SQLite uses filepath over dbname."""
        config = ConnectionConfig(driver="sqlite", dbname="ignored", filepath="a.db")
        assert build_connect_args(config) == {"dbname": "a.db"}

    def test_sqlite_falls_back_to_dbname(self):
        """Test SQLite without filepath uses dbname."""
        config = ConnectionConfig(driver="sqlite", dbname=":memory:")
        assert build_connect_args(config) == {"dbname": ":memory:"}

    def test_odbc_with_dsn(self):
        """Test ODBC with a data source name."""
        config = ConnectionConfig(
            driver="odbc", dsn="Reporting", user="bob", password="pw"
        )
        assert build_connect_args(config) == {
            "dsn": "Reporting",
            "uid": "bob",
            "pwd": "pw",
        }

    def test_odbc_without_dsn(self):
        """Test ODBC without a DSN uses connection-string keywords."""
        config = ConnectionConfig(
            driver="odbc",
            host="sql01",
            dbname="sales",
            user="bob",
            password="pw",
            port=1433,
        )
        assert build_connect_args(config) == {
            "UID": "bob",
            "PWD": "pw",
            "Database": "sales",
            "Server": "sql01",
            "Port": 1433,
        }

    def test_unknown_driver(self):
        """Test an unknown driver is rejected when mapping arguments."""
        config = ConnectionConfig(driver="oracle")
        with pytest.raises(UnsupportedDriverError):
            build_connect_args(config)


class TestTranslatePlaceholders:
    """Test placeholder rewriting."""

    def test_qmark_untouched(self):
        """Test qmark drivers get the SQL unchanged."""
        sql = "SELECT * FROM t WHERE a = ? AND b LIKE '%x'"
        assert translate_placeholders(sql, "qmark") == sql

    def test_format_rewrites(self):
        """Test ? becomes %s for format drivers."""
        sql = "SELECT * FROM users WHERE id = ? AND status = ?"
        assert (
            translate_placeholders(sql, "format")
            == "SELECT * FROM users WHERE id = %s AND status = %s"
        )

    def test_quoted_question_marks_kept(self):
        """Test ? inside literals and identifiers is not a placeholder."""
        sql = "SELECT '?' AS q, \"a?\" FROM t WHERE x = ?"
        assert (
            translate_placeholders(sql, "format")
            == "SELECT '?' AS q, \"a?\" FROM t WHERE x = %s"
        )

    def test_percent_escaped(self):
        """Test literal percent signs are doubled."""
        sql = "SELECT * FROM t WHERE name LIKE 'a%' AND id = ?"
        assert (
            translate_placeholders(sql, "format")
            == "SELECT * FROM t WHERE name LIKE 'a%%' AND id = %s"
        )


class TestConnect:
    """Test the driver connection factory."""

    def _fake_module(self, conn):
        return SimpleNamespace(connect=MagicMock(return_value=conn))

    def test_mysql_arguments_and_init(self):
        """Test MySQL gets renamed keywords, autocommit, and SET NAMES."""
        conn = MagicMock()
        cursor = conn.cursor.return_value
        module = self._fake_module(conn)

        with patch(
            "mintdb.database.drivers.load_driver_module", return_value=module
        ):
            result = connect(
                DriverKind.MYSQL,
                {"dbname": "app", "host": "db", "user": "u", "password": "p"},
                connect_timeout=5,
            )

        assert result is conn
        module.connect.assert_called_once_with(
            autocommit=True,
            charset="utf8mb4",
            database="app",
            host="db",
            user="u",
            password="p",  # pragma: allowlist secret
            connect_timeout=5,
        )
        cursor.execute.assert_called_once_with("SET NAMES 'utf8mb4'")
        cursor.close.assert_called_once()

    def test_postgres_keeps_dbname(self):
        """Test PostgreSQL receives dbname as is."""
        conn = MagicMock()
        module = self._fake_module(conn)

        with patch(
            "mintdb.database.drivers.load_driver_module", return_value=module
        ):
            connect(DriverKind.POSTGRES, {"dbname": "app", "host": "db"})

        module.connect.assert_called_once_with(autocommit=True, dbname="app", host="db")
        conn.cursor.assert_not_called()

    def test_options_override_defaults(self):
        """Test caller options win over connect defaults."""
        module = self._fake_module(MagicMock())

        with patch(
            "mintdb.database.drivers.load_driver_module", return_value=module
        ):
            connect(DriverKind.SQLITE, {"dbname": "x.db"}, check_same_thread=True)

        module.connect.assert_called_once_with(
            isolation_level=None, check_same_thread=True, database="x.db"
        )

    def test_driver_failure_wrapped(self):
        """Test driver errors become DatabaseConnectionError."""
        module = SimpleNamespace(connect=MagicMock(side_effect=OSError("refused")))

        with (
            patch("mintdb.database.drivers.load_driver_module", return_value=module),
            pytest.raises(DatabaseConnectionError) as exc_info,
        ):
            connect(DriverKind.POSTGRES, {"dbname": "app", "host": "db"})

        assert "refused" in exc_info.value.message
        assert exc_info.value.details["host"] == "db"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_init_failure_closes_connection(self):
        """Test a failing init statement closes the new connection."""
        conn = MagicMock()
        conn.cursor.return_value.execute.side_effect = RuntimeError("charset")
        module = self._fake_module(conn)

        with (
            patch("mintdb.database.drivers.load_driver_module", return_value=module),
            pytest.raises(RuntimeError, match="charset"),
        ):
            connect(DriverKind.MARIADB, {"dbname": "app"})

        conn.close.assert_called_once()

    def test_real_sqlite(self, sqlite_file):
        """Test opening a real SQLite database in autocommit mode."""
        conn = connect(DriverKind.SQLITE, {"dbname": str(sqlite_file)})
        try:
            assert conn.isolation_level is None
            conn.execute("CREATE TABLE t (id INTEGER)")
        finally:
            conn.close()
        assert sqlite_file.exists()


class TestLoadDriverModule:
    """Test lazy driver imports."""

    def test_sqlite_available(self):
        """Test the standard library driver loads."""
        assert load_driver_module(DriverKind.SQLITE).__name__ == "sqlite3"

    def test_missing_module(self):
        """Test a missing driver explains which extra to install."""
        with (
            patch(
                "mintdb.database.drivers.importlib.import_module",
                side_effect=ImportError("No module named 'pyodbc'"),
            ),
            pytest.raises(DatabaseConnectionError) as exc_info,
        ):
            load_driver_module(DriverKind.ODBC)

        assert "mintdb[odbc]" in exc_info.value.hint

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from typing import Any

import pytest
from pyspark.sql import SparkSession

from seat_usage.errors import QueryExecutionError, TableAlreadyExistsError

# Names of fixture that require Spark to be available
_SPARK_FIXTURE_NAME = "spark_fixture"


def quiet_py4j() -> None:
    """Turn down Spark logging during the test context."""
    logging.getLogger("py4j").setLevel(logging.WARN)


@pytest.fixture(scope="session")
def spark_fixture():
    quiet_py4j()

    spark = (
        SparkSession.Builder()
        .appName("Integration Test PySpark")
        # Small amounts of data in tests so no need for more than 1 CPU
        .master("local[1]")
        # fail faster if there's an issue with initial [local] connections
        .config("spark.network.timeout", "10000")
        .config("spark.executor.heartbeatInterval", "1000")
        .config("spark.driver.memory", "2g")
        .config("spark.sql.shuffle.partitions", "1")
        # No need for any UI components, or keeping history
        .config("spark.ui.showConsoleProgress", "false")
        .config("spark.ui.enabled", "false")
        .config("spark.default.parallelism", "1")
        .config("spark.rdd.compress", "false")
        .config("spark.shuffle.compress", "false")
        .config("spark.dynamicAllocation.enabled", "false")
        .config("spark.executor.cores", "1")
        .config("spark.executor.instances", "1")
        .getOrCreate()
    )

    yield spark

    spark.stop()


def _mark_tests_using_spark_fixture(tests: list[pytest.Function]) -> None:
    """
    Adds the `requires_spark` marker to tests that are using the fixture that require a
    Spark instance.

    :param tests: list of tests collected by `pytest`
    """
    for test in tests:
        if _SPARK_FIXTURE_NAME in getattr(test, "fixturenames", ()):
            test.add_marker(pytest.mark.requires_spark)


def _skip_spark_tests(test: pytest.Function) -> None:
    """
    Tell `pytest` to skip tests that require a SparkSession.

    If the config argument `--include-spark-tests` is present, this shouldn't be
    invoked.

    :param test: test collected by `pytest`
    """
    requires_spark_markers = list(test.iter_markers(name="requires_spark"))

    if requires_spark_markers:
        pytest.skip("Skipped tests that require a SparkSession")


def pytest_addoption(parser: pytest.Parser):
    parser.addoption(
        "--include-spark-tests",
        action="store_true",
        default=False,
        help="Run tests that need a local SparkSession.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    if not config.getoption("--include-spark-tests"):
        _mark_tests_using_spark_fixture(tests=items)


def pytest_runtest_setup(item: pytest.Item):
    if not item.config.getoption("--include-spark-tests"):
        _skip_spark_tests(test=item)


# ---------------------------
# In-memory warehouse fake
# ---------------------------

_CREATE = re.compile(r"^CREATE TABLE (?P<name>\S+) \((?P<columns>.*)\) USING DELTA$", re.DOTALL)
_COLUMN = re.compile(r"`(?P<name>[^`]+)` (?P<type>[^,]+?)(?:, |$)")
_MERGE_TARGET = re.compile(r"^MERGE INTO (?P<name>\S+) AS target", re.MULTILINE)
_MERGE_SOURCE_COLUMNS = re.compile(r"AS source \((?P<columns>[^)]*)\)\nON")
_MERGE_KEY = re.compile(r"target\.`(?P<name>[^`]+)` <=>")
_CATALOG_TYPES = {"INTEGER": "INT"}


def _split_qualified(name: str) -> tuple[str, str]:
    parts = [p.strip("`") for p in name.split("`.`")]
    return parts[-2], parts[-1]


def _catalog_type(declared: str) -> str:
    """Report a declared type the way Unity Catalog does (constraints dropped, INTEGER -> INT)."""
    first = declared.split()[0].upper()
    return _CATALOG_TYPES.get(first, first)


class FakeWarehouse:
    """
    Minimal QueryExecutor fake that understands the loader's own statements.

    - information_schema.tables / .columns reads are answered from `tables`
    - CREATE TABLE adds a table (raising TableAlreadyExistsError on clashes)
    - MERGE applies the bound VALUES rows to `rows` keyed by the ON columns
    """

    def __init__(self) -> None:
        # (schema lower, table name) -> [(column name, catalog data type)]
        self.tables: dict[tuple[str, str], list[tuple[str, str]]] = {}
        self.rows: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.statements: list[tuple[str, tuple[Any, ...]]] = []
        self.fail_when: Callable[[str], bool] | None = None
        self.before_create: Callable[[str, str], None] | None = None

    # ----- setup helpers -----

    def add_table(self, schema: str, table: str, columns: Sequence[tuple[str, str]]) -> None:
        self.tables[(schema.lower(), table)] = list(columns)
        self.rows.setdefault((schema.lower(), table), [])

    def table_rows(self, schema: str, table: str) -> list[dict[str, Any]]:
        return self.rows[(schema.lower(), table)]

    @property
    def ddl(self) -> list[str]:
        return [sql for sql, _ in self.statements if sql.startswith("CREATE TABLE")]

    @property
    def merges(self) -> list[tuple[str, tuple[Any, ...]]]:
        return [(sql, binds) for sql, binds in self.statements if sql.startswith("MERGE INTO")]

    # ----- QueryExecutor -----

    def execute(self, sql: str, binds: Sequence[Any] | None = None) -> list[dict[str, Any]]:
        text = sql.strip()
        bound = tuple(binds or ())
        self.statements.append((text, bound))
        if self.fail_when is not None and self.fail_when(text):
            raise QueryExecutionError("injected failure", sql=text)

        if "information_schema" in text and ".tables" in text:
            return self._select_tables(bound)
        if "information_schema" in text and ".columns" in text:
            return self._select_columns(bound)
        if text.startswith("CREATE TABLE"):
            self._create(text)
            return []
        if text.startswith("MERGE INTO"):
            self._merge(text, bound)
            return []
        raise AssertionError(f"Unexpected SQL: {text}")

    def _select_tables(self, binds: tuple[Any, ...]) -> list[dict[str, Any]]:
        schema, pattern = str(binds[-2]).lower(), str(binds[-1])
        prefix = re.sub(r"\\(.)", r"\1", pattern[:-1]).lower()
        names = sorted(
            table for (s, table) in self.tables if s == schema and table.lower().startswith(prefix)
        )
        return [{"table_name": name} for name in names]

    def _select_columns(self, binds: tuple[Any, ...]) -> list[dict[str, Any]]:
        schema, table = str(binds[-2]).lower(), str(binds[-1]).lower()
        for (s, name), columns in self.tables.items():
            if s == schema and name.lower() == table:
                return [{"column_name": c, "data_type": t} for c, t in columns]
        return []

    def _create(self, text: str) -> None:
        match = _CREATE.match(text)
        assert match, text
        schema, table = _split_qualified(match["name"])
        if self.before_create is not None:
            hook, self.before_create = self.before_create, None
            hook(schema, table)
        if any(s == schema.lower() and t.lower() == table.lower() for s, t in self.tables):
            raise TableAlreadyExistsError(f"[TABLE_OR_VIEW_ALREADY_EXISTS] {table}", sql=text)
        columns = [(m["name"], _catalog_type(m["type"])) for m in _COLUMN.finditer(match["columns"])]
        self.add_table(schema, table, columns)

    def _merge(self, text: str, binds: tuple[Any, ...]) -> None:
        target = _MERGE_TARGET.search(text)
        source = _MERGE_SOURCE_COLUMNS.search(text)
        assert target and source, text
        schema, table = _split_qualified(target["name"])
        columns = [c.strip().strip("`") for c in source["columns"].split(",")]
        keys = [m["name"] for m in _MERGE_KEY.finditer(text)]
        updates = "WHEN MATCHED THEN UPDATE" in text

        stored = self.rows.setdefault((schema.lower(), table), [])
        width = len(columns)
        for start in range(0, len(binds), width):
            incoming = dict(zip(columns, binds[start : start + width]))
            existing = next(
                (row for row in stored if all(row[k] == incoming[k] for k in keys)), None
            )
            if existing is None:
                stored.append(incoming)
            elif updates:
                existing.update(incoming)


@pytest.fixture
def warehouse() -> FakeWarehouse:
    return FakeWarehouse()

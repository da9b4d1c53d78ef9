import pytest

from seat_usage.config import LoaderConfig, env_values
from seat_usage.errors import ConfigurationError


def test_defaults():
    config = LoaderConfig(schema_name="analytics", csv_path="data.csv")
    assert config.catalog_name is None
    assert config.users_base_name == "users"
    assert config.metrics_base_name == "metrics"
    assert config.max_create_attempts == 3


def test_config_is_immutable():
    config = LoaderConfig(schema_name="analytics", csv_path="data.csv")
    with pytest.raises(AttributeError):
        config.schema_name = "other"  # type: ignore[misc]


def test_with_overrides_returns_a_new_instance():
    config = LoaderConfig(schema_name="analytics", csv_path="data.csv")
    changed = config.with_overrides(schema_name="test_schema", catalog_name=None)
    assert changed.schema_name == "test_schema"
    assert changed.catalog_name is None
    assert config.schema_name == "analytics"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"schema_name": "", "csv_path": "data.csv"},
        {"schema_name": "s", "csv_path": "  "},
        {"schema_name": "s", "csv_path": "d", "users_base_name": "t", "metrics_base_name": "T"},
        {"schema_name": "s", "csv_path": "d", "max_create_attempts": 0},
    ],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        LoaderConfig(**kwargs)


@pytest.mark.parametrize(
    "users, metrics",
    [
        ("users", "users_v1"),
        ("metrics_V2", "metrics"),
        ("Users", "users"),
    ],
)
def test_base_names_from_one_table_family_are_rejected(users, metrics):
    with pytest.raises(ConfigurationError, match="overlap"):
        LoaderConfig(
            schema_name="s", csv_path="d", users_base_name=users, metrics_base_name=metrics
        )


def test_base_names_sharing_only_a_prefix_are_accepted():
    config = LoaderConfig(
        schema_name="s", csv_path="d", users_base_name="seat", metrics_base_name="seat_metrics"
    )
    assert config.metrics_base_name == "seat_metrics"


def test_from_env_reads_prefixed_variables():
    environ = {
        "SEAT_USAGE_SCHEMA": "analytics",
        "SEAT_USAGE_CSV_PATH": "/data/export.csv",
        "SEAT_USAGE_CATALOG": "main",
        "SEAT_USAGE_MAX_CREATE_ATTEMPTS": "5",
        "SEAT_USAGE_USERS_TABLE": "",
    }
    config = LoaderConfig.from_env(environ)
    assert config == LoaderConfig(
        schema_name="analytics",
        csv_path="/data/export.csv",
        catalog_name="main",
        max_create_attempts=5,
    )


def test_from_env_overrides_win():
    environ = {"SEAT_USAGE_SCHEMA": "analytics", "SEAT_USAGE_CSV_PATH": "a.csv"}
    config = LoaderConfig.from_env(environ, csv_path="b.csv", catalog_name=None)
    assert config.csv_path == "b.csv"
    assert config.schema_name == "analytics"


def test_from_env_reports_missing_required_values():
    with pytest.raises(ConfigurationError, match="schema_name, csv_path"):
        LoaderConfig.from_env({})


def test_env_values_maps_every_field():
    assert set(env_values({})) == {
        "catalog_name",
        "schema_name",
        "csv_path",
        "users_base_name",
        "metrics_base_name",
        "app_name",
        "max_create_attempts",
    }


def test_from_yaml_resolves_environment_placeholders(tmp_path):
    path = tmp_path / "loader.yml"
    path.write_text(
        "schema_name: ${TARGET_SCHEMA}\n"
        "csv_path: exports/seats.csv\n"
        "metrics_base_name: seat_metrics\n"
        "max_create_attempts: 2\n"
    )
    config = LoaderConfig.from_yaml(path, environ={"TARGET_SCHEMA": "test_schema"})
    assert config.schema_name == "test_schema"
    assert config.metrics_base_name == "seat_metrics"
    assert config.max_create_attempts == 2


def test_from_yaml_unset_placeholder_fails(tmp_path):
    path = tmp_path / "loader.yml"
    path.write_text("schema_name: ${NOPE}\ncsv_path: a.csv\n")
    with pytest.raises(ConfigurationError, match="NOPE"):
        LoaderConfig.from_yaml(path, environ={})


def test_from_yaml_rejects_unknown_keys(tmp_path):
    path = tmp_path / "loader.yml"
    path.write_text("schema_name: s\ncsv_path: a.csv\nsnowflake_stage: x\n")
    with pytest.raises(ConfigurationError, match="snowflake_stage"):
        LoaderConfig.from_yaml(path, environ={})


def test_from_yaml_requires_a_mapping(tmp_path):
    path = tmp_path / "loader.yml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError):
        LoaderConfig.from_yaml(path, environ={})


def test_from_yaml_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        LoaderConfig.from_yaml(tmp_path / "missing.yml")


def test_non_integer_attempts_are_rejected():
    with pytest.raises(ConfigurationError):
        LoaderConfig.from_mapping({"schema_name": "s", "csv_path": "a", "max_create_attempts": "x"})

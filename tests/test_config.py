import unittest.mock as mock
from pathlib import Path

import pytest
import tomllib

from datasource_backend import Configurator
from datasource_backend.core.registry import DatasourceRegistry

builtin_open = open


# Mock custom config.toml with specific datasources
def mock_open_with_custom_config_toml(*args, **kwargs):
    if Path(args[0]).name == "config.toml":
        # mocked open for path "config.toml"
        return mock.mock_open(
            read_data=b'DEFAULT_DATASOURCE = "influx"\n[DATASOURCES]\ninflux = { id = 4 }\n'
        )(*args, **kwargs)
    # unpatched version for every other path
    return builtin_open(*args, **kwargs)


@pytest.fixture
def clean_env(monkeypatch):
    for key in ["BACKEND_URL", "DEFAULT_DATASOURCE", "SENTRY_SAMPLE_RATE", "DSBACKEND_SETTINGS"]:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_default_config(clean_env):
    config = Configurator()

    assert config.DEFAULT_DATASOURCE == "default-datasource"
    assert config.DATASOURCES == {"default-datasource": {"id": 1, "type": "testdata"}}

    # Make sure all config keys are defined
    with open(
        Path(__file__).parent.parent / "datasource_backend/config_default.toml", "rb"
    ) as f:
        assert config.configuration.keys() == tomllib.load(f).keys()


@mock.patch("pathlib.Path.exists", lambda self: True)
@mock.patch("builtins.open", mock_open_with_custom_config_toml)
def test_custom_config_file_override(clean_env):
    config = Configurator()

    assert config.DEFAULT_DATASOURCE == "influx"
    assert config.DATASOURCES == {"influx": {"id": 4}}


def test_env_override(clean_env):
    clean_env.setenv("BACKEND_URL", "backend:3000")
    clean_env.setenv("DEFAULT_DATASOURCE", "influx")
    clean_env.setenv("SENTRY_SAMPLE_RATE", "0.5")
    clean_env.setenv("DATASOURCES", "ignored")
    config = Configurator()

    assert config.BACKEND_URL == "http://backend:3000"
    assert config.DEFAULT_DATASOURCE == "influx"
    assert config.SENTRY_SAMPLE_RATE == 0.5
    assert config.DATASOURCES == {"default-datasource": {"id": 1, "type": "testdata"}}


def test_datasource_without_id(clean_env):
    config = Configurator()
    with pytest.raises(ValueError):
        config.override(DATASOURCES={"broken": {"type": "testdata"}})


def test_registry_from_config(clean_env):
    config = Configurator()
    config.override(
        DEFAULT_DATASOURCE="influx",
        DATASOURCES={"influx": {"id": 4}, "prometheus": {"id": 5}},
    )
    registry = DatasourceRegistry.from_config(config)

    assert registry.default_datasource == "influx"
    assert registry.get(registry.resolve_name("default")) == {"id": 4}
    assert registry.get(registry.resolve_name("prometheus")) == {"id": 5}
    assert registry.get("nope") is None
    # the snapshot doesn't follow later changes
    config.configuration["DATASOURCES"]["influx"]["id"] = 6
    assert registry.get("influx") == {"id": 4}

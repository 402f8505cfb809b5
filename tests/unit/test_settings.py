from __future__ import annotations

import logging

import pytest

from bulksink.core import diagnostics
from bulksink.core.errors import ConfigurationError
from bulksink.core.settings import Settings, configure_logging, load_settings


def test_settings_defaults() -> None:
    settings = Settings()

    assert settings.core.app_name == "bulksink"
    assert settings.core.enable_metrics is False
    assert settings.core.request_timeout_seconds is None
    assert settings.core.internal_logging_enabled is True
    assert settings.elasticsearch is None


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BULKSINK_CORE__ENABLE_METRICS", "true")
    monkeypatch.setenv("BULKSINK_ELASTICSEARCH__HOSTS", '["es1:9200", "es2:9200"]')
    monkeypatch.setenv("BULKSINK_ELASTICSEARCH__INDEX", "logs-${app}")
    monkeypatch.setenv("BULKSINK_ELASTICSEARCH__GZIP", "true")
    monkeypatch.setenv(
        "BULKSINK_ELASTICSEARCH__IF_RENDER_INDEX_FAILED__DEFAULT_INDEX", "fallback"
    )

    settings = load_settings()

    assert settings.core.enable_metrics is True
    assert settings.elasticsearch is not None
    assert settings.elasticsearch.hosts == ["es1:9200", "es2:9200"]
    assert settings.elasticsearch.gzip is True
    assert settings.elasticsearch.if_render_index_failed.default_index == "fallback"


def test_load_settings_wraps_validation_errors() -> None:
    with pytest.raises(ConfigurationError):
        load_settings(core={"request_timeout_seconds": -1})


def test_configure_logging_sets_level() -> None:
    configure_logging(Settings(core={"log_level": "DEBUG"}))

    assert logging.getLogger("bulksink").level == logging.DEBUG
    logging.getLogger("bulksink").setLevel(logging.NOTSET)


def test_to_dict_excludes_unset_sections() -> None:
    assert "elasticsearch" not in Settings().to_dict()


@pytest.mark.parametrize(
    "raw",
    ["es1:9200,es2:9200", " es1:9200 , es2:9200 ", '["es1:9200", "es2:9200"]'],
)
def test_hosts_from_environment_accepts_comma_and_json_lists(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("BULKSINK_ELASTICSEARCH__HOSTS", raw)
    monkeypatch.setenv("BULKSINK_ELASTICSEARCH__INDEX", "logs")

    settings = load_settings()

    assert settings.elasticsearch is not None
    assert settings.elasticsearch.hosts == ["es1:9200", "es2:9200"]


def test_load_settings_wraps_environment_parse_errors(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("BULKSINK_CORE", "{not json")

    with pytest.raises(ConfigurationError):
        load_settings()


def test_configure_logging_toggles_internal_diagnostics(
    captured_diagnostics: list,
) -> None:
    configure_logging(Settings(core={"internal_logging_enabled": False}))
    diagnostics.error("elasticsearch-sink", "render elasticsearch index error")

    assert diagnostics.is_enabled() is False
    assert captured_diagnostics == []

    configure_logging(Settings())
    diagnostics.error("elasticsearch-sink", "render elasticsearch index error")

    assert diagnostics.is_enabled() is True
    assert len(captured_diagnostics) == 1
    logging.getLogger("bulksink").setLevel(logging.NOTSET)

import pytest

from cade.config import EngineConfig


def test_defaults():
    cfg = EngineConfig.from_env({})
    assert cfg.page_size == 12
    assert cfg.load_more_delay == 0.5
    assert cfg.log_level == "INFO"
    assert cfg.catalog_path is None


def test_from_env():
    cfg = EngineConfig.from_env({
        "CADE_PAGE_SIZE": "6",
        "CADE_LOAD_MORE_DELAY": "0",
        "CADE_LOG_LEVEL": "debug",
        "CADE_CATALOG": "/tmp/catalog.json",
    })
    assert (cfg.page_size, cfg.load_more_delay, cfg.log_level) == (6, 0.0, "DEBUG")
    assert cfg.catalog_path == "/tmp/catalog.json"


@pytest.mark.parametrize("env", [
    {"CADE_PAGE_SIZE": "twelve"},
    {"CADE_PAGE_SIZE": "0"},
    {"CADE_LOAD_MORE_DELAY": "-1"},
])
def test_invalid_env(env):
    with pytest.raises(ValueError):
        EngineConfig.from_env(env)


def test_configure_logging_rejects_unknown_level():
    from cade.logging_setup import configure_logging

    configure_logging("warning")
    with pytest.raises(ValueError):
        configure_logging("chatty")

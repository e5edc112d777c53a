import pytest

from fanlog import Logger, LoggerConfig, SYSLOG_LEVELS, load_config


_ENV = ["FANLOG_LEVEL", "FANLOG_LEVELS", "FANLOG_EMIT_ERRORS", "FANLOG_PROFILER_TTL_S"]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's local .env out of these tests.
    monkeypatch.setattr("fanlog.config.dotenv.load_dotenv", lambda *a, **k: False)


def test_emit_errors_is_tri_state():
    assert LoggerConfig().effective_emit_errors is True
    assert LoggerConfig(emit_errors=True).effective_emit_errors is True
    assert LoggerConfig(emit_errors=False).effective_emit_errors is False


@pytest.mark.parametrize("ttl", [0, -1.5])
def test_profiler_ttl_must_be_positive(ttl: float):
    with pytest.raises(ValueError):
        LoggerConfig(profiler_ttl_s=ttl)


def test_level_must_exist_in_selected_table():
    with pytest.raises(ValueError):
        LoggerConfig(level="warning")  # syslog name, not npm
    assert LoggerConfig(level="warning", levels="syslog").level == "warning"


def test_load_config_defaults():
    cfg = load_config()
    assert cfg.level == "info"
    assert cfg.levels == "npm"
    assert cfg.emit_errors is None
    assert cfg.profiler_ttl_s is None


def test_load_config_parses_optional_fields(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FANLOG_LEVEL", "notice")
    monkeypatch.setenv("FANLOG_LEVELS", "syslog")
    monkeypatch.setenv("FANLOG_EMIT_ERRORS", "off")
    monkeypatch.setenv("FANLOG_PROFILER_TTL_S", "12.5")

    cfg = load_config()
    assert cfg.level == "notice"
    assert cfg.levels == "syslog"
    assert cfg.emit_errors is False
    assert cfg.profiler_ttl_s == 12.5


@pytest.mark.parametrize(
    ("name", "value"),
    [("FANLOG_EMIT_ERRORS", "maybe"), ("FANLOG_PROFILER_TTL_S", "soon"), ("FANLOG_LEVELS", "log4j")],
)
def test_load_config_rejects_malformed_values(monkeypatch: pytest.MonkeyPatch, name: str, value: str):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        load_config()


def test_logger_from_config_honors_explicit_false():
    logger = Logger.from_config(LoggerConfig(level="notice", levels="syslog", emit_errors=False, profiler_ttl_s=3.0))
    assert logger.level == "notice"
    assert dict(logger.levels) == dict(SYSLOG_LEVELS)
    assert logger.emit_errors is False
    assert logger.profiler_ttl_s == 3.0
    assert callable(logger.notice)

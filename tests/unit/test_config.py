"""Tests for engine configuration loading."""

from pricing_engine.config import DEFAULT_DURATION_CHIPS, Config, EngineConfig


def test_packaged_config_loads():
    loaded = Config()
    assert loaded.engine.default_currency == "EUR"
    assert loaded.engine.duration_chips == [15, 30, 45, 60, 120]
    assert loaded.engine.min_duration_minutes == 1
    assert any(entry["code"] == "JPY" for entry in loaded.currencies)


def test_missing_files_use_defaults(tmp_path):
    loaded = Config(config_dir=tmp_path)
    assert loaded.engine.duration_chips == DEFAULT_DURATION_CHIPS
    assert loaded.currencies == []


def test_yaml_overrides(tmp_path):
    (tmp_path / "engine.yml").write_text(
        "default_currency: usd\nduration:\n  min_minutes: 5\n  chips: [10, 20]\n"
    )
    loaded = Config(config_dir=tmp_path)
    assert loaded.engine.default_currency == "usd"
    assert loaded.engine.min_duration_minutes == 5
    assert loaded.engine.duration_chips == [10, 20]


def test_environment_wins_for_default_currency(tmp_path, monkeypatch):
    monkeypatch.setenv("PRICING_DEFAULT_CURRENCY", "GBP")
    (tmp_path / "engine.yml").write_text("default_currency: USD\n")
    assert Config(config_dir=tmp_path).engine.default_currency == "GBP"
    assert EngineConfig().default_currency == "GBP"


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    assert Config().logging.level == "WARNING"

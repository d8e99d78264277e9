from crosslane.core import config as core_config


def test_defaults(monkeypatch):
    for key in (
        "APP_ENV",
        "CROSS_LANE_DECISION_WINDOW_HOURS",
        "CROSS_LANE_SWEEP_LIMIT",
        "CROSS_LANE_INBOX_MAX_LIMIT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    core_config.get_settings.cache_clear()
    settings = core_config.get_settings()
    assert settings.app_env == "dev"
    assert settings.decision_window_hours == 72
    assert settings.sweep_limit == 200
    assert settings.inbox_max_limit == 100
    assert settings.log_level == "INFO"
    core_config.get_settings.cache_clear()


def test_invalid_integers_fall_back(monkeypatch):
    monkeypatch.setenv("CROSS_LANE_DECISION_WINDOW_HOURS", "soon")
    monkeypatch.setenv("CROSS_LANE_SWEEP_LIMIT", "-5")
    core_config.get_settings.cache_clear()
    settings = core_config.get_settings()
    assert settings.decision_window_hours == 72
    assert settings.sweep_limit == 200
    core_config.get_settings.cache_clear()

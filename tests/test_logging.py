from __future__ import annotations

from outlier_delta import logging as delta_logging


def test_configure_logging_prefers_explicit_level_then_env(monkeypatch) -> None:
    calls: list[dict] = []
    monkeypatch.setattr(delta_logging.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setenv(delta_logging.LOG_LEVEL_ENV, "debug")

    delta_logging.configure_logging("warning")
    delta_logging.configure_logging()
    monkeypatch.delenv(delta_logging.LOG_LEVEL_ENV)
    delta_logging.configure_logging()

    assert [call["level"] for call in calls] == ["WARNING", "DEBUG", "INFO"]
    assert all(call["format"] == delta_logging.LOG_FORMAT for call in calls)

from __future__ import annotations

import logging

from aimarker.domain import catalog
from aimarker.domain.backend_status import BackendAvailability, BackendStatus
from aimarker.domain.settings import MarkerSettings, load_settings


def test_fallback_chain_follows_mapping_until_end() -> None:
    assert catalog.fallback_for("o3") == "o4-mini"
    assert catalog.fallback_chain("o3") == [
        "o4-mini",
        "deepseek/deepseek-chat-v3-0324:free",
        "microsoft/mai-ds-r1:free",
    ]


def test_fallback_chain_stops_on_cycles() -> None:
    chain = catalog.fallback_chain("deepseek/deepseek-r1-0528:free")

    assert chain[0] == "gemini-2.5-flash-preview-05-20"
    assert "deepseek/deepseek-r1-0528:free" not in chain
    assert len(chain) == len(set(chain))


def test_rate_limits_and_lookups() -> None:
    assert catalog.rate_limit_ms("deepseek/deepseek-chat-v3-0324:free") == 10000
    assert catalog.rate_limit_ms("unknown-model") == catalog.DEFAULT_RATE_LIMIT_MS
    assert catalog.is_known_model("xai/grok-3-mini") is True
    assert catalog.is_known_model("gpt-2") is False
    assert catalog.subject_label("computerScience") == "Computer Science"
    assert catalog.subject_label("latin") is None
    assert [b.label for b in catalog.EXAM_BOARDS] == ["AQA", "Edexcel", "OCR", "WJEC"]


def test_load_settings_reads_prefixed_environment() -> None:
    env = {
        "AIMARKER_API_BASE_URL": "https://api.example.test",
        "AIMARKER_REQUEST_TIMEOUT_S": "5",
        "AIMARKER_PROBE_RETRIES": "1",
        "AIMARKER_TREAT_404_AS_ONLINE": "off",
        "AIMARKER_RATE_LIMITED": "yes",
    }

    settings = load_settings(env)

    assert settings.api_base_url == "https://api.example.test"
    assert settings.request_timeout_s == 5.0
    assert settings.probe_retries == 1
    assert settings.treat_404_as_online is False
    assert settings.rate_limited is True
    assert settings.status_poll_interval_s == 60.0


def test_load_settings_ignores_bad_values(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        settings = load_settings({"AIMARKER_PROBE_RETRIES": "many", "AIMARKER_DEBUG_FLAG": "x"})

    assert settings.probe_retries == MarkerSettings().probe_retries
    assert "AIMARKER_PROBE_RETRIES" in caplog.text


def test_overrides_win_over_environment() -> None:
    settings = load_settings({"AIMARKER_WAKEUP_RETRY_S": "20"}, wakeup_retry_s=3.0)

    assert settings.wakeup_retry_s == 3.0
    assert settings.to_dict()["wakeup_retry_s"] == 3.0


def test_availability_progress_only_moves_while_waking_up() -> None:
    state = BackendAvailability()
    assert state.advance_progress(2).wakeup_progress == 0

    waking = state.with_status(BackendStatus.WAKING_UP)
    for _ in range(60):
        waking = waking.advance_progress(2)
    assert waking.wakeup_progress == 100

    rechecking = waking.with_status(BackendStatus.CHECKING)
    assert rechecking.with_status(BackendStatus.WAKING_UP).wakeup_progress == 0

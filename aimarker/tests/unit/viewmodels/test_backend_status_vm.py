from datetime import datetime, timezone

import pytest

from aimarker.domain.backend_status import BackendAvailability, BackendStatus
from aimarker.viewmodels.backend_status_vm import PROGRESS_DISPLAY_CAP, BackendStatusVM


def _waking(progress: int) -> BackendAvailability:
    return BackendAvailability(status=BackendStatus.WAKING_UP, wakeup_progress=progress, attempt_count=1)


@pytest.mark.parametrize(
    "status,label,tone",
    [
        (BackendStatus.ONLINE, "Backend Online", "ok"),
        (BackendStatus.CHECKING, "Checking...", "busy"),
        (BackendStatus.WAKING_UP, "Starting Up...", "warn"),
        (BackendStatus.OFFLINE, "Backend Offline", "error"),
        (BackendStatus.ERROR, "Connection Error", "error"),
        (BackendStatus.TIMEOUT, "Connection Timeout", "error"),
        (BackendStatus.RATE_LIMITED, "Rate Limited", "error"),
    ],
)
def test_indicator_label_and_tone(status, label, tone):
    assert BackendStatusVM.indicator_label(status) == label
    assert BackendStatusVM.indicator_tone(status) == tone


def test_progress_display_is_capped_until_online():
    assert BackendStatusVM.display_progress(_waking(40)) == 40
    assert BackendStatusVM.display_progress(_waking(100)) == PROGRESS_DISPLAY_CAP
    assert BackendStatusVM.display_progress(BackendAvailability(status=BackendStatus.ONLINE)) == 100
    assert BackendStatusVM.display_progress(BackendAvailability(status=BackendStatus.OFFLINE)) == 0


def test_retry_button_rules():
    assert BackendStatusVM.retry_enabled(BackendAvailability()) is False
    assert BackendStatusVM.retry_enabled(_waking(94)) is False
    assert BackendStatusVM.retry_enabled(_waking(96)) is True
    assert BackendStatusVM.retry_enabled(BackendAvailability(status=BackendStatus.ERROR)) is True


def test_banner_offline_before_and_after_attempts():
    vm = BackendStatusVM()
    checked = datetime(2024, 5, 1, 9, 5, 7, tzinfo=timezone.utc)

    first = vm.banner(BackendAvailability(status=BackendStatus.OFFLINE, last_checked_at=checked))
    again = vm.banner(BackendAvailability(status=BackendStatus.OFFLINE, attempt_count=2))

    assert first["button_label"] == "Wake Up API"
    assert first["title"] == "Backend Server is Offline"
    assert first["last_checked"] == "09:05:07"
    assert again["button_label"] == "Try Again"
    assert again["last_checked"] == ""


def test_apply_state_pushes_dto_and_retry_respects_button():
    pushed = []
    retries = []
    vm = BackendStatusVM(on_update_banner=pushed.append, on_retry=lambda: retries.append(1) or True)

    vm.apply_state(_waking(20))
    assert pushed[-1]["title"] == "Backend Server is Starting Up"
    assert vm.request_retry() is False

    vm.apply_state(BackendAvailability(status=BackendStatus.OFFLINE, attempt_count=1))
    assert vm.request_retry() is True
    assert retries == [1]

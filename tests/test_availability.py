from datetime import date, datetime

import httpx
import pytest

from lupon.scheduling.availability import SlotAvailabilityTracker, TrackerState
from lupon.scheduling.client import BookingFailed, SchedulingClient, SlotFetchError
from lupon.scheduling.slots import DATE_FULL, BookingError, SlotInfo

NOW = datetime(2026, 10, 19, 14, 0)


def _tracker(fetch=None):
    return SlotAvailabilityTracker(fetch_slots=fetch or (lambda day: None), clock=lambda: NOW)


def test_starts_unselected():
    tracker = _tracker()
    assert tracker.state is TrackerState.UNSELECTED
    assert tracker.slot_states() == []


def test_load_applies_fetched_slot_info():
    info = SlotInfo.from_booked_times(["08:00", "09:00"], 4)
    seen = []

    def fetch(day):
        seen.append(day)
        return info

    tracker = _tracker(fetch)
    assert tracker.load("2026-10-21") is TrackerState.LOADED
    assert seen == [date(2026, 10, 21)]
    assert tracker.slot_info is info

    states = {s.slot.value: s for s in tracker.slot_states()}
    assert states["08:00"].is_booked
    assert not states["10:00"].disabled


def test_stale_response_is_discarded():
    tracker = _tracker()
    first = tracker.select_date("2026-10-20")
    second = tracker.select_date("2026-10-21")

    stale = SlotInfo.from_booked_times(["08:00", "09:00", "10:00", "11:00"], 4)
    fresh = SlotInfo.from_booked_times([], 4)

    assert tracker.resolve(second, fresh) is True
    assert tracker.resolve(first, stale) is False
    assert tracker.slot_info is fresh
    assert tracker.selected_date == date(2026, 10, 21)
    assert tracker.state is TrackerState.LOADED


def test_stale_failure_is_ignored():
    tracker = _tracker()
    first = tracker.select_date("2026-10-20")
    second = tracker.select_date("2026-10-21")
    assert tracker.fail(first, SlotFetchError("timeout")) is False
    assert tracker.state is TrackerState.LOADING
    assert tracker.resolve(second, SlotInfo.from_booked_times([], 4))


def test_reset_invalidates_in_flight_request():
    tracker = _tracker()
    token = tracker.select_date("2026-10-20")
    tracker.reset()
    assert tracker.resolve(token, SlotInfo.from_booked_times([], 4)) is False
    assert tracker.state is TrackerState.UNSELECTED


def test_fetch_failure_fails_open():
    def fetch(day):
        raise SlotFetchError("backend down")

    tracker = _tracker(fetch)
    assert tracker.load("2026-10-21") is TrackerState.ERROR
    assert tracker.slot_info is None
    assert tracker.error == "backend down"
    assert not any(s.disabled for s in tracker.slot_states())


def test_new_date_clears_selected_time():
    tracker = _tracker(lambda day: SlotInfo.from_booked_times([], 4))
    tracker.load("2026-10-21")
    tracker.choose_time("09:00")
    tracker.load("2026-10-22")
    assert tracker.selected_time is None


def test_validate_uses_loaded_slot_info():
    full = SlotInfo.from_booked_times(["08:00", "09:00", "10:00", "11:00"], 4)
    tracker = _tracker(lambda day: full)
    tracker.load("2026-10-21")
    tracker.choose_time("15:00")
    with pytest.raises(BookingError) as exc:
        tracker.validate()
    assert exc.value.reason == DATE_FULL

    tracker.slot_info = SlotInfo.from_booked_times(["08:00"], 4)
    assert tracker.validate() == (date(2026, 10, 21), "15:00")


def _client(handler):
    return SchedulingClient("http://lupon.test", transport=httpx.MockTransport(handler))


def test_client_reads_available_slots():
    def handler(request):
        assert request.url.path == "/api/mediation/available-slots/2026-10-21"
        return httpx.Response(200, json={
            "success": True,
            "data": {
                "availableSlots": 9, "usedSlots": 1, "maxSlotsPerDay": 4, "isFull": False,
                "scheduledTimes": ["1:00 PM"], "bookedTimes": ["13:00"],
            },
        })

    info = _client(handler).available_slots(date(2026, 10, 21))
    assert info.booked_times == ["13:00"]
    assert info.scheduled_times == ["1:00 PM"]
    assert info.used_slots == 1 and not info.is_full


def test_client_raises_on_unsuccessful_response():
    def handler(request):
        return httpx.Response(500, json={"success": False, "error": "db down"})

    with pytest.raises(SlotFetchError, match="db down"):
        _client(handler).available_slots("2026-10-21")


def test_client_raises_on_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SlotFetchError):
        _client(handler).available_slots("2026-10-21")


def test_booking_failure_message_is_passed_through():
    message = "Minimum 1-hour interval required between sessions. Please choose a different time."

    def handler(request):
        return httpx.Response(400, json={"success": False, "error": message})

    with pytest.raises(BookingFailed) as exc:
        _client(handler).schedule_mediation(2026001, "2026-10-21", "08:30")
    assert exc.value.message == message


def test_booking_success():
    def handler(request):
        assert request.method == "POST"
        assert request.url.path == "/api/mediation/schedule"
        return httpx.Response(200, json={"success": True})

    assert _client(handler).schedule_mediation(2026001, date(2026, 10, 21), "09:00") == {"success": True}


def test_tracker_with_client_fetcher():
    def handler(request):
        return httpx.Response(200, json={"success": False, "error": "nope"})

    tracker = SlotAvailabilityTracker(fetch_slots=_client(handler).available_slots, clock=lambda: NOW)
    assert tracker.load("2026-10-21") is TrackerState.ERROR


@pytest.mark.parametrize("body", [[], ["08:00"], "ok"])
def test_client_rejects_non_object_responses(body):
    def handler(request):
        return httpx.Response(200, json=body)

    with pytest.raises(SlotFetchError):
        _client(handler).available_slots("2026-10-21")
    with pytest.raises(BookingFailed):
        _client(handler).schedule_mediation(2026001, "2026-10-21", "09:00")


def test_client_uses_configured_base_url(app):
    app.config["API_BASE_URL"] = "http://hall.example:8080/"
    assert SchedulingClient().base_url == "http://hall.example:8080"

    tracker = SlotAvailabilityTracker(clock=lambda: NOW)
    assert tracker.fetch_slots.__self__.base_url == "http://hall.example:8080"


def test_client_base_url_without_app():
    from lupon.config import Config

    assert SchedulingClient().base_url == Config.API_BASE_URL.rstrip("/")
    assert SchedulingClient("http://other.test").base_url == "http://other.test"

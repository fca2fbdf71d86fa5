"""Slot availability for the date currently picked in a scheduling modal.

Each date selection issues a new request token. Results (or failures) are
only applied when they carry the latest token, so a slow response for a
date the user already moved away from can never overwrite newer data.
"""

import logging
from enum import Enum

from lupon.shared.clock import local_now

from .client import SchedulingClient, SlotFetchError
from .slots import parse_date, slot_states, validate_booking

logger = logging.getLogger(__name__)


class TrackerState(Enum):
    UNSELECTED = "unselected"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class SlotAvailabilityTracker:
    def __init__(self, fetch_slots=None, clock=local_now):
        if fetch_slots is None:
            fetch_slots = SchedulingClient().available_slots
        self.fetch_slots = fetch_slots
        self.clock = clock
        self._sequence = 0
        self.reset()

    def reset(self):
        self.state = TrackerState.UNSELECTED
        self.selected_date = None
        self.selected_time = None
        self.slot_info = None
        self.error = None
        # invalidates any request still in flight
        self._sequence += 1

    @property
    def latest_token(self):
        return self._sequence

    def select_date(self, day):
        """Start loading ``day``; returns the token the result must carry."""
        self._sequence += 1
        self.state = TrackerState.LOADING
        self.selected_date = parse_date(day) or day
        self.selected_time = None
        self.slot_info = None
        self.error = None
        return self._sequence

    def resolve(self, token, slot_info):
        if token != self._sequence:
            logger.debug("Discarding slot data for stale request %s (latest %s)", token, self._sequence)
            return False
        self.slot_info = slot_info
        self.state = TrackerState.LOADED
        return True

    def fail(self, token, error):
        if token != self._sequence:
            logger.debug("Ignoring failure of stale request %s: %s", token, error)
            return False
        # Treated as "nothing known": slots stay selectable
        logger.warning("Failed to fetch slot availability for %s: %s", self.selected_date, error)
        self.slot_info = None
        self.error = str(error)
        self.state = TrackerState.ERROR
        return True

    def load(self, day):
        token = self.select_date(day)
        try:
            slot_info = self.fetch_slots(self.selected_date)
        except SlotFetchError as e:
            self.fail(token, e)
        else:
            self.resolve(token, slot_info)
        return self.state

    def choose_time(self, time_text):
        self.selected_time = time_text

    def slot_states(self):
        if self.selected_date is None:
            return []
        return slot_states(self.selected_date, self.slot_info, self.selected_time, self.clock())

    def validate(self):
        return validate_booking(self.selected_date, self.selected_time, self.slot_info, self.clock())

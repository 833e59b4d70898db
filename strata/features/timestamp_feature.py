"""Timestamp feature for automatic created/updated management"""

import time
from typing import Any

from strata.features.base_feature import ModelFeature


class TimestampFeature(ModelFeature):
    """
    Feature that stamps rows with epoch milliseconds.

    Inserts get one shared value for `created` and `updated`, updates get a
    fresh `updated`. Values handed out by one feature strictly increase, even
    when two statements run within the same millisecond.
    """

    def __init__(self):
        self._last_timestamp = 0

    def _get_current_timestamp(self) -> int:
        """Get the current time in epoch milliseconds, never repeating a value"""
        timestamp = max(time.time_ns() // 1_000_000, self._last_timestamp + 1)
        self._last_timestamp = timestamp
        return timestamp

    def before_create(self, data: dict[str, Any]) -> dict[str, Any]:
        """Inject created and updated timestamps"""
        timestamp = self._get_current_timestamp()
        data["created"] = timestamp
        data["updated"] = timestamp
        return data

    def before_update(self, data: dict[str, Any]) -> dict[str, Any]:
        """Inject updated timestamp"""
        data["updated"] = self._get_current_timestamp()
        return data

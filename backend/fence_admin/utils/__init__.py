"""Utility functions and helpers."""

from fence_admin.utils.datetime_utils import serialize_api_datetime, to_api_timezone

__all__ = [
    "serialize_api_datetime",
    "to_api_timezone",
]

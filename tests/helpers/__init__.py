"""Shared helper utilities for the yadisk-backup test-suite."""

from .fakes import FakeArchiver, FakeDiskService, FakeHttpResponse, RecordingPost
from .logs import get_test_logger

__all__ = [
    "FakeArchiver",
    "FakeDiskService",
    "FakeHttpResponse",
    "RecordingPost",
    "get_test_logger",
]

"""Shared fixtures for tickflow tests."""

from __future__ import annotations

import logging

import pytest

from tickflow import Scheduler


@pytest.fixture
def scheduler() -> Scheduler:
    return Scheduler()


@pytest.fixture
def caplog_warning(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Set up log capture for warning level on tickflow.scheduler."""
    caplog.set_level(logging.WARNING, logger="tickflow.scheduler")
    return caplog

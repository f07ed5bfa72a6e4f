# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""
Root pytest configuration with shared markers and fixtures.
"""

import logging

import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "concurrency: Mark test as exercising multi-threaded resolution",
    )
    config.addinivalue_line(
        "markers",
        "slow: Mark test as slow-running (may be skipped in quick runs)",
    )


@pytest.fixture(autouse=True)
def dynamic_auth_debug_logs(caplog):
    """Capture library debug logs so failures show the resolution trace."""
    caplog.set_level(logging.DEBUG, logger="dynamic_auth")
    yield

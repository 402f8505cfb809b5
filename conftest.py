"""
Root pytest configuration.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "standard: Default risk category for typical unit tests",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests requiring external dependencies",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_writer() -> Generator[None, None, None]:
    """Restore the default diagnostics backend around each test.

    Tests that capture payloads via ``set_writer_for_tests`` must not leak
    diagnostics state into later tests.
    """
    import bulksink.core.diagnostics as diag

    diag.set_writer_for_tests(None)
    diag.set_enabled(True)
    yield
    diag.set_writer_for_tests(None)
    diag.set_enabled(True)


@pytest.fixture
def captured_diagnostics() -> list[dict]:
    """Collect diagnostics payloads emitted during the test."""
    from bulksink.core import diagnostics

    captured: list[dict] = []
    diagnostics.set_writer_for_tests(captured.append)
    return captured

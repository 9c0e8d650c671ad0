"""
Pytest configuration and shared fixtures for autobind tests.

This module provides:
- A fresh container per test
- Isolation of the process-wide container and AUTOBIND_* environment
- Small service classes used across test modules
"""

import pytest

from autobind.config import ContainerConfig
from autobind.di import Container
from autobind.observability.metrics import MetricsCollector

# ============================================================================
# ENVIRONMENT / GLOBAL STATE
# ============================================================================

AUTOBIND_ENV_VARS = (
    "AUTOBIND_DETECT_CYCLES",
    "AUTOBIND_THREAD_SAFE",
    "AUTOBIND_LOG_RESOLUTIONS",
    "AUTOBIND_METRICS_MAX_ENTRIES",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Make sure container settings come from defaults, not the developer's shell."""
    for name in AUTOBIND_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
def reset_global_container():
    """Every test starts and ends without a process-wide container."""
    Container.reset_global()
    yield
    Container.reset_global()


# ============================================================================
# CONTAINER FIXTURES
# ============================================================================


@pytest.fixture
def metrics() -> MetricsCollector:
    """A metrics collector owned by the test."""
    return MetricsCollector()


@pytest.fixture
def container(metrics: MetricsCollector) -> Container:
    """A container with default behaviour (cycle detection, locking)."""
    return Container(config=ContainerConfig(), metrics=metrics)


@pytest.fixture
def unguarded_container() -> Container:
    """A container without cycle detection or singleton locking."""
    return Container(config=ContainerConfig(detect_cycles=False, thread_safe=False))


# ============================================================================
# SAMPLE SERVICES
# ============================================================================


class Counter:
    """Counts constructions; reset by the ``construction_counter`` fixture."""

    instances = 0

    def __init__(self):
        Counter.instances += 1
        self.serial = Counter.instances


@pytest.fixture
def construction_counter():
    """Reset Counter.instances around a test."""
    Counter.instances = 0
    yield Counter
    Counter.instances = 0

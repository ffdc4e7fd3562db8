"""
Reusable fakes and in-memory implementations for tests.
"""

from .fake_action_executor import ScriptedActionExecutor
from .fake_browser_session import FakeBrowserSession, FakeSessionFactory
from .fake_config_provider import InMemoryConfigProvider
from .fake_job_portal import FakeCandidate, FakeJobPortal
from .fake_page import FakeLocator, FakePage
from .fake_runtime import (
    FixedClock,
    InMemoryDebugArtifactStore,
    InMemoryLogger,
    SequentialIdGenerator,
)

__all__ = [
    "ScriptedActionExecutor",
    "FakeBrowserSession",
    "FakeSessionFactory",
    "InMemoryConfigProvider",
    "FakeCandidate",
    "FakeJobPortal",
    "FakeLocator",
    "FakePage",
    "FixedClock",
    "SequentialIdGenerator",
    "InMemoryLogger",
    "InMemoryDebugArtifactStore",
]

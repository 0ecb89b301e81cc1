"""
Pytest configuration file for the fiaplot test suite.

Provides:
- Loguru integration so that log output is visible to ``caplog``
- Factories for entity metadata as returned by the metadata service
- In-memory metadata clients, including one that records request concurrency
"""

import asyncio
import contextlib
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

# Add the src directory to the Python path
src_path = str(Path(__file__).parent.parent / "src")
sys.path.insert(0, src_path)

import pytest
from loguru import logger

from fiaplot.discovery.models import Attribute, EntityKind, EntityMetadata
from fiaplot.exceptions import MetadataFetchError


# ============================================================================
# LOGURU INTEGRATION
# ============================================================================

@pytest.fixture(autouse=True, scope="function")
def capture_loguru_logs_globally(caplog):
    """
    Forward Loguru records to standard logging so ``caplog`` sees them.

    The handler is removed after each test to keep log capture isolated.
    """
    class PropagateHandler(logging.Handler):
        def emit(self, record):
            logging.getLogger(record.name or "fiaplot").handle(record)

    caplog.set_level(logging.DEBUG)

    handler_id = logger.add(
        PropagateHandler(),
        format="{message}",
        level="DEBUG",
        catch=True,
        enqueue=False,
    )

    yield

    with contextlib.suppress(ValueError, KeyError):
        logger.remove(handler_id)


# ============================================================================
# METADATA FACTORIES
# ============================================================================

def make_dataset(
    path: str,
    shape: Sequence[int] = (10,),
    class_code: Optional[int] = 1,
    attributes: Iterable[str] = (),
    **dtype_fields: Any,
) -> EntityMetadata:
    """Build dataset metadata with a legacy class-code dtype."""
    dtype = None if class_code is None else {"class": class_code, **dtype_fields}
    return EntityMetadata(
        path=path,
        kind=EntityKind.DATASET,
        shape=tuple(shape),
        dtype=dtype,
        attributes=tuple(Attribute(name=name, value=name) for name in attributes),
    )


def make_group(path: str, attributes: Iterable[str] = ()) -> EntityMetadata:
    return EntityMetadata(
        path=path,
        kind=EntityKind.GROUP,
        attributes=tuple(Attribute(name=name) for name in attributes),
    )


@pytest.fixture
def dataset_factory():
    """Factory for dataset metadata; see :func:`make_dataset`."""
    return make_dataset


@pytest.fixture
def group_factory():
    return make_group


@pytest.fixture
def nexus_entities() -> Dict[str, EntityMetadata]:
    """
    A small NeXus-like file: one signal dataset with a paired error series,
    an axis, a group and a string dataset.
    """
    return {
        "/entry": make_group("/entry", attributes=("NX_class",)),
        "/entry/data": make_group("/entry/data", attributes=("NX_class", "signal")),
        "/entry/data/counts": make_dataset("/entry/data/counts", shape=(100,), attributes=("signal", "units")),
        "/entry/data/counts_errors": make_dataset("/entry/data/counts_errors", shape=(100,)),
        "/entry/data/tof": make_dataset("/entry/data/tof", shape=(101,), class_code=0),
        "/entry/title": make_dataset("/entry/title", shape=(1,), class_code=3),
    }


# ============================================================================
# IN-MEMORY CLIENTS
# ============================================================================

class ConcurrencyTrackingClient:
    """
    Metadata client that records how many metadata requests overlap.

    Each request yields to the event loop a few times so that requests issued
    together are genuinely in flight at the same time.
    """

    def __init__(
        self,
        entities: Dict[str, EntityMetadata],
        failing_paths: Iterable[str] = (),
        delay_steps: int = 3,
    ):
        self.entities = dict(entities)
        self.failing_paths = set(failing_paths)
        self.delay_steps = delay_steps
        self.in_flight = 0
        self.max_in_flight = 0
        self.requested: List[str] = []
        self.list_calls = 0

    async def list_paths(self, file: str) -> List[str]:
        self.list_calls += 1
        return list(self.entities)

    async def get_entity_metadata(self, file: str, path: str) -> EntityMetadata:
        self.requested.append(path)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            for _ in range(self.delay_steps):
                await asyncio.sleep(0)
            if path in self.failing_paths:
                raise MetadataFetchError(f"Failed to fetch metadata for {path}", context={"path": path})
            return self.entities[path]
        finally:
            self.in_flight -= 1


@pytest.fixture
def tracking_client_factory():
    """Factory for :class:`ConcurrencyTrackingClient` instances."""
    return ConcurrencyTrackingClient


@pytest.fixture
def clean_fia_environment(monkeypatch):
    """Remove every ``FIA_*`` variable so settings tests see defaults."""
    for key in list(os.environ):
        if key.upper().startswith("FIA_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch

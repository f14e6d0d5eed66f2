"""
Shared Test Fixtures for jobartifacts
=======================================

Fixtures are organized by layer:

    1. Configuration fixtures
    2. Infrastructure fixtures (storage backend, transport)
    3. Identity fixtures (Tags)
    4. Facade fixtures (Artifacts)
"""

from __future__ import annotations

import pytest

from jobartifacts.core.config import ArtifactsSettings
from jobartifacts.core.models import Tags
from jobartifacts.facade import Artifacts
from jobartifacts.infrastructure.storage import InMemoryStorageBackend


DEFAULT_BRANCH_ID = "12345"


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def settings():
    """Settings with defaults."""
    return ArtifactsSettings()


# =============================================================================
# Infrastructure
# =============================================================================

@pytest.fixture
def backend():
    """Fresh in-memory storage, branches emulated through tags."""
    return InMemoryStorageBackend(default_branch_id=DEFAULT_BRANCH_ID)


@pytest.fixture
def transport(backend):
    """Transport bound to the default branch."""
    return backend.transport(DEFAULT_BRANCH_ID)


# =============================================================================
# Identity
# =============================================================================

@pytest.fixture
def tags():
    """Tags of a standalone job (no orchestration)."""
    return Tags(
        branch_id=DEFAULT_BRANCH_ID,
        component_id="keboola.component",
        config_id="123",
        job_id="1001",
    )


@pytest.fixture
def orchestration_tags(tags):
    """Tags of a job running inside orchestration 777."""
    return tags.model_copy(update={"orchestration_id": "777"})


# =============================================================================
# Facade
# =============================================================================

@pytest.fixture
def artifacts(transport, settings, tmp_path):
    """Artifacts facade with its workspace under tmp_path."""
    return Artifacts(transport, settings=settings, temp_dir=tmp_path / "workspace")

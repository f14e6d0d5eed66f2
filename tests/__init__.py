"""
jobartifacts Test Suite
=======================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/          → Tests for jobartifacts.core (config, models, exceptions)
    ├── test_tags/          → Tests for jobartifacts.tags (query processors)
    ├── test_infrastructure/→ Tests for jobartifacts.infrastructure (storage, archiver, workspace)
    ├── test_services/      → Tests for jobartifacts.services (file resolution)
    ├── test_facade.py      → Tests for the Artifacts facade
    ├── test_integration/   → End-to-end job lifecycles
    └── conftest.py         → Shared pytest fixtures

Running Tests:
    pytest                          # Run all tests
    pytest tests/test_core/         # Run only core tests
"""

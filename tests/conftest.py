"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides
fixtures and configuration that can be used across all tests.
"""

import os

import pytest
import pytest_asyncio

from chatstore.context import Context
from chatstore.services.constructor import construct_services_manager

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")


def pytest_collection_modifyitems(config: pytest.Config, items: list) -> None:
    """Apply a 30s timeout to every test not marked as slow."""
    for item in items:
        if "slow" not in item.keywords:
            item.add_marker(pytest.mark.timeout(30))


# ============================================================================
# Shared Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def shared_test_log_file(tmp_path_factory) -> str:
    """
    Create a single shared log file for all tests in the session.

    This prevents creating a new timestamped log file for each test,
    consolidating all test logs into one file for easier debugging.

    Returns:
        str: Path to the shared log file
    """
    from datetime import datetime

    logs_dir = tmp_path_factory.mktemp("logs")

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"test_run_{timestamp}.log"

    return str(log_file)


@pytest.fixture
def app_data_dir(tmp_path) -> str:
    """An application data directory that does not exist yet."""
    return os.path.join(str(tmp_path), "app_data")


@pytest_asyncio.fixture
async def services_manager(app_data_dir, shared_test_log_file):
    """Started services against a temporary app data directory."""
    context = Context()
    services_manager = construct_services_manager(
        context=context,
        app_data_dir=app_data_dir,
        log_file=shared_test_log_file,  # Use shared log file
        use_timestamp_logs=False,
        console_output=False,
    )
    await services_manager.initialize_all()

    yield services_manager

    await services_manager.shutdown_all()


@pytest.fixture
def conversation_store(services_manager):
    """The started conversation store."""
    return services_manager.conversation_store_service_manager

"""
Pytest configuration: default runs most tests; use --run-slow to include slow tests.
"""

import pytest

from tryon import logging_config
from tryon.core import prompts_loader


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (live Gemini calls). Default: skip them.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow", False):
        return
    skip_slow = pytest.mark.skip(reason="Slow test; run with --run-slow to include")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def _reset_prompts_cache():
    """Each test sees the bundled prompts.yaml, not a cache patched by another test."""
    prompts_loader._prompts_data = None
    yield
    prompts_loader._prompts_data = None


@pytest.fixture(autouse=True)
def _reset_registered_secrets():
    """Each test starts with no API keys registered by another test."""
    logging_config._redaction_filter._secrets.clear()
    yield
    logging_config._redaction_filter._secrets.clear()

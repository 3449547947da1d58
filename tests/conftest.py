import os
from pathlib import Path

import pytest

# Test layer directory → marker
_LAYER_MARKERS = {
    "domain": pytest.mark.domain,
    "application": pytest.mark.application,
    "integration": pytest.mark.integration,
    "bdd": pytest.mark.bdd,
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config overlay of the domain.toml files to run tests on",
    )
    parser.addoption(
        "--push-adapter",
        action="store",
        default="fake",
        help="Push channel adapter used by the delivery job (fake or expo)",
    )


def pytest_sessionstart(session):
    """Select the config overlay and push adapter before any domain reads its ``domain.toml``."""
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ["PUSH_ADAPTER"] = session.config.option.push_adapter


def pytest_collection_modifyitems(config, items):
    """Mark tests by the layer directory they live in."""
    for item in items:
        parts = Path(item.fspath).parts
        for layer, marker in _LAYER_MARKERS.items():
            if layer in parts:
                item.add_marker(marker)
                break

        # API and cross-component tests are the slow ones
        if "integration" in parts and not any(m.name == "fast" for m in item.iter_markers()):
            item.add_marker(pytest.mark.slow)

"""Shared pytest fixtures for litho tests."""

import socket
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture
def free_port() -> int:
    """A localhost port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("localhost", 0))
        return s.getsockname()[1]


@pytest.fixture
def sample_config_dict() -> dict:
    """Sample configuration dictionary for testing."""
    return {
        "oauth": {
            "client_id": "myclientid",
            "client_secret": "myclientsecret",
            "callback_port": 7878,
        },
        "sync": {
            "photos_dir": "./photos",
            "page_size": 25,
        },
        "log_level": "INFO",
    }


@pytest.fixture
def sample_config_yaml(temp_dir: Path, sample_config_dict: dict) -> Path:
    """Create a temporary YAML config file."""
    import yaml

    config_path = temp_dir / "test_config.yaml"

    config_dict = sample_config_dict.copy()
    config_dict["sync"] = {**config_dict["sync"], "photos_dir": str(temp_dir / "photos")}

    with open(config_path, "w") as f:
        yaml.dump(config_dict, f)

    return config_path

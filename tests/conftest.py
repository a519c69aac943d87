"""Shared pytest fixtures for the gifcaption test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root and this directory are importable
PROJECT_ROOT = Path(__file__).parent.parent
for path in (PROJECT_ROOT, Path(__file__).parent):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from helpers import red_blue_gif  # noqa: E402
from gifcaption import AnimationState  # noqa: E402


@pytest.fixture
def red_blue_bytes():
    return red_blue_gif()


@pytest.fixture
def populated_state(red_blue_bytes):
    state = AnimationState()
    state.process(red_blue_bytes)
    return state


@pytest.fixture
def gif_file(tmp_path, red_blue_bytes):
    path = tmp_path / "input.gif"
    path.write_bytes(red_blue_bytes)
    return path

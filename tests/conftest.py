"""Pytest configuration for renderer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session and before any
module that declares Taichi fields is imported.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate the fields declared by the scene and camera modules.
    """
    from src.pathy.core.runtime import init_runtime

    init_runtime(ti.cpu, seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_scene_data():
    """Clear the uploaded scene before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized first
    from src.pathy.scene.intersection import clear_scene

    clear_scene()
    yield
    clear_scene()

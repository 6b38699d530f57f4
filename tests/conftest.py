"""Pytest configuration for renderer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. Fast math is off so
    parallel and serial renders are bit-identical.
    """
    ti.init(arch=ti.cpu, fast_math=False)
    yield


@pytest.fixture(autouse=True)
def clear_scene_data():
    """Empty the scene arena around each test.

    This ensures tests are isolated from each other.
    """
    # Import here to ensure Taichi is initialized first
    from src.raycast.scene.intersection import clear_scene

    clear_scene()
    yield
    clear_scene()

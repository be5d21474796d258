"""Shared pytest fixtures for UI tests.

pygame runs headless through the SDL ``dummy`` video and audio drivers, so
the drivers are selected before pygame is first imported.
"""

from __future__ import annotations

import os

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")


@pytest.fixture(scope="session")
def pygame_module():
    import pygame

    pygame.display.init()
    try:
        yield pygame
    finally:
        pygame.quit()

import logging
import os

import pytest

from court_analytics.config import Settings, reset_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep the global settings away from the real environment."""
    for key in list(os.environ):
        if key.startswith("COURT_ANALYTICS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("COURT_ANALYTICS_CONFIG", str(tmp_path / "missing.json"))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def detach_log_handlers():
    yield
    logger = logging.getLogger("court_analytics")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def settings():
    return Settings(pixels_to_unit=0.1)


@pytest.fixture
def rally_payload():
    """Static player; the ball arrives, is struck and leaves to the right."""
    player = {"class": "player", "bbox": [480, 650, 40, 100], "confidence": 0.95}

    def ball(cx, cy):
        return {"class": "ball", "bbox": [cx - 5, cy - 5, 10, 10], "confidence": 0.9}

    return {
        "frame_width": 1000,
        "frame_height": 1000,
        "court": True,
        "frames": [
            {"timestamp": 0.0, "detections": [player, ball(600, 700)]},
            {"timestamp": 0.1, "detections": [player, ball(520, 700)]},
            {"timestamp": 0.2, "detections": [player, ball(700, 700)]},
        ]
    }

"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from lineupsim.config.settings import reset_config
from lineupsim.models.player import PlayerRecord, league_average_player


@pytest.fixture(autouse=True)
def fresh_config():
    """Re-read configuration for every test so env overrides never leak."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for reproducible draws."""
    return np.random.default_rng(20240401)


@pytest.fixture
def average_lineup() -> list[PlayerRecord]:
    """Nine identical league-average hitters."""
    return [league_average_player(f"Batter {slot}") for slot in range(1, 10)]


@pytest.fixture
def mixed_lineup() -> list[PlayerRecord]:
    """Nine distinguishable hitters, from slugger to weak bat."""
    return [
        PlayerRecord("Slugger", 620, 170, 35, 2, 40, 80, 8, 150),
        PlayerRecord("Contact", 650, 190, 30, 6, 8, 45, 4, 70),
        PlayerRecord("Speedster", 600, 160, 22, 10, 5, 55, 3, 90),
        PlayerRecord("Patient", 580, 130, 28, 2, 22, 100, 6, 140),
        PlayerRecord("Average", 600, 135, 27, 3, 18, 50, 6, 130),
        PlayerRecord("Catcher", 450, 95, 18, 0, 12, 35, 5, 110),
        PlayerRecord("Glove", 480, 105, 15, 3, 4, 30, 2, 95),
        PlayerRecord("Rookie", 400, 85, 16, 1, 10, 28, 3, 125),
        PlayerRecord("Pitcher", 80, 10, 1, 0, 0, 3, 0, 40),
    ]


@pytest.fixture
def strikeout_player() -> PlayerRecord:
    """Never reaches base."""
    return PlayerRecord("Whiffer", 100, 0, 0, 0, 0, 0, 0, 100)

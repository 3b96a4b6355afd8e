"""Elo rating math for team matches — pure functions, no I/O.

Each player is rated against the opposing team's average rating:

    expected = 1 / (1 + 10 ** ((opponent_avg - rating) / 400))
    new      = max(100, round_half_up(rating + K * (outcome - expected)))

K is 40 for a player's first 10 games, then 32 below 1500 and 24 above.
"""

import math
from collections.abc import Iterable

from src.bc_account.domain.models import DEFAULT_RATING

RATING_FLOOR = 100
PROVISIONAL_GAMES = 10
K_PROVISIONAL = 40
K_INTERMEDIATE = 32
K_ESTABLISHED = 24
ESTABLISHED_RATING = 1500

WIN = 1.0
DRAW = 0.5
LOSS = 0.0


def expected_score(rating: float, opponent_rating: float) -> float:
    return 1 / (1 + math.pow(10, (opponent_rating - rating) / 400))


def k_factor(rating: int, games_played: int) -> int:
    if games_played < PROVISIONAL_GAMES:
        return K_PROVISIONAL
    if rating < ESTABLISHED_RATING:
        return K_INTERMEDIATE
    return K_ESTABLISHED


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; ratings round .5 upwards
    return math.floor(value + 0.5)


def team_average(ratings: Iterable[int | None]) -> float:
    values = [r if r else DEFAULT_RATING for r in ratings]
    if not values:
        return float(DEFAULT_RATING)
    return sum(values) / len(values)


def team1_outcome(score1: int, score2: int) -> float:
    if score1 > score2:
        return WIN
    if score2 > score1:
        return LOSS
    return DRAW


def rating_after(rating: int, games_played: int, opponent_avg: float, outcome: float) -> int:
    delta = k_factor(rating, games_played) * (outcome - expected_score(rating, opponent_avg))
    return max(RATING_FLOOR, round_half_up(rating + delta))

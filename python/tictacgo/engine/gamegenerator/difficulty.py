"""Difficulty levels, bands and generator settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from tictacgo.engine.gamerules.rules import LineRules
from tictacgo.engine.gamesolver.context import SearchBudget


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class BandFit(StrEnum):
    BELOW = "below"
    WITHIN = "within"
    ABOVE = "above"


@dataclass(frozen=True)
class ScoreWeights:
    push: float = 1.0
    branching: float = 0.1
    dependency: float = 0.5
    motif: float = 0.25


@dataclass(frozen=True)
class DifficultyScore:
    """Solver-derived difficulty of a position."""

    pushes: int
    branching: float
    dependencies: int
    motifs: int
    value: float

    @classmethod
    def compute(
        cls,
        pushes: int,
        branching: float,
        dependencies: int,
        motifs: int,
        weights: ScoreWeights = ScoreWeights(),
    ) -> DifficultyScore:
        value = (
            weights.push * pushes
            + weights.branching * branching
            + weights.dependency * dependencies
            + weights.motif * motifs
        )
        return cls(pushes, branching, dependencies, motifs, round(value, 4))


@dataclass(frozen=True)
class DifficultyBand:
    """Accepted score range; ``max_score`` is exclusive, ``max_pushes`` inclusive."""

    min_score: float = 0.0
    max_score: float | None = None
    min_pushes: int = 1
    max_pushes: int | None = None

    def classify(self, score: DifficultyScore) -> BandFit:
        if score.pushes < self.min_pushes or score.value < self.min_score:
            return BandFit.BELOW
        if self.max_pushes is not None and score.pushes > self.max_pushes:
            return BandFit.ABOVE
        if self.max_score is not None and score.value >= self.max_score:
            return BandFit.ABOVE
        return BandFit.WITHIN


@dataclass(frozen=True)
class DifficultyProfile:
    """Cross-count range and band of one difficulty.

    ``scramble_steps`` and ``solver_budget`` override the config-wide
    values; deeper bands need longer scrambles and costlier scoring solves.
    """

    min_crosses: int
    max_crosses: int
    band: DifficultyBand
    scramble_steps: int | None = None
    solver_budget: SearchBudget | None = None


DEFAULT_PROFILES: dict[Difficulty, DifficultyProfile] = {
    Difficulty.EASY: DifficultyProfile(
        0, 2, DifficultyBand(min_score=0.0, max_score=4.0, min_pushes=1, max_pushes=2)
    ),
    Difficulty.MEDIUM: DifficultyProfile(
        1, 3, DifficultyBand(min_score=4.0, max_score=9.0, min_pushes=3, max_pushes=6)
    ),
    Difficulty.HARD: DifficultyProfile(
        2,
        4,
        DifficultyBand(min_score=9.0, min_pushes=6),
        scramble_steps=90,
        solver_budget=SearchBudget(max_expansions=100_000, time_limit=5.0),
    ),
}


@dataclass(frozen=True)
class GeneratorConfig:
    """
    Settings for puzzle generation.

    Attributes:
        profiles: Cross-count range and score band per difficulty
        weights: Difficulty score weights
        batch_size: Scramble moves between two scoring runs
        max_scramble_steps: Scramble moves per attempt before giving up on it
        max_restarts: Attempts before the fallback puzzle is used
        time_limit: Overall seconds per ``generate`` call
        solver_budget: Budget of each scoring solve
        motif_bias: Extra pull weight per motif covering the pulled piece's new cell
        spread_bias: Weight factor of a pull that moves the circles one push
            further from every line (its inverse for one push closer)
        rules: Line rules for wins and losses
    """

    profiles: dict[Difficulty, DifficultyProfile] = field(
        default_factory=lambda: dict(DEFAULT_PROFILES)
    )
    weights: ScoreWeights = ScoreWeights()
    batch_size: int = 3
    max_scramble_steps: int = 60
    max_restarts: int = 40
    time_limit: float = 20.0
    solver_budget: SearchBudget = SearchBudget(max_expansions=20_000, time_limit=2.0)
    motif_bias: float = 1.0
    spread_bias: float = 3.0
    rules: LineRules = LineRules()

    def profile(self, difficulty: Difficulty | str) -> DifficultyProfile:
        return self.profiles[Difficulty(difficulty)]

    def scramble_steps(self, profile: DifficultyProfile) -> int:
        if profile.scramble_steps is None:
            return self.max_scramble_steps
        return profile.scramble_steps

    def budget(self, profile: DifficultyProfile) -> SearchBudget:
        return profile.solver_budget or self.solver_budget


DEFAULT_CONFIG = GeneratorConfig()

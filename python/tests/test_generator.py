"""Puzzle generator, difficulty bands and trap motifs.

Every generated puzzle is re-solved with an unlimited solver, so a puzzle
the generator only believed solvable would fail here.
"""

from __future__ import annotations

import random
from statistics import mean

import pytest

from conftest import board
from tictacgo.engine.gamedeadlock import DeadlockDetector
from tictacgo.engine.gamegenerator import (
    DEFAULT_CONFIG,
    MOTIFS,
    BandFit,
    Difficulty,
    DifficultyBand,
    DifficultyScore,
    GameGenerator,
    GeneratorConfig,
    ScoreWeights,
    band_gap,
    cell_matches,
    generate,
    get_motif,
    get_motif_info,
    get_motif_names,
    motif_count,
    register_motif,
)
from tictacgo.engine.gamerules import crosses_aligned, is_loss, is_win
from tictacgo.engine.gamesolver import SearchBudget, Solver, SolveStatus, push_lower_bound
from tictacgo.engine.gamestate import State
from tictacgo.errors import GenerationExhausted, InvalidGeometry
from tictacgo.models import BoardGeometry, random_geometry

_UNLIMITED = Solver(budget=SearchBudget.unlimited())

# Keeps the slower difficulties quick on small boards.
_QUICK = GeneratorConfig(max_restarts=10, time_limit=3.0)


def _assert_solvable(state: State) -> int:
    solution = _UNLIMITED.solve(state)
    assert solution.status is SolveStatus.FOUND, state.to_ascii()
    return solution.push_count


# -- generation -----------------------------------------------------------------


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_easy_three_by_three_without_crosses(seed: int) -> None:
    puzzle = generate(BoardGeometry.rectangle(3, 3), Difficulty.EASY, seed, cross_count=0)
    state = puzzle.initial_state
    assert state.crosses == 0
    assert not is_win(state)
    assert 1 <= _assert_solvable(state) <= 2
    assert puzzle.seed == seed
    assert puzzle.difficulty is Difficulty.EASY


@pytest.mark.parametrize("difficulty", ["medium", "hard"])
@pytest.mark.parametrize("seed", [7, 11])
def test_generated_puzzles_are_solvable(difficulty: str, seed: int) -> None:
    gen = GameGenerator(_QUICK)
    puzzle = gen.generate(BoardGeometry.rectangle(4, 4), difficulty, seed)
    assert not is_win(puzzle.initial_state)
    assert _assert_solvable(puzzle.initial_state) >= 1
    assert puzzle.difficulty == difficulty


def test_random_geometry_puzzle_is_solvable() -> None:
    g = random_geometry(random.Random(5), holes=3)
    puzzle = GameGenerator(_QUICK).generate(g, "medium", 5)
    assert puzzle.geometry == g
    assert _assert_solvable(puzzle.initial_state) >= 1


@pytest.mark.timeout(600)
@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_puzzles_land_in_their_band(difficulty: Difficulty) -> None:
    gen = GameGenerator()
    band = DEFAULT_CONFIG.profile(difficulty).band
    fallbacks = 0
    for seed in range(4):
        puzzle = gen.generate(random_geometry(random.Random(seed)), difficulty, seed)
        if puzzle.is_fallback:
            fallbacks += 1
            continue
        assert band.classify(puzzle.score) is BandFit.WITHIN, puzzle.to_ascii()
        assert _assert_solvable(puzzle.initial_state) == puzzle.pushes
    assert fallbacks <= 1


def test_generation_is_deterministic() -> None:
    g = BoardGeometry.rectangle(3, 4)
    assert generate(g, "easy", 42) == generate(g, "easy", 42)


def test_line_board_is_enough() -> None:
    puzzle = generate(BoardGeometry.rectangle(1, 4), "easy", 3)
    assert puzzle.initial_state.crosses == 0
    assert _assert_solvable(puzzle.initial_state) == 1


def test_profile_cross_count_within_range() -> None:
    gen = GameGenerator()
    for seed in range(3):
        puzzle = gen.generate(BoardGeometry.rectangle(4, 4), "easy", seed)
        if not puzzle.is_fallback:
            assert puzzle.initial_state.crosses.bit_count() <= 2


@pytest.mark.parametrize(
    "geometry,crosses",
    [
        (BoardGeometry.rectangle(2, 2), None),
        (BoardGeometry.from_ascii("...\n###\n..."), None),
        (BoardGeometry.rectangle(1, 4), 1),
        (BoardGeometry.rectangle(1, 3), None),
    ],
    ids=["no_line", "disconnected", "too_small", "line_only"],
)
def test_rejects_unusable_geometry(geometry: BoardGeometry, crosses: int | None) -> None:
    with pytest.raises(InvalidGeometry):
        generate(geometry, "easy", 0, cross_count=crosses)


# -- fallback -------------------------------------------------------------------


def test_fallback_puzzle() -> None:
    gen = GameGenerator()
    g = BoardGeometry.rectangle(3, 3)
    puzzle = gen.fallback(g, Difficulty.HARD, 9)
    assert puzzle.is_fallback
    assert puzzle.difficulty is Difficulty.HARD
    assert puzzle.pushes is not None and puzzle.pushes >= 1
    assert not is_win(puzzle.initial_state)
    assert _assert_solvable(puzzle.initial_state) == puzzle.pushes
    assert gen.fallback(g, Difficulty.HARD, 9) == puzzle


def test_fallback_follows_difficulty() -> None:
    gen = GameGenerator()
    g = BoardGeometry.rectangle(4, 4)
    easy = gen.fallback(g, Difficulty.EASY, 0)
    hard = gen.fallback(g, Difficulty.HARD, 0)
    assert DEFAULT_CONFIG.profile("easy").band.classify(easy.score) is BandFit.WITHIN
    assert hard.pushes > easy.pushes
    assert _assert_solvable(hard.initial_state) == hard.pushes


def test_no_restarts_goes_straight_to_fallback() -> None:
    gen = GameGenerator(GeneratorConfig(max_restarts=0))
    puzzle = gen.generate(BoardGeometry.rectangle(3, 3), "easy", 5)
    assert puzzle.is_fallback
    assert puzzle.seed == 5


def test_fallback_exhausted() -> None:
    with pytest.raises(GenerationExhausted):
        GameGenerator().fallback(BoardGeometry.rectangle(1, 3), Difficulty.EASY, 0)


# -- seed position and scrambling -----------------------------------------------


@pytest.mark.parametrize("seed", range(6))
def test_seed_state_is_won_and_safe(seed: int) -> None:
    g = BoardGeometry.rectangle(4, 4)
    gen = GameGenerator()
    detector = DeadlockDetector(g)
    state = gen.seed_state(g, 2, random.Random(seed), detector)
    assert is_win(state)
    assert state.circles.bit_count() == 2
    assert state.crosses.bit_count() <= 2
    assert not crosses_aligned(state)
    assert detector.frozen_pieces(state) & state.crosses == 0


@pytest.mark.parametrize("seed", range(4))
def test_scramble_never_enters_dead_positions(seed: int) -> None:
    g = BoardGeometry.rectangle(4, 4)
    gen = GameGenerator()
    detector = DeadlockDetector(g)
    rng = random.Random(seed)
    state = gen.seed_state(g, 2, rng, detector)
    for _ in range(40):
        state = gen.scramble(state, 1, rng, detector)
        assert not is_loss(state)
        assert not detector.is_deadlocked(state)


def test_scramble_keeps_puzzle_solvable() -> None:
    g = BoardGeometry.rectangle(4, 4)
    gen = GameGenerator()
    rng = random.Random(3)
    state = gen.scramble(gen.seed_state(g, 1, rng), 20, rng)
    _assert_solvable(state)


def test_each_scramble_move_pulls_a_piece() -> None:
    g = BoardGeometry.rectangle(4, 4)
    gen = GameGenerator()
    rng = random.Random(1)
    state = gen.seed_state(g, 1, rng)
    for _ in range(10):
        nxt = gen.scramble(state, 1, rng)
        assert (nxt.circles, nxt.crosses) != (state.circles, state.crosses)
        state = nxt


def test_spread_bias_moves_circles_away_from_lines() -> None:
    g = BoardGeometry.rectangle(5, 5)

    def mean_bound(spread_bias: float) -> float:
        gen = GameGenerator(GeneratorConfig(spread_bias=spread_bias))
        bounds = []
        for seed in range(20):
            rng = random.Random(seed)
            state = gen.scramble(gen.seed_state(g, 0, rng), 10, rng)
            bounds.append(push_lower_bound(state))
        return mean(bounds)

    assert mean_bound(4.0) > mean_bound(1.0)


def test_longer_scrambles_score_higher() -> None:
    g = BoardGeometry.rectangle(4, 4)
    gen = GameGenerator()
    short: list[float] = []
    long: list[float] = []
    for seed in range(12):
        rng = random.Random(seed)
        start = gen.seed_state(g, 1, rng)
        for steps, scores in ((1, short), (30, long)):
            score = gen.score(gen.scramble(start, steps, random.Random(seed)))
            if score is not None:
                scores.append(score.value)
    assert short and long
    assert mean(long) >= mean(short)


# -- difficulty -----------------------------------------------------------------


def test_score_compute() -> None:
    score = DifficultyScore.compute(3, 2.5, 1, 4, ScoreWeights())
    assert score.value == pytest.approx(3 + 0.25 + 0.5 + 1.0)
    assert DifficultyScore.compute(1, 0.0, 0, 0, ScoreWeights(push=2.0)).value == 2.0


def test_band_classify() -> None:
    band = DifficultyBand(min_score=4.0, max_score=9.0, min_pushes=3, max_pushes=6)

    def fit(pushes: int, value: float) -> BandFit:
        return band.classify(DifficultyScore(pushes, 0.0, 0, 0, value))

    assert fit(3, 4.0) is BandFit.WITHIN
    assert fit(2, 5.0) is BandFit.BELOW
    assert fit(4, 3.9) is BandFit.BELOW
    assert fit(7, 8.0) is BandFit.ABOVE
    assert fit(5, 9.0) is BandFit.ABOVE


def test_band_gap() -> None:
    band = DifficultyBand(min_score=4.0, max_score=9.0, min_pushes=3, max_pushes=6)
    assert band_gap(band, DifficultyScore(4, 0.0, 0, 0, 5.0)) == 0.0
    assert band_gap(band, DifficultyScore(1, 0.0, 0, 0, 1.5)) == 2.5
    assert band_gap(band, DifficultyScore(8, 0.0, 0, 0, 8.5)) == 2.0


def test_profile_overrides_scramble_settings() -> None:
    config = GeneratorConfig()
    easy = config.profile("easy")
    hard = config.profile("hard")
    assert config.scramble_steps(easy) == config.max_scramble_steps
    assert config.budget(easy) == config.solver_budget
    assert config.scramble_steps(hard) > config.max_scramble_steps
    assert config.budget(hard).max_expansions > config.solver_budget.max_expansions


def test_config_profile_lookup() -> None:
    config = GeneratorConfig()
    assert config.profile("hard").band.max_score is None
    with pytest.raises(ValueError):
        config.profile("extreme")


# -- motifs ---------------------------------------------------------------------


def test_builtin_motifs_registered() -> None:
    assert set(get_motif_names()) >= {
        "dead_end_corridor",
        "corner_stash",
        "narrow_passage",
        "wall_run",
    }
    assert {info["name"] for info in get_motif_info()} == set(MOTIFS)


def test_motif_library_is_read_only() -> None:
    with pytest.raises(TypeError):
        MOTIFS["extra"] = MOTIFS["wall_run"]  # type: ignore[index]


def test_duplicate_registration_fails() -> None:
    with pytest.raises(ValueError):
        register_motif("wall_run", "again")(lambda geometry: 0)


def test_unknown_motif() -> None:
    with pytest.raises(ValueError):
        get_motif("spiral")


def test_dead_end_corridor_on_a_line() -> None:
    g = BoardGeometry.rectangle(1, 3)
    assert get_motif("dead_end_corridor").cells(g) == 0b111


def test_edge_motifs_on_square() -> None:
    g = BoardGeometry.rectangle(3, 3)
    edges = sum(1 << i for i in (1, 3, 5, 7))
    assert get_motif("wall_run").cells(g) == edges
    assert get_motif("corner_stash").cells(g) == edges
    assert get_motif("narrow_passage").cells(g) == 0
    matches = cell_matches(g)
    assert matches[1] == 2
    assert matches[4] == 0


def test_motif_count_ignores_player() -> None:
    assert motif_count(board("@o.\n...\n...")) == 2
    assert motif_count(board(".o.\n.@.\n...")) == 2
    assert motif_count(board("...\n.o.\n@..")) == 0

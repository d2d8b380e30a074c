from tictacgo.engine.gamegenerator.difficulty import (
    DEFAULT_CONFIG,
    DEFAULT_PROFILES,
    BandFit,
    Difficulty,
    DifficultyBand,
    DifficultyProfile,
    DifficultyScore,
    GeneratorConfig,
    ScoreWeights,
)
from tictacgo.engine.gamegenerator.generator import (
    GameGenerator,
    Puzzle,
    band_gap,
    generate,
)
from tictacgo.engine.gamegenerator.motifs import (
    MOTIFS,
    TrapMotif,
    cell_matches,
    get_motif,
    get_motif_info,
    get_motif_names,
    motif_count,
    register_motif,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_PROFILES",
    "MOTIFS",
    "BandFit",
    "Difficulty",
    "DifficultyBand",
    "DifficultyProfile",
    "DifficultyScore",
    "GameGenerator",
    "GeneratorConfig",
    "Puzzle",
    "ScoreWeights",
    "TrapMotif",
    "band_gap",
    "cell_matches",
    "generate",
    "get_motif",
    "get_motif_info",
    "get_motif_names",
    "motif_count",
    "register_motif",
]

"""cgt-engine — canonical forms of short combinatorial games."""

from cgt_engine.engine.config import PARALLEL_CONFIG, SEQUENTIAL_CONFIG, EngineConfig
from cgt_engine.engine.core import GameEngine
from cgt_engine.errors import (
    CgtError,
    ConstructionError,
    EvaluationError,
    InvalidNumberError,
    MalformedDocumentError,
    UnknownPositionError,
)
from cgt_engine.game.types import NodeKind, Outcome, PositionId, PositionView

__all__ = [
    "CgtError",
    "ConstructionError",
    "EngineConfig",
    "EvaluationError",
    "GameEngine",
    "InvalidNumberError",
    "MalformedDocumentError",
    "NodeKind",
    "Outcome",
    "PARALLEL_CONFIG",
    "PositionId",
    "PositionView",
    "SEQUENTIAL_CONFIG",
    "UnknownPositionError",
]

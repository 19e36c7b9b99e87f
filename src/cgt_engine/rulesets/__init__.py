"""Ruleset adapters — games that reduce to canonical forms through the engine."""

from cgt_engine.rulesets.domineering import Domineering
from cgt_engine.rulesets.quicksort import Quicksort
from cgt_engine.rulesets.ski_jumps import SkiJumps
from cgt_engine.rulesets.table import TranspositionTable, position_of

__all__ = [
    "Domineering",
    "Quicksort",
    "SkiJumps",
    "TranspositionTable",
    "position_of",
]

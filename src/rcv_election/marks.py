"""
Contains RankMarks class
"""

from __future__ import annotations
from typing import Dict, List, Optional

VARIATION_SELECTOR = "\ufe0f"


class RankMarks:
    """Marker symbols placed on records, and the meaning the election gives them."""

    # structure markers
    ELECTION_START = "\U0001f530"  # :beginner:
    ELECTION_FINISHED = "\U0001f3c1"  # :checkered_flag:
    CANDIDATE = ["\u2611\ufe0f", "\u2714\ufe0f", "\u2705"]  # :ballot_box_with_check:, :heavy_check_mark:, :white_check_mark:

    # outcome markers
    WINNER = "\U0001f451"  # :crown:
    LOSER = "\u274c"  # :x:

    # rank markers, index is the zero-based rank
    RANKS = [f"{digit}\ufe0f\u20e3" for digit in "123456789"] + ["\U0001f51f"]  # keycaps 1-9, :keycap_ten:

    N_RANKS = len(RANKS)

    @staticmethod
    def rank_dict() -> Dict[str, int]:
        """
        :return: Dictionary mapping each rank symbol to its zero-based rank.
        :rtype: Dict[str, int]
        """
        return {symbol: rank for rank, symbol in enumerate(RankMarks.RANKS)}

    @staticmethod
    def rank_for_symbol(symbol: str) -> Optional[int]:
        """Zero-based rank of a rank symbol, or None if the symbol is not a rank marker.

        Symbols are also matched without the emoji variation selector, since some
        clients drop it.
        """
        ranks = RankMarks.rank_dict()
        if symbol in ranks:
            return ranks[symbol]
        for rank_symbol, rank in ranks.items():
            if rank_symbol.replace(VARIATION_SELECTOR, "") == symbol.replace(VARIATION_SELECTOR, ""):
                return rank
        return None

    @staticmethod
    def symbol_for_rank(rank: int) -> str:
        if rank < 0 or rank >= RankMarks.N_RANKS:
            raise ValueError(f"rank must be between 0 and {RankMarks.N_RANKS - 1}, got {rank}")
        return RankMarks.RANKS[rank]

    @staticmethod
    def outcome_marks() -> List[str]:
        """Markers written back by a tabulation, and stripped again by a reset."""
        return [RankMarks.WINNER, RankMarks.LOSER]

    @staticmethod
    def same_mark(symbol: str, other: str) -> bool:
        return symbol.replace(VARIATION_SELECTOR, "") == other.replace(VARIATION_SELECTOR, "")

    @staticmethod
    def has_mark(markers: Dict[str, List[str]], symbol: str) -> bool:
        """True if `symbol` appears among a record's markers, with at least one voter."""
        return any(RankMarks.same_mark(mark, symbol) and voters for mark, voters in markers.items())

    @staticmethod
    def is_candidate_mark(symbol: str) -> bool:
        """True for the markers that flag a record as a candidate. Rank markers alone do not."""
        return any(RankMarks.same_mark(symbol, mark) for mark in RankMarks.CANDIDATE)

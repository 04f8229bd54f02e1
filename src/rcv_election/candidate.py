"""
Contains Candidate class
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, TYPE_CHECKING

import re

from rcv_election.errors import ConflictingRankError, MalformedCandidateName
from rcv_election.marks import RankMarks

if TYPE_CHECKING:
    from rcv_election.channels import ChannelRecord

FIRST_WORD_CHAR = re.compile(r"\w")
LAST_WORD_CHAR = re.compile(r"\w[^\w]*$")


class Candidate:
    """A candidate and the votes it received, as a mapping of voter to zero-based rank."""

    @staticmethod
    def trim_name(text: str) -> str:
        """Cut a candidate name out of free text, dropping anything before the first
        and after the last word character.

        :param text: Record text.
        :type text: str
        :raises MalformedCandidateName: The text contains no word characters.
        :return: Trimmed candidate name.
        :rtype: str
        """
        first = FIRST_WORD_CHAR.search(text)
        last = LAST_WORD_CHAR.search(text)
        if first is None or last is None:
            raise MalformedCandidateName(text)
        return text[first.start() : last.start() + 1]

    @classmethod
    def from_record(cls, record: ChannelRecord, ignore_voters: Optional[Iterable[str]] = None) -> Candidate:
        """Build a candidate from a record, reading votes from its rank markers.

        :param record: Candidate record.
        :type record: ChannelRecord
        :param ignore_voters: Identities whose markers are not votes (e.g. the bot itself), defaults to None
        :type ignore_voters: Optional[Iterable[str]], optional
        :raises ConflictingRankError: A voter applied more than one rank marker to this record.
        :return: New candidate.
        :rtype: Candidate
        """
        ignore_set = set(ignore_voters or [])
        name = cls.trim_name(record.content)

        voter_ranks = {}
        for symbol, voters in record.markers.items():
            rank = RankMarks.rank_for_symbol(symbol)
            if rank is None:
                continue
            for voter in voters:
                if voter in ignore_set:
                    continue
                voter_ranks.setdefault(voter, []).append(rank)

        votes = {}
        for voter, ranks in voter_ranks.items():
            if len(set(ranks)) > 1:
                raise ConflictingRankError(voter, name, list(set(ranks)))
            votes[voter] = ranks[0]

        return cls(name, votes=votes, record_id=record.record_id)

    def __init__(self, name: str, votes: Optional[Dict[str, int]] = None, record_id: Optional[str] = None) -> None:
        """Constructor

        :param name: Candidate name.
        :type name: str
        :param votes: Voter identity to zero-based rank, defaults to no votes.
        :type votes: Optional[Dict[str, int]], optional
        :param record_id: Id of the record this candidate was read from, defaults to None
        :type record_id: Optional[str], optional
        """
        self.name = name
        self.record_id = record_id
        self.votes: Dict[str, int] = {}

        for voter, rank in (votes or {}).items():
            if not isinstance(rank, int) or isinstance(rank, bool) or rank < 0:
                raise TypeError(f"rank for voter {voter} must be a non-negative integer, got {rank!r}")
            self.votes[voter] = rank

    def copy(self) -> Candidate:
        """Make a copy that owns its own vote mapping."""
        return Candidate(self.name, votes=dict(self.votes), record_id=self.record_id)

    def first_choice_count(self) -> int:
        """Number of voters who rank this candidate first (rank 0)."""
        return sum(1 for rank in self.votes.values() if rank == 0)

    def rank_counts(self, n_ranks: int = RankMarks.N_RANKS) -> List[int]:
        """Number of votes at each rank from 0 to `n_ranks` - 1."""
        counts = [0] * n_ranks
        for rank in self.votes.values():
            if rank < n_ranks:
                counts[rank] += 1
        return counts

    def voters(self) -> List[str]:
        return list(self.votes.keys())

    def __repr__(self) -> str:
        return f"Candidate({self.name!r}, votes={self.votes!r})"

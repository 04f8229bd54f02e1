"""
Functions that keep every voter's ranking contiguous across the active candidates.

Ballots are not stored on their own. A voter's ballot is the set of ranks that
voter holds across the candidates' vote mappings. Rank markers are collected
sparsely (a voter may skip rank 2 and use rank 3) and eliminations leave holes
behind, so before each round every ballot is renumbered to start at rank 0
with no gaps.
"""

from __future__ import annotations
from typing import Dict, List, NamedTuple, Sequence

import logging

from rcv_election.candidate import Candidate
from rcv_election.errors import DuplicateVoteError

logger = logging.getLogger(__name__)


class NormalizedVotes(NamedTuple):
    fixed_voters: List[str]
    voter_count: int


def rank_vector(candidates: Sequence[Candidate], voter: str) -> List[Candidate]:
    """Reconstruct one voter's ballot as a list indexed by rank. Unused ranks hold None.

    :param candidates: Active candidates.
    :type candidates: Sequence[Candidate]
    :param voter: Voter identity.
    :type voter: str
    :raises DuplicateVoteError: The voter gave the same rank to two different candidates.
    :return: List of candidates (or None) indexed by zero-based rank.
    :rtype: List[Candidate]
    """
    ranked = [(cand.votes[voter], cand) for cand in candidates if voter in cand.votes]
    if not ranked:
        return []

    vector = [None] * (max(rank for rank, _ in ranked) + 1)
    for rank, cand in ranked:
        if vector[rank] is not None and vector[rank] is not cand:
            raise DuplicateVoteError(voter, rank, [vector[rank].name, cand.name])
        vector[rank] = cand
    return vector


def close_gaps(vector: List[Candidate], voter: str) -> bool:
    """Move ranked candidates down into empty ranks until the ballot has no gaps.

    Updates the rank stored in each moved candidate's vote mapping.

    :return: True if any rank was changed.
    :rtype: bool
    """
    changed = False
    j = 0
    while j < len(vector):
        if vector[j] is None:
            k = next((k for k in range(j + 1, len(vector)) if vector[k] is not None), None)
            if k is None:
                break
            cand = vector[k]
            cand.votes[voter] = j
            vector[j] = cand
            vector[k] = None
            changed = True
        j += 1

    # trailing empty ranks carry no information
    while vector and vector[-1] is None:
        vector.pop()

    return changed


def normalize_votes(candidates: Sequence[Candidate]) -> NormalizedVotes:
    """Renumber every voter's ranks across `candidates` so they run 0..k with no gaps.

    All ballots are checked before any rank is rewritten, so a ballot error leaves
    every vote mapping as it was.

    :param candidates: Active candidates, whose vote mappings are updated in place.
    :type candidates: Sequence[Candidate]
    :raises DuplicateVoteError: A voter gave the same rank to two different candidates.
    :return: Voters whose ranks were rewritten, in the order they were first seen, and
        the number of distinct voters holding any rank among `candidates`.
    :rtype: NormalizedVotes
    """
    seen = set()
    vectors: Dict[str, List[Candidate]] = {}

    for cand in candidates:
        for voter in cand.votes:
            if voter in seen:
                continue
            seen.add(voter)
            vectors[voter] = rank_vector(candidates, voter)

    fixed_voters = [voter for voter, vector in vectors.items() if close_gaps(vector, voter)]

    if fixed_voters:
        logger.debug(f"closed ranking gaps for {len(fixed_voters)} voter(s)")

    return NormalizedVotes(fixed_voters=fixed_voters, voter_count=len(seen))

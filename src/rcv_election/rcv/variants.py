from typing import Dict, List, Sequence, Tuple

import logging
import random

from rcv_election.candidate import Candidate
from rcv_election.rcv.base import Election
from rcv_election.util import AuditLog, join_names

logger = logging.getLogger(__name__)


def get_rcv_dict():
    """
    Return dictionary of tie break strategies, name: class_obj (constructor function)
    """
    return {
        'InstantRunoff': InstantRunoff,
        'PreferenceScore': PreferenceScoreRunoff,
    }


def lowest_tiers(candidates: Sequence[Candidate], voter_count: int) -> Tuple[int, int, List[Candidate]]:
    """
    Find the lowest first-choice count, the next distinct count above it, and the
    candidates holding the lowest count (in active order).

    When every candidate holds the lowest count there is no tier above it, and
    `voter_count` is used as the second lowest count instead.
    """
    counts = [cand.first_choice_count() for cand in candidates]
    lowest = min(counts)
    higher = [count for count in counts if count > lowest]
    second_lowest = min(higher) if higher else voter_count
    group = [cand for cand, count in zip(candidates, counts) if count == lowest]
    return lowest, second_lowest, group


def select_losers(
    candidates: Sequence[Candidate],
    voter_count: int,
    rng: random.Random,
    audit_log: AuditLog,
) -> List[Candidate]:
    """
    Choose the candidates to eliminate in a round without a majority winner.

    rules:
    - the candidate with the fewest first-choice votes is eliminated
    - a tied lowest group is eliminated together if, even combined, it holds fewer
      first-choice votes than the next lowest candidate
    - otherwise one member of the tied group is chosen at random

    :param candidates: Active candidates, more than one.
    :type candidates: Sequence[Candidate]
    :param voter_count: Number of voters with a ranking among active candidates.
    :type voter_count: int
    :param rng: Source of randomness for tie breaks.
    :type rng: random.Random
    :param audit_log: Log that every decision is explained in.
    :type audit_log: AuditLog
    :return: Candidates to eliminate, never empty.
    :rtype: List[Candidate]
    """
    lowest, second_lowest, group = lowest_tiers(candidates, voter_count)
    group_names = join_names([cand.name for cand in group])

    if len(group) == 1:
        audit_log.write(f"{group[0].name} has the fewest first-choice votes ({lowest}).")
        return group

    audit_log.write(f"Tied for fewest first-choice votes ({lowest}): {group_names}.")

    if lowest * len(group) < second_lowest:
        audit_log.write(
            f"Combined, the tied candidates hold {lowest * len(group)} first-choice votes, "
            f"fewer than the next lowest count ({second_lowest}), so all of them are removed together."
        )
        return list(group)

    chosen = rng.choice(list(group))
    audit_log.write(
        f"Combined, the tied candidates hold {lowest * len(group)} first-choice votes, "
        f"not fewer than the next lowest count ({second_lowest}). Breaking the tie at random: {chosen.name}."
    )
    logger.debug(f"random tie break among {group_names} chose {chosen.name}")
    return [chosen]


def preference_scores(candidates: Sequence[Candidate]) -> Dict[int, int]:
    """
    Score every candidate by how highly it is ranked overall: each voter contributes
    (number of active candidates - rank). Keys are id(candidate).
    """
    n_active = len(candidates)
    return {id(cand): sum(max(n_active - rank, 0) for rank in cand.votes.values()) for cand in candidates}


class InstantRunoff(Election):
    """
    Instant-runoff election.
    - Winner is the candidate holding more than half of the first-choice votes, or the last one left.
    - Each round eliminates the lowest candidate, or a whole tied lowest group that cannot catch up.
    - Consequential ties are broken at random.
    """
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)

    def select_round_losers(self) -> List[Candidate]:
        return select_losers(self.active_candidates, self.voter_count, self.rng, self.audit_log)


class PreferenceScoreRunoff(Election):
    """
    Instant-runoff election with the preference score tie break.
    - Ties for the fewest first-choice votes are broken by eliminating the tied candidate
      that is ranked lowest overall (see `preference_scores`).
    - Candidates that remain tied are broken at random.
    - Only one candidate is eliminated per round.
    """
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)

    def select_round_losers(self) -> List[Candidate]:
        lowest, _, group = lowest_tiers(self.active_candidates, self.voter_count)

        if len(group) == 1:
            self.audit_log.write(f"{group[0].name} has the fewest first-choice votes ({lowest}).")
            return group

        scores = preference_scores(self.active_candidates)
        self.audit_log.write(
            f"Tied for fewest first-choice votes ({lowest}): "
            + ", ".join(f"{cand.name} (preference score {scores[id(cand)]})" for cand in group)
            + "."
        )

        min_score = min(scores[id(cand)] for cand in group)
        lowest_scored = [cand for cand in group if scores[id(cand)] == min_score]
        if len(lowest_scored) == 1:
            self.audit_log.write(f"{lowest_scored[0].name} has the lowest preference score.")
            return lowest_scored

        chosen = self.rng.choice(lowest_scored)
        self.audit_log.write(
            f"Preference scores are also tied ({min_score}). Breaking the tie at random: {chosen.name}."
        )
        return [chosen]

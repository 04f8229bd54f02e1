"""
Contains the Election class.
Defines the instant-runoff round loop and adds in reporting methods from rcv/tables.py.
"""
from __future__ import annotations
from typing import Dict, List, Optional, Sequence

import abc
import logging
import random

from rcv_election.ballots import normalize_votes
from rcv_election.candidate import Candidate
from rcv_election.errors import DuplicateCandidateName, NoCandidatesFound
from rcv_election.rcv.tables import Election_tables
from rcv_election.util import AuditLog, join_names, plural

logger = logging.getLogger(__name__)


class Election(abc.ABC, Election_tables):
    """
    Template class for an instant-runoff tabulation. Subclasses decide which candidates
    are eliminated in a round that has no majority winner.

    The tabulation moves through three states: INITIALIZED once the ballots have been
    normalized, ROUND_EVALUATING while rounds are being counted, and WON once a winner
    has been declared. Every decision is explained in `audit_log`.
    """

    INITIALIZED = "initialized"
    ROUND_EVALUATING = "round_evaluating"
    WON = "won"

    @staticmethod
    def majority_threshold(voter_count: int) -> int:
        """Number of first-choice votes a candidate needs to hold a strict majority.

        :param voter_count: Number of voters with a ranking among active candidates.
        :type voter_count: int
        :rtype: int
        """
        return voter_count // 2 + 1

    @staticmethod
    def find_majority_winner(candidates: Sequence[Candidate], voter_count: int) -> Optional[Candidate]:
        """Find the round winner, if there is one.

        A lone candidate wins outright, even with no voters. Otherwise the winner is the
        candidate whose first-choice count reaches a strict majority of `voter_count`.

        :param candidates: Active candidates.
        :type candidates: Sequence[Candidate]
        :param voter_count: Number of voters with a ranking among active candidates.
        :type voter_count: int
        :return: The winning candidate, or None if nobody has a majority.
        :rtype: Optional[Candidate]
        """
        if len(candidates) == 1:
            return candidates[0]

        needed = Election.majority_threshold(voter_count)
        for cand in candidates:
            if cand.first_choice_count() >= needed:
                return cand
        return None

    # override me
    @abc.abstractmethod
    def select_round_losers(self) -> List[Candidate]:
        """
        Abstract method to be implemented by the tabulation variant subclass.
        This function should return the candidates to eliminate this round. It is only
        called when no candidate has a majority, and must return at least one and
        fewer than all of the active candidates. Decisions should be explained by
        writing to self.audit_log.
        """
        pass

    def __init__(
        self,
        candidates: Sequence[Candidate],
        rng: Optional[random.Random] = None,
        audit_log: Optional[AuditLog] = None,
        tabulate: bool = True,
    ) -> None:
        """
        Constructor. Normalizes the ballots, writes the starting state to the audit log and,
        unless `tabulate` is False, runs the election to completion.

        The election takes ownership of `candidates`: their vote mappings are renumbered
        as rounds go by. Pass copies to keep the originals untouched.

        :param candidates: Candidates in display order.
        :type candidates: Sequence[Candidate]
        :param rng: Source of randomness for tie breaks, defaults to a new unseeded random.Random
        :type rng: Optional[random.Random], optional
        :param audit_log: Log to append decisions to, defaults to a new AuditLog
        :type audit_log: Optional[AuditLog], optional
        :param tabulate: Run the round loop immediately, defaults to True
        :type tabulate: bool, optional
        :raises NoCandidatesFound: `candidates` is empty.
        :raises DuplicateCandidateName: Two candidates share a name.
        :raises DuplicateVoteError: A voter gave the same rank to two candidates.
        """
        if not candidates:
            raise NoCandidatesFound()

        names = set()
        for cand in candidates:
            if cand.name in names:
                raise DuplicateCandidateName(cand.name)
            names.add(cand.name)

        self.candidates = list(candidates)
        self.active_candidates = list(candidates)
        self.rng = rng if rng is not None else random.Random()
        self.audit_log = audit_log if audit_log is not None else AuditLog()

        # snapshot of the ballots as collected, for reporting
        self.initial_candidates = [cand.copy() for cand in self.candidates]

        # tabulation state
        self.state = None
        self.winner = None
        self.eliminated = []
        self.rounds = []
        self._round_num = 0
        self._outcomes = [
            {"name": cand.name, "round_eliminated": None, "round_elected": None} for cand in self.candidates
        ]

        normalized = normalize_votes(self.active_candidates)
        self.voter_count = normalized.voter_count
        self.fixed_voters = normalized.fixed_voters

        if self.fixed_voters:
            self.audit_log.write(
                f"Warning: {plural(len(self.fixed_voters), 'voter')} skipped a rank; their later choices "
                f"were moved up ({join_names(self.fixed_voters)})."
            )

        self._write_starting_state()
        self.state = self.INITIALIZED

        if tabulate:
            self.tabulate()

    def _write_starting_state(self) -> None:
        self.audit_log.write("Starting election state:")
        for cand in self.active_candidates:
            self.audit_log.write(
                f"  {cand.name}: {plural(cand.first_choice_count(), 'first-choice vote')}, "
                f"{plural(len(cand.votes), 'ranking')}"
            )
        self.audit_log.write(
            f"  {plural(self.voter_count, 'voter')} across {plural(len(self.active_candidates), 'candidate')}"
        )

    def tabulate(self) -> Candidate:
        """Run rounds until a winner is declared.

        :return: The winning candidate.
        :rtype: Candidate
        """
        if self.state == self.WON:
            return self.winner

        self.state = self.ROUND_EVALUATING
        logger.debug(f"tabulating {len(self.active_candidates)} candidates, {self.voter_count} voters")

        while self.state == self.ROUND_EVALUATING:
            self._round_num += 1

            # a candidate is removed every round, so the last one standing is reached in time
            if self._round_num > len(self.candidates):
                raise RuntimeError(f"(developer error) tabulation did not converge after {self._round_num - 1} rounds")

            round_record = self._new_round()

            #############################################
            # CHECK FOR ROUND WINNER
            winner = self.find_majority_winner(self.active_candidates, self.voter_count)
            if winner is not None:
                self._declare_winner(winner, round_record)
                break

            #############################################
            # IDENTIFY ROUND LOSERS
            losers = self.select_round_losers()
            if not losers or len(losers) >= len(self.active_candidates):
                raise RuntimeError(
                    f"(developer error) {self.__class__.__name__} selected {len(losers)} of "
                    f"{len(self.active_candidates)} active candidates for elimination"
                )

            #############################################
            # REMOVE LOSERS AND RENUMBER BALLOTS
            self._eliminate(losers, round_record)

        return self.winner

    def _new_round(self) -> Dict:
        tally = [(cand.name, cand.first_choice_count()) for cand in self.active_candidates]
        needed = self.majority_threshold(self.voter_count)
        round_record = {
            "round": self._round_num,
            "tally": tally,
            "voter_count": self.voter_count,
            "needed": needed,
            "elected": None,
            "eliminated": [],
        }
        self.rounds.append(round_record)

        tally_str = ", ".join(f"{name}={count}" for name, count in tally)
        self.audit_log.write(
            f"Round {self._round_num}: {tally_str} "
            f"({plural(self.voter_count, 'voter')}, {needed} needed for majority)"
        )
        return round_record

    def _declare_winner(self, winner: Candidate, round_record: Dict) -> None:
        if len(self.active_candidates) == 1:
            self.audit_log.write(f"{winner.name} is the only remaining candidate.")
        else:
            self.audit_log.write(
                f"{winner.name} has a majority with {winner.first_choice_count()} of "
                f"{plural(self.voter_count, 'first-choice vote')}."
            )
        self.audit_log.write(f"Winner: {winner.name}")

        self.winner = winner
        self._outcome(winner)["round_elected"] = self._round_num
        round_record["elected"] = winner.name
        self.state = self.WON
        logger.debug(f"{winner.name} won in round {self._round_num}")

    def _eliminate(self, losers: List[Candidate], round_record: Dict) -> None:
        for loser in losers:
            self.audit_log.write(f"Eliminating {loser.name}.")
            self._outcome(loser)["round_eliminated"] = self._round_num
            self.eliminated.append(loser)
            round_record["eliminated"].append(loser.name)

        loser_ids = {id(loser) for loser in losers}
        self.active_candidates = [cand for cand in self.active_candidates if id(cand) not in loser_ids]

        normalized = normalize_votes(self.active_candidates)
        self.voter_count = normalized.voter_count
        if normalized.fixed_voters:
            self.audit_log.write(
                f"Moved later choices up for {plural(len(normalized.fixed_voters), 'voter')} "
                f"after elimination."
            )
        self.audit_log.write(
            f"{plural(len(self.active_candidates), 'candidate')} and "
            f"{plural(self.voter_count, 'voter')} remain after round {self._round_num}."
        )

    def _outcome(self, candidate: Candidate) -> Dict:
        for cand, outcome in zip(self.candidates, self._outcomes):
            if cand is candidate:
                return outcome
        raise RuntimeError(f"(developer error) {candidate.name} is not part of this election")

    def get_candidate_outcomes(self) -> List[Dict]:
        """Return a list of dictionaries containing candidate outcome information. Keys are name,
        round_elected, and round_eliminated. Values for round_elected and round_eliminated are
        either integers indicating round numbers or None.

        :return: List of dictionaries in candidate order.
        :rtype: List[Dict]
        """
        return [dict(outcome) for outcome in self._outcomes]

    def get_round_tally_dict(self, round_num: int) -> Dict[str, int]:
        """Return a dictionary containing candidate names as keys and first-choice counts as values
        for the candidates active in `round_num`.

        :param round_num: Round number, starting at 1.
        :type round_num: int
        :rtype: Dict[str, int]
        """
        return dict(self.rounds[round_num - 1]["tally"])

    def n_rounds(self) -> int:
        """Return the number of rounds counted.

        :rtype: int
        """
        return len(self.rounds)

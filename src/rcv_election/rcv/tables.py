"""Contains Election_tables class which is added into Election, and the report
functions it wraps, which also work on candidates that have not been tabulated.
"""

from typing import Dict, List, Sequence

import pandas as pd

from rcv_election.candidate import Candidate
from rcv_election.marks import RankMarks


def summary_report(candidates: Sequence[Candidate], tally: bool = False) -> str:
    """Text report of the ballots collected for each candidate.

    :param candidates: Candidates to report on.
    :type candidates: Sequence[Candidate]
    :param tally: If True, report the number of votes at each rank instead of every
        voter's rank, defaults to False
    :type tally: bool, optional
    :return: One line per candidate, or a tally table.
    :rtype: str
    """
    if tally:
        return tally_table(candidates).to_string()

    lines = []
    for cand in candidates:
        pairs = ", ".join(f"{voter}=>{rank}" for voter, rank in cand.votes.items())
        lines.append(f"{cand.name}: {pairs}" if pairs else f"{cand.name}: (no votes)")
    return "\n".join(lines)


def tally_table(candidates: Sequence[Candidate], n_ranks: int = RankMarks.N_RANKS) -> pd.DataFrame:
    """Create a table of vote counts, one row per candidate and one column per rank.

    Columns are named by the one-based rank shown on the rank markers (rank_1 is a
    first choice).

    :param candidates: Candidates to count.
    :type candidates: Sequence[Candidate]
    :param n_ranks: Number of rank columns, defaults to the number of rank markers
    :type n_ranks: int, optional
    :rtype: pd.DataFrame
    """
    columns = [f"rank_{rank + 1}" for rank in range(n_ranks)]
    df = pd.DataFrame(
        [cand.rank_counts(n_ranks) for cand in candidates],
        index=pd.Index([cand.name for cand in candidates], name="candidate"),
        columns=columns,
    )
    return df.astype(int)


class Election_tables:
    """Extra methods added into Election class"""

    def get_summary_report(self, tally: bool = False) -> str:
        """Summary of the ballots as collected, before any renumbering.

        :param tally: Report per-rank counts instead of per-voter ranks, defaults to False
        :type tally: bool, optional
        :rtype: str
        """
        return summary_report(self.initial_candidates, tally=tally)

    def get_tally_table(self) -> pd.DataFrame:
        """Per-rank vote counts of the ballots as collected.

        :rtype: pd.DataFrame
        """
        return tally_table(self.initial_candidates)

    def get_round_by_round_table(self) -> pd.DataFrame:
        """Create a table containing round by round details for the tabulation.

        Rows are candidates, winner first, then the others in reverse order of elimination.
        Each round has a first-choice count column and a percent column, where the percent
        is out of the voters with a ranking among that round's active candidates.
        Candidates no longer active in a round have empty cells.

        :return: round by round table
        :rtype: pd.DataFrame
        """
        outcomes = self.get_candidate_outcomes()
        first_round = self.get_round_tally_dict(1) if self.rounds else {}

        # winner first, then losers in descending order of round lost
        def order(d):
            if d["round_elected"] is not None:
                return (0, 0, -first_round.get(d["name"], 0), d["name"])
            if d["round_eliminated"] is not None:
                return (1, -d["round_eliminated"], -first_round.get(d["name"], 0), d["name"])
            return (2, 0, -first_round.get(d["name"], 0), d["name"])

        ordered = sorted(outcomes, key=order)
        rcv_df = pd.DataFrame({"candidate": [d["name"] for d in ordered]})

        for round_record in self.rounds:
            rnd = round_record["round"]
            tally = dict(round_record["tally"])
            voters = round_record["voter_count"]

            rcv_df[f"r{rnd}_count"] = [tally.get(d["name"]) for d in ordered]
            rcv_df[f"r{rnd}_percent"] = [
                round(100 * tally[d["name"]] / voters, 3) if d["name"] in tally and voters else None
                for d in ordered
            ]

        rcv_df["status"] = [
            "elected" if d["round_elected"] is not None
            else f"eliminated r{d['round_eliminated']}" if d["round_eliminated"] is not None
            else "not elected"
            for d in ordered
        ]
        return rcv_df

    def get_round_by_round_dict(self) -> Dict:
        """Create a dictionary containing the round by round results, suitable for json output.

        :return: Dictionary with the winner, the elimination order and one entry per round.
        :rtype: Dict
        """
        results: List[Dict] = []
        for round_record in self.rounds:
            tally_results = []
            if round_record["elected"] is not None:
                tally_results.append({"elected": round_record["elected"]})
            for name in round_record["eliminated"]:
                tally_results.append({"eliminated": name})

            results.append(
                {
                    "round": round_record["round"],
                    "tally": {name: count for name, count in round_record["tally"]},
                    "voters": round_record["voter_count"],
                    "threshold": round_record["needed"],
                    "tallyResults": tally_results,
                }
            )

        return {
            "winner": self.winner.name if self.winner is not None else None,
            "eliminated": [cand.name for cand in self.eliminated],
            "results": results,
        }

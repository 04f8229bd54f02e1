import pytest

from rcv_election.candidate import Candidate
from rcv_election.rcv.variants import PreferenceScoreRunoff, get_rcv_dict, preference_scores


class PickLast:

    def choice(self, seq):
        return seq[-1]


def build_candidates(votes):
    return [Candidate(name, votes=dict(cand_votes)) for name, cand_votes in votes.items()]


def test_preference_scores():

    candidates = build_candidates({"A": {"v1": 0, "v2": 1}, "B": {"v1": 1, "v2": 0, "v3": 0}, "C": {}})
    scores = preference_scores(candidates)

    # 3 active candidates: rank 0 scores 3, rank 1 scores 2
    assert [scores[id(cand)] for cand in candidates] == [5, 8, 0]


params = [
    (
        {
            # tie for fewest first choices broken by the lower preference score
            "input": {
                "A": {"a1": 0, "a2": 0},
                "B": {"b1": 0, "a1": 1, "a2": 1},
                "C": {"c1": 0},
                "D": {"d1": 0, "d2": 0},
            },
            "expected": {
                "winner": "A",
                "rounds": [
                    {"A": 2, "B": 1, "C": 1, "D": 2},
                    {"A": 2, "B": 1, "D": 2},
                    {"A": 2, "D": 2},
                    {"A": 2},
                ],
                "eliminated": [["C"], ["B"], ["D"], []],
            },
        }
    ),
    (
        {
            # one candidate per round, even where instant runoff would remove a group
            "input": {
                "A": {"a1": 0, "a2": 0, "a3": 0, "a4": 0},
                "B": {"b1": 0, "b2": 0, "b3": 0, "c1": 1, "d1": 1},
                "C": {"c1": 0},
                "D": {"d1": 0},
            },
            "expected": {
                "winner": "B",
                "rounds": [
                    {"A": 4, "B": 3, "C": 1, "D": 1},
                    {"A": 4, "B": 4, "C": 1},
                    {"A": 4, "B": 5},
                ],
                "eliminated": [["D"], ["C"], []],
            },
        }
    ),
]


@pytest.mark.parametrize("param", params)
def test_tabulation(param):

    rcv = PreferenceScoreRunoff(build_candidates(param["input"]), rng=PickLast())

    assert rcv.winner.name == param["expected"]["winner"]

    n_round = rcv.n_rounds()
    tally_dict = [rcv.get_round_tally_dict(round_num=i) for i in range(1, n_round + 1)]
    assert tally_dict == param["expected"]["rounds"]

    assert [r["eliminated"] for r in rcv.rounds] == param["expected"]["eliminated"]


def test_audit_log_explains_scores():

    rcv = PreferenceScoreRunoff(
        build_candidates(params[0]["input"]),
        rng=PickLast(),
    )
    lines = rcv.audit_log.lines

    assert "Tied for fewest first-choice votes (1): B (preference score 10), C (preference score 4)." in lines
    assert "C has the lowest preference score." in lines
    assert "Preference scores are also tied (4). Breaking the tie at random: D." in lines


def test_registered():

    assert get_rcv_dict()["PreferenceScore"] is PreferenceScoreRunoff

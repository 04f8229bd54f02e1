import pytest

from rcv_election.ballots import close_gaps, normalize_votes, rank_vector
from rcv_election.candidate import Candidate
from rcv_election.errors import DuplicateVoteError, InvalidBallot


def build_candidates(votes):
    return [Candidate(name, votes=dict(cand_votes)) for name, cand_votes in votes.items()]


params = [
    (
        {
            "input": {"A": {"v": 0}, "B": {"v": 2}},
            "expected": {
                "votes": {"A": {"v": 0}, "B": {"v": 1}},
                "fixed_voters": ["v"],
                "voter_count": 1,
            },
        }
    ),
    (
        {
            "input": {"A": {"v1": 3, "v2": 0}, "B": {"v1": 5, "v2": 1}, "C": {"v3": 0}},
            "expected": {
                "votes": {"A": {"v1": 0, "v2": 0}, "B": {"v1": 1, "v2": 1}, "C": {"v3": 0}},
                "fixed_voters": ["v1"],
                "voter_count": 3,
            },
        }
    ),
    (
        {
            "input": {"A": {"v1": 1}, "B": {"v1": 0}, "C": {}},
            "expected": {
                "votes": {"A": {"v1": 1}, "B": {"v1": 0}, "C": {}},
                "fixed_voters": [],
                "voter_count": 1,
            },
        }
    ),
    (
        {
            "input": {"A": {}, "B": {}},
            "expected": {
                "votes": {"A": {}, "B": {}},
                "fixed_voters": [],
                "voter_count": 0,
            },
        }
    ),
]


@pytest.mark.parametrize("param", params)
def test_normalize_votes(param):

    candidates = build_candidates(param["input"])
    normalized = normalize_votes(candidates)

    assert normalized.fixed_voters == param["expected"]["fixed_voters"]
    assert normalized.voter_count == param["expected"]["voter_count"]
    assert {cand.name: cand.votes for cand in candidates} == param["expected"]["votes"]


@pytest.mark.parametrize("param", params)
def test_normalize_votes_idempotent(param):

    candidates = build_candidates(param["input"])
    first = normalize_votes(candidates)
    votes_after_first = {cand.name: dict(cand.votes) for cand in candidates}

    second = normalize_votes(candidates)

    assert second.fixed_voters == []
    assert second.voter_count == first.voter_count
    assert {cand.name: cand.votes for cand in candidates} == votes_after_first


def test_duplicate_rank_leaves_votes_untouched():

    # w has a gap that would be closed, but v's duplicate rank aborts normalization first
    candidates = build_candidates({"A": {"w": 1, "v": 0}, "B": {"v": 0}, "C": {"v": 2}})

    with pytest.raises(DuplicateVoteError) as excinfo:
        normalize_votes(candidates)

    assert excinfo.value.voter == "v"
    assert excinfo.value.rank == 0
    assert excinfo.value.candidate_names == ["A", "B"]
    assert "rank 1: A, B" in str(excinfo.value)
    assert isinstance(excinfo.value, InvalidBallot)

    assert {cand.name: cand.votes for cand in candidates} == {
        "A": {"w": 1, "v": 0},
        "B": {"v": 0},
        "C": {"v": 2},
    }


def test_rank_vector():

    candidates = build_candidates({"A": {"v": 2}, "B": {"v": 0}, "C": {"w": 0}})

    vector = rank_vector(candidates, "v")

    assert [c.name if c is not None else None for c in vector] == ["B", None, "A"]
    assert rank_vector(candidates, "nobody") == []


def test_close_gaps():

    candidates = build_candidates({"A": {"v": 4}, "B": {"v": 1}})
    vector = rank_vector(candidates, "v")

    assert close_gaps(vector, "v") is True
    assert [c.name for c in vector] == ["B", "A"]
    assert candidates[0].votes == {"v": 1}
    assert candidates[1].votes == {"v": 0}

    assert close_gaps(vector, "v") is False

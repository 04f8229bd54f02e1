import pytest

from rcv_election.marks import VARIATION_SELECTOR, RankMarks


def test_rank_dict():

    ranks = RankMarks.rank_dict()

    assert len(ranks) == RankMarks.N_RANKS == 10
    assert sorted(ranks.values()) == list(range(10))
    assert ranks["\U0001f51f"] == 9


param_dicts = [
    ({
        'input': "1\ufe0f\u20e3",
        'expected': 0
    }),
    ({
        'input': "9\ufe0f\u20e3",
        'expected': 8
    }),
    ({
        'input': "\U0001f51f",
        'expected': 9
    }),
    ({
        'input': "3\u20e3",
        'expected': 2
    }),
    ({
        'input': RankMarks.WINNER,
        'expected': None
    }),
    ({
        'input': "0\ufe0f\u20e3",
        'expected': None
    })
]


@pytest.mark.parametrize("param_dict", param_dicts)
def test_rank_for_symbol(param_dict):

    computed = RankMarks.rank_for_symbol(param_dict['input'])
    expected = param_dict['expected']
    assert expected == computed


@pytest.mark.parametrize("rank", range(10))
def test_symbol_for_rank(rank):
    assert RankMarks.rank_for_symbol(RankMarks.symbol_for_rank(rank)) == rank


@pytest.mark.parametrize("rank", [-1, 10])
def test_symbol_for_rank_errors(rank):

    with pytest.raises(ValueError):
        RankMarks.symbol_for_rank(rank)


def test_has_mark():

    markers = {RankMarks.ELECTION_START: ["admin"], RankMarks.LOSER: []}

    assert RankMarks.has_mark(markers, RankMarks.ELECTION_START)
    assert not RankMarks.has_mark(markers, RankMarks.LOSER)
    assert not RankMarks.has_mark(markers, RankMarks.WINNER)


def test_same_mark_ignores_variation_selector():

    assert RankMarks.same_mark("\u2611", "\u2611" + VARIATION_SELECTOR)
    assert not RankMarks.same_mark("\u2611", "\u2705")


@pytest.mark.parametrize("symbol, expected", [
    ("\u2611\ufe0f", True),
    ("\u2611", True),
    ("\u2705", True),
    ("2\ufe0f\u20e3", False),
    (RankMarks.ELECTION_START, False),
    (RankMarks.WINNER, False),
])
def test_is_candidate_mark(symbol, expected):
    assert RankMarks.is_candidate_mark(symbol) is expected


def test_outcome_marks():
    assert RankMarks.outcome_marks() == [RankMarks.WINNER, RankMarks.LOSER]

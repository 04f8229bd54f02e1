"""
Contains ballot parser functions.

Ballots normally arrive as records from a chat channel: one start record flagged
with the election start marker, followed by candidate records carrying rank
markers. Offline, the same records can be read from a JSON file, or plain
votes can be read from a csv file.
"""

from typing import Iterable, List, NamedTuple, Optional, Sequence, Union

import logging
import pathlib

import pandas as pd

from rcv_election.candidate import Candidate
from rcv_election.channels import ChannelRecord, read_records_json
from rcv_election.errors import AlreadyFinished, NoCandidatesFound, NoStartMarkerFound
from rcv_election.marks import RankMarks
from rcv_election.util import DL2LD

logger = logging.getLogger(__name__)


class ElectionData(NamedTuple):
    start_record: Optional[ChannelRecord]
    candidate_records: List[ChannelRecord]
    candidates: List[Candidate]


def is_start_record(record: ChannelRecord) -> bool:
    return record.has_mark(RankMarks.ELECTION_START)


def is_finished_record(record: ChannelRecord) -> bool:
    return record.has_mark(RankMarks.ELECTION_FINISHED)


def is_candidate_record(record: ChannelRecord) -> bool:
    return any(RankMarks.is_candidate_mark(symbol) and voters for symbol, voters in record.markers.items())


def parse_records(
    records: Sequence[ChannelRecord],
    max_records: int = 100,
    ignore_voters: Optional[Iterable[str]] = None,
    allow_finished: bool = False,
    build_candidates: bool = True,
) -> ElectionData:
    """Find the election in a window of records.

    Records are walked newest first. Candidate records are collected until the start
    record is reached; anything older than the start record is ignored.

    :param records: Records, newest first.
    :type records: Sequence[ChannelRecord]
    :param max_records: Size of the record window, used in error messages, defaults to 100
    :type max_records: int, optional
    :param ignore_voters: Identities whose markers are not votes, defaults to None
    :type ignore_voters: Optional[Iterable[str]], optional
    :param allow_finished: Accept a start record that already carries the finished marker, defaults to False
    :type allow_finished: bool, optional
    :param build_candidates: Read votes into Candidate objects, defaults to True. Resetting an
        election only needs the records.
    :type build_candidates: bool, optional
    :raises NoStartMarkerFound: No start record in the window.
    :raises NoCandidatesFound: No candidate records newer than the start record.
    :raises AlreadyFinished: The start record carries the finished marker.
    :return: Start record, candidate records and candidates, in chronological order.
    :rtype: ElectionData
    """
    start_record = None
    candidate_records = []

    for record in records:
        if is_start_record(record):
            start_record = record
            break
        elif is_candidate_record(record):
            candidate_records.append(record)

    if start_record is None:
        raise NoStartMarkerFound(max_records)
    elif not candidate_records:
        raise NoCandidatesFound(max_records)

    if is_finished_record(start_record) and not allow_finished:
        raise AlreadyFinished()

    candidate_records.reverse()
    candidates = []
    if build_candidates:
        candidates = [Candidate.from_record(record, ignore_voters=ignore_voters) for record in candidate_records]

    logger.info(f"found election with {len(candidate_records)} candidate records")
    return ElectionData(start_record=start_record, candidate_records=candidate_records, candidates=candidates)


def load_records_json(path: Union[str, pathlib.Path]) -> List[ChannelRecord]:
    """Reads records stored in a JSON list, oldest first.

    Each record is an object with "id", "content" and "markers" (symbol to list of voter ids).

    :param path: The path to the JSON file.
    :type path: Union[str, pathlib.Path]
    :return: Records, newest first, ready for :func:`parse_records`.
    :rtype: List[ChannelRecord]
    """
    return list(reversed(read_records_json(path)))


def load_votes_csv(path: Union[str, pathlib.Path]) -> List[Candidate]:
    """Reads votes stored in long csv format: one row per vote with columns
    "voter", "candidate" and "rank". Ranks are one-based, as shown on the rank markers.

    Candidates appear in order of first appearance in the file.

    :param path: The path to the csv file.
    :type path: Union[str, pathlib.Path]
    :raises RuntimeError: Required columns are missing, or a rank is missing, not a whole number or
        outside 1 to RankMarks.N_RANKS.
    :raises ConflictingRankError: A voter gave one candidate more than one rank.
    :return: Candidates with their votes.
    :rtype: List[Candidate]
    """
    path = pathlib.Path(path)
    df = pd.read_csv(path, encoding="utf8", dtype={"voter": str, "candidate": str})

    missing = {"voter", "candidate", "rank"} - set(df.columns)
    if missing:
        raise RuntimeError(f"missing column(s) {', '.join(sorted(missing))} in {path}")

    df = df.dropna(subset=["voter", "candidate"])

    ranks = pd.to_numeric(df["rank"], errors="coerce")
    bad = ranks.isna() | (ranks != ranks.round()) | (ranks < 1) | (ranks > RankMarks.N_RANKS)
    if bad.any():
        raise RuntimeError(
            f"ranks must be whole numbers from 1 to {RankMarks.N_RANKS} in {path}, "
            f"got \"{df.loc[bad, 'rank'].iloc[0]}\""
        )
    df = df.assign(rank=ranks.astype(int))

    candidate_order = []
    votes = {}
    for row in DL2LD({col: df[col].tolist() for col in ["voter", "candidate", "rank"]}):
        name = Candidate.trim_name(row["candidate"])
        if name not in votes:
            candidate_order.append(name)
            votes[name] = {}
        votes[name].setdefault(row["voter"], set()).add(int(row["rank"]) - 1)

    candidates = []
    for name in candidate_order:
        record = ChannelRecord(record_id=name, content=name, markers={})
        for voter, ranks in votes[name].items():
            for rank in ranks:
                record.markers.setdefault(RankMarks.symbol_for_rank(rank), []).append(voter)
        candidates.append(Candidate.from_record(record))

    if not candidates:
        raise NoCandidatesFound()

    return candidates


def get_parser_dict():
    """Returns the module parser dictionary, keyed by file suffix.

    :rtype: Dict
    """
    return {
        ".json": load_records_json,
        ".csv": load_votes_csv,
    }

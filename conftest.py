import asyncio

import pytest

from rcv_election.channels import Channel, ChannelRecord
from rcv_election.marks import RankMarks


class FakeChannel(Channel):
    """In-memory channel that records every call made to it."""

    def __init__(self, records, roles=None, direct=False, fail_replies=False, fail_fetch=False):
        self.records = records  # oldest first
        self.roles = roles
        self.direct = direct
        self.fail_replies = fail_replies
        self.fail_fetch = fail_fetch
        self.calls = []

    @property
    def channel_id(self):
        return "fake-channel"

    @property
    def is_direct(self):
        return self.direct

    def _record(self, record_id):
        return next(record for record in self.records if record.record_id == record_id)

    async def fetch_records(self, limit):
        await asyncio.sleep(0)
        if self.fail_fetch:
            raise ValueError("fetch failed")
        self.calls.append(("fetch", limit))
        return list(reversed(self.records))[:limit]

    async def reply(self, record_id, text):
        await asyncio.sleep(0)
        if self.fail_replies:
            raise ConnectionError("reply failed")
        self.calls.append(("reply", record_id, text))

    async def add_marker(self, record_id, symbol):
        await asyncio.sleep(0)
        self.calls.append(("add", record_id, symbol))
        self._record(record_id).markers.setdefault(symbol, []).append("bot")

    async def remove_marker(self, record_id, symbol):
        await asyncio.sleep(0)
        self.calls.append(("remove", record_id, symbol))
        markers = self._record(record_id).markers
        for mark in [mark for mark in markers if RankMarks.same_mark(mark, symbol)]:
            del markers[mark]

    async def server_roles(self):
        return self.roles

    def replies(self):
        return [call[1:] for call in self.calls if call[0] == "reply"]

    def added(self):
        return [call[1:] for call in self.calls if call[0] == "add"]


def election_records(candidates, start_markers=None):
    """Build channel records, oldest first, for an election.

    candidates is a list of (name, {voter: one-based rank}) pairs. Each candidate record
    also carries the candidate marker, so candidates without votes are still found.
    """
    markers = {RankMarks.ELECTION_START: ["admin"]}
    markers.update(start_markers or {})
    records = [ChannelRecord(record_id="start", content="Who should we pick?", markers=markers)]

    for idx, (name, votes) in enumerate(candidates, start=1):
        cand_markers = {RankMarks.CANDIDATE[2]: ["admin"]}
        for voter, rank in votes.items():
            cand_markers.setdefault(RankMarks.symbol_for_rank(rank - 1), []).append(voter)
        records.append(ChannelRecord(record_id=f"c{idx}", content=name, markers=cand_markers))

    return records


@pytest.fixture
def fake_channel():
    return FakeChannel


@pytest.fixture
def make_records():
    return election_records

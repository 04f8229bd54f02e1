"""
Contains the ElectionBot class, which turns text commands received in a channel
into election operations and reports the outcome back to the channel.

Commands (after the configured prefix):

- ping: reply "Pong!"
- tabulate: run the election found in the channel and mark the outcome (admin only)
- reset: strip outcome markers so the election can be tabulated again (admin only)
- summary: reply with every voter's rank for each candidate
- tally: reply with the number of votes at each rank for each candidate
- help: reply with this list
"""
from __future__ import annotations
from typing import Dict, List, Optional, Tuple

import asyncio
import collections
import logging
import random

from rcv_election.channels import Channel, Command, Member
from rcv_election.config import make_rng, read_bot_config
from rcv_election.errors import ElectionError, NoMember, PermissionDenied, UnsupportedChannel
from rcv_election.marks import RankMarks
from rcv_election.parsers import ElectionData, parse_records
from rcv_election.rcv.base import Election
from rcv_election.rcv.tables import summary_report
from rcv_election.rcv.variants import get_rcv_dict

logger = logging.getLogger(__name__)

ADMIN_COMMANDS = ["tabulate", "reset"]

HELP_TEXT = "\n".join(
    [
        "{prefix}ping: check that the bot is listening",
        "{prefix}tabulate: count the election in this channel ({role} only)",
        "{prefix}reset: clear the results so the election can be counted again ({role} only)",
        "{prefix}summary: list each voter's rank for every candidate",
        "{prefix}tally: count the votes at each rank for every candidate",
        "{prefix}help: show this message",
    ]
)

UNEXPECTED_ERROR_TEXT = "Something went wrong while running that command. Check the bot logs for details."


class ElectionBot:
    """
    Dispatches commands to election operations, one operation at a time per channel.

    The operation methods (`tabulate`, `reset`, `summary`) raise ElectionError subclasses
    on failure. `handle_command` catches those and replies with the error text.
    """

    def __init__(self, config: Optional[Dict] = None, rng: Optional[random.Random] = None) -> None:
        """
        :param config: Bot configuration, defaults to the packaged defaults (see config.read_bot_config)
        :type config: Optional[Dict], optional
        :param rng: Source of randomness for tie breaks, defaults to one built from the config random_seed
        :type rng: Optional[random.Random], optional
        """
        self.config = config if config is not None else read_bot_config()
        self.rng = rng if rng is not None else make_rng(self.config)
        # one lock per channel id seen, kept for the life of the bot
        self._locks: Dict[str, asyncio.Lock] = collections.defaultdict(asyncio.Lock)

        self.commands = {
            "ping": self._ping,
            "tabulate": self._tabulate,
            "reset": self._reset,
            "summary": self._summary,
            "tally": self._tally,
            "help": self._help,
        }

    def parse_command(self, content: str) -> Optional[Tuple[str, List[str]]]:
        """Split command text into the command name and its arguments.

        :return: None if `content` does not start with the command prefix.
        :rtype: Optional[Tuple[str, List[str]]]
        """
        prefix = self.config["command_prefix"]
        if not content.startswith(prefix):
            return None

        args = content[len(prefix):].split(" ")
        return args[0], args[1:]

    async def handle_command(self, channel: Channel, command: Command) -> None:
        """Run one command and reply with its result or its error.

        Text without the prefix and unknown commands are ignored.

        :param channel: Channel the command was sent in.
        :type channel: Channel
        :param command: The command.
        :type command: Command
        """
        parsed = self.parse_command(command.content)
        if parsed is None:
            return

        name, _ = parsed
        handler = self.commands.get(name)
        if handler is None:
            logger.debug(f"ignoring unknown command {name!r}")
            return

        logger.info(f"{command.author_id} sent {name} in channel {channel.channel_id}")

        try:
            if name in ADMIN_COMMANDS:
                await self.check_permission(channel, command.member)
            async with self._locks[channel.channel_id]:
                await handler(channel, command)
        except ElectionError as e:
            logger.info(f"{name} in channel {channel.channel_id} failed: {e}")
            await self._safe_reply(channel, command.record_id, str(e))
        except Exception:
            logger.exception(f"unexpected error running {name} in channel {channel.channel_id}")
            await self._safe_reply(channel, command.record_id, UNEXPECTED_ERROR_TEXT)

    async def _safe_reply(self, channel: Channel, record_id: str, text: str) -> None:
        try:
            await channel.reply(record_id, text)
        except Exception:
            logger.exception(f"failed to reply to record {record_id} in channel {channel.channel_id}")

    async def check_permission(self, channel: Channel, member: Optional[Member]) -> None:
        """Check that `member` may run admin commands.

        A member holding the admin role is allowed. If the role does not exist where the
        channel lives, everyone is allowed and a warning is logged.

        :raises NoMember: `member` is None.
        :raises PermissionDenied: The role exists and `member` does not hold it.
        """
        role_name = self.config["admin_role_name"]

        if member is None:
            raise NoMember()

        if role_name in member.roles:
            return

        server_roles = await channel.server_roles()
        if server_roles is None or role_name not in server_roles:
            logger.warning(
                f'Tried to search for role "{role_name}" on {member.name} but the role does not exist. '
                f"Defaulting to allowed."
            )
            return

        raise PermissionDenied(role_name)

    async def _find_election(self, channel: Channel, **parse_kwargs) -> ElectionData:
        if channel.is_direct:
            raise UnsupportedChannel()

        records = await channel.fetch_records(self.config["max_records"])
        return parse_records(
            records,
            max_records=self.config["max_records"],
            ignore_voters=self.config["ignore_voters"],
            **parse_kwargs,
        )

    ########################
    # operations

    async def tabulate(self, channel: Channel) -> Election:
        """Tabulate the election in `channel`.

        The audit log is posted as a reply to the start record. Once the winner is known,
        every eliminated candidate gets the loser marker, the winner gets the winner marker
        and the start record gets the finished marker.

        :param channel: Channel holding the election.
        :type channel: Channel
        :return: The tabulated election.
        :rtype: Election
        """
        data = await self._find_election(channel)

        rcv_class = get_rcv_dict()[self.config["tie_break"]]
        election = rcv_class(data.candidates, rng=self.rng)

        await self._safe_reply(channel, data.start_record.record_id, election.audit_log.text())

        for cand in election.eliminated:
            await channel.add_marker(cand.record_id, RankMarks.LOSER)
        await channel.add_marker(election.winner.record_id, RankMarks.WINNER)
        await channel.add_marker(data.start_record.record_id, RankMarks.ELECTION_FINISHED)

        logger.info(f"tabulated election in channel {channel.channel_id}, winner: {election.winner.name}")
        return election

    async def reset(self, channel: Channel) -> ElectionData:
        """Remove the finished marker from the start record and the outcome markers from
        every candidate record. Votes are left untouched.

        :param channel: Channel holding the election.
        :type channel: Channel
        :rtype: ElectionData
        """
        data = await self._find_election(channel, allow_finished=True, build_candidates=False)

        await channel.remove_marker(data.start_record.record_id, RankMarks.ELECTION_FINISHED)
        for record in data.candidate_records:
            for symbol in RankMarks.outcome_marks():
                if record.has_mark(symbol):
                    await channel.remove_marker(record.record_id, symbol)

        logger.info(f"reset election in channel {channel.channel_id}")
        return data

    async def summary(self, channel: Channel, tally: bool = False) -> str:
        """Summary report of the ballots in `channel`. Finished elections can be summarized too.

        :rtype: str
        """
        data = await self._find_election(channel, allow_finished=True)
        return summary_report(data.candidates, tally=tally)

    ########################
    # command handlers

    async def _ping(self, channel: Channel, command: Command) -> None:
        await self._safe_reply(channel, command.record_id, "Pong!")

    async def _tabulate(self, channel: Channel, command: Command) -> None:
        await self.tabulate(channel)

    async def _reset(self, channel: Channel, command: Command) -> None:
        await self.reset(channel)
        await self._safe_reply(channel, command.record_id, "Election reset.")

    async def _summary(self, channel: Channel, command: Command) -> None:
        await self._safe_reply(channel, command.record_id, await self.summary(channel))

    async def _tally(self, channel: Channel, command: Command) -> None:
        await self._safe_reply(channel, command.record_id, await self.summary(channel, tally=True))

    async def _help(self, channel: Channel, command: Command) -> None:
        text = HELP_TEXT.format(prefix=self.config["command_prefix"], role=self.config["admin_role_name"])
        await self._safe_reply(channel, command.record_id, text)

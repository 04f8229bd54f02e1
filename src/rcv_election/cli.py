"""
Module that contains the command line app.

Why does this file exist, and why not put this in __main__?

  You might be tempted to import things from __main__ later, but that will cause
  problems: the code will get executed twice:

  - When you run `python -mrcv_election` python will execute
    ``__main__.py`` as a script. That means there won't be any
    ``rcv_election.__main__`` in ``sys.modules``.
  - When you import __main__ it will get executed again (as a module) because
    there's no ``rcv_election.__main__`` in ``sys.modules``.
"""
import argparse
import asyncio
import logging
import pathlib
import sys

from tqdm import tqdm

from rcv_election.bot import ElectionBot
from rcv_election.channels import JsonFileChannel
from rcv_election.config import read_bot_config
from rcv_election.parsers import get_parser_dict, load_votes_csv
from rcv_election.rcv.tables import summary_report
from rcv_election.rcv.variants import get_rcv_dict

logger = logging.getLogger(__name__)


def _check_path(path: pathlib.Path) -> pathlib.Path:
    if not path.is_file():
        raise RuntimeError(f"not a valid file path: {path}")
    if path.suffix.lower() not in get_parser_dict():
        raise RuntimeError(f"unsupported file type {path.suffix!r}, expected one of: {', '.join(get_parser_dict())}")
    return path


def tabulate_file(path: pathlib.Path, bot: ElectionBot, rounds: bool = False, write_markers: bool = False) -> str:
    """Tabulate the election stored in a JSON record file or a csv vote file.

    :return: The audit log, followed by the round by round table if `rounds` is set.
    :rtype: str
    """
    path = _check_path(path)

    if path.suffix.lower() == ".csv":
        if write_markers:
            raise RuntimeError(f"markers can only be written back to JSON record files: {path}")
        rcv_class = get_rcv_dict()[bot.config["tie_break"]]
        election = rcv_class(load_votes_csv(path), rng=bot.rng)
    else:
        channel = JsonFileChannel(path)
        election = asyncio.run(bot.tabulate(channel))
        if write_markers:
            channel.save()

    output = election.audit_log.text()
    if rounds:
        output += "\n\n" + election.get_round_by_round_table().to_string(index=False)
    return output


def summarize_file(path: pathlib.Path, bot: ElectionBot, tally: bool = False) -> str:
    path = _check_path(path)

    if path.suffix.lower() == ".csv":
        return summary_report(load_votes_csv(path), tally=tally)
    return asyncio.run(bot.summary(JsonFileChannel(path), tally=tally))


def reset_file(path: pathlib.Path, bot: ElectionBot) -> str:
    path = _check_path(path)
    if path.suffix.lower() != ".json":
        raise RuntimeError(f"only JSON record files can be reset: {path}")

    channel = JsonFileChannel(path)
    data = asyncio.run(bot.reset(channel))
    channel.save()
    return f"Election reset ({len(data.candidate_records)} candidate records)."


def build_parser() -> argparse.ArgumentParser:

    p = argparse.ArgumentParser(
        prog="rcv-election",
        description="Tabulate ranked choice elections stored as JSON record files or csv vote files.",
    )
    p.add_argument("--config", help="Path to a JSON file overriding the default bot configuration.")
    p.add_argument("--log-level", help="Logging level, e.g. DEBUG or INFO. Overrides the config file.")

    sub = p.add_subparsers(dest="command", required=True)

    tab = sub.add_parser("tabulate", help="Run the election in each file and print the audit log.")
    tab.add_argument("files", nargs="+", help="JSON record files or csv vote files.")
    tab.add_argument("--seed", type=int, help="Seed for random tie breaks.")
    tab.add_argument("--tie-break", choices=list(get_rcv_dict()), help="Tie break strategy.")
    tab.add_argument("--rounds", action="store_true", help="Also print the round by round table.")
    tab.add_argument(
        "--write-markers", action="store_true", help="Write the outcome markers back to the JSON record files."
    )

    summ = sub.add_parser("summary", help="Print the ballots collected for each candidate.")
    summ.add_argument("file", help="JSON record file or csv vote file.")
    summ.add_argument("--tally", action="store_true", help="Print vote counts at each rank instead.")

    reset = sub.add_parser("reset", help="Remove outcome markers so the election can be tabulated again.")
    reset.add_argument("file", help="JSON record file.")

    return p


def main(argv=None):

    args = build_parser().parse_args(argv)

    try:
        config = read_bot_config(
            args.config,
            overrides={
                "log_level": args.log_level,
                "random_seed": getattr(args, "seed", None),
                "tie_break": getattr(args, "tie_break", None),
            },
        )
    except RuntimeError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config["log_level"].upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    bot = ElectionBot(config)

    try:
        if args.command == "tabulate":
            files = [pathlib.Path(f) for f in args.files]
            for path in tqdm(files, desc="tabulating", disable=len(files) < 2):
                output = tabulate_file(path, bot, rounds=args.rounds, write_markers=args.write_markers)
                if len(files) > 1:
                    tqdm.write(f"== {path}")
                tqdm.write(output)
                if len(files) > 1:
                    tqdm.write("")

        elif args.command == "summary":
            print(summarize_file(pathlib.Path(args.file), bot, tally=args.tally))

        elif args.command == "reset":
            print(reset_file(pathlib.Path(args.file), bot))

    except RuntimeError as e:
        logger.debug("command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    return(0)

"""
Reads the bot configuration.

Defaults and types for every option live in bot_config_settings.json, next to this
module. A user config is a JSON object that overrides any of those options.
"""
from typing import Dict, Optional, Union

import json
import logging
import os
import pathlib
import random

from rcv_election.rcv.variants import get_rcv_dict

logger = logging.getLogger(__name__)


def _cast_str(s):
    return str(s)


def _cast_int(s):
    if isinstance(s, bool):
        raise RuntimeError(f"expected an integer, got {s!r}")
    return int(s)


def _cast_list(lst):
    if isinstance(lst, str):
        if lst == "":
            return []
        return [i.strip() for i in lst.strip("\n").split(",")]
    return [str(i) for i in lst]


cast_dict = {
    "str": _cast_str,
    "int": _cast_int,
    "list": _cast_list,
}


def read_config_settings() -> Dict:
    """Load the packaged option definitions, {option: {"type": ..., "default": ...}}.

    :rtype: Dict
    """
    settings_fpath = f"{os.path.dirname(__file__)}/bot_config_settings.json"
    if os.path.isfile(settings_fpath) is False:
        raise RuntimeError(
            f"(developer error) Looking for bot_config_settings.json. Not a valid file path: {settings_fpath}"
        )

    with open(settings_fpath, encoding="utf8") as settings_file:
        return json.load(settings_file)


def read_bot_config(config_path: Optional[Union[str, pathlib.Path]] = None, overrides: Optional[Dict] = None) -> Dict:
    """Build the bot configuration.

    Options come from the packaged defaults, then the config file at `config_path`, then
    `overrides`. Unknown options are ignored. Null values keep the default.

    :param config_path: Path to a JSON config file, defaults to None
    :type config_path: Optional[Union[str, pathlib.Path]], optional
    :param overrides: Option values that take precedence over the file, defaults to None
    :type overrides: Optional[Dict], optional
    :raises RuntimeError: The config file is missing or not a JSON object, a value cannot be cast
        to its declared type, or `tie_break` names no known strategy.
    :return: One value per option.
    :rtype: Dict
    """
    settings = read_config_settings()

    user_config = {}
    if config_path is not None:
        config_path = pathlib.Path(config_path)
        if os.path.isfile(config_path) is False:
            raise RuntimeError(f"not a valid file path: {config_path}")
        with open(config_path, encoding="utf8") as config_file:
            user_config = json.load(config_file)
        if not isinstance(user_config, dict):
            raise RuntimeError(f"expected a JSON object in {config_path}")

    user_config.update({k: v for k, v in (overrides or {}).items() if v is not None})

    config = {}
    for field in settings:
        value = user_config.get(field)
        if value is None:
            config[field] = settings[field]["default"]
            continue
        try:
            config[field] = cast_dict[settings[field]["type"]](value)
        except (TypeError, ValueError) as e:
            raise RuntimeError(f'invalid value ({value!r}) for config option "{field}"') from e

    for field in user_config:
        if field not in settings:
            logger.info(f'"{field}" is an unrecognized config option, it will be ignored.')

    if config["tie_break"] not in get_rcv_dict():
        raise RuntimeError(
            f'unknown tie_break "{config["tie_break"]}", choose from: {", ".join(get_rcv_dict())}'
        )

    return config


def make_rng(config: Dict) -> random.Random:
    """Random source for tie breaks. Seeded when the config sets random_seed.

    :rtype: random.Random
    """
    return random.Random(config.get("random_seed"))

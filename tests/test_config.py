import json
import logging

import pytest

from rcv_election.config import make_rng, read_bot_config, read_config_settings

DEFAULTS = {
    "command_prefix": "!",
    "admin_role_name": "ElectionAdmin",
    "max_records": 100,
    "tie_break": "InstantRunoff",
    "random_seed": None,
    "ignore_voters": [],
    "log_level": "INFO",
}


def write_config(tmp_path, config):
    path = tmp_path / "bot_config.json"
    path.write_text(json.dumps(config), encoding="utf8")
    return path


def test_settings_have_type_and_default():

    settings = read_config_settings()

    assert set(settings) == set(DEFAULTS)
    for field, setting in settings.items():
        assert set(setting) == {"type", "default"}
        assert setting["default"] == DEFAULTS[field]


def test_defaults():
    assert read_bot_config() == DEFAULTS


params = [
    (
        {
            "input": {"command_prefix": "?", "max_records": "50", "random_seed": 7},
            "expected": {"command_prefix": "?", "max_records": 50, "random_seed": 7},
        }
    ),
    (
        {
            "input": {"ignore_voters": "bot-1, bot-2", "tie_break": "PreferenceScore"},
            "expected": {"ignore_voters": ["bot-1", "bot-2"], "tie_break": "PreferenceScore"},
        }
    ),
    (
        {
            "input": {"ignore_voters": [12, "bot"], "admin_role_name": None},
            "expected": {"ignore_voters": ["12", "bot"]},
        }
    ),
]


@pytest.mark.parametrize("param", params)
def test_config_file(tmp_path, param):

    config = read_bot_config(write_config(tmp_path, param["input"]))

    expected = dict(DEFAULTS)
    expected.update(param["expected"])
    assert config == expected


def test_overrides(tmp_path):

    path = write_config(tmp_path, {"random_seed": 1, "log_level": "DEBUG"})
    config = read_bot_config(path, overrides={"random_seed": 2, "log_level": None})

    assert config["random_seed"] == 2
    assert config["log_level"] == "DEBUG"


def test_unknown_option_is_ignored(tmp_path, caplog):

    path = write_config(tmp_path, {"token": "secret"})

    with caplog.at_level(logging.INFO, logger="rcv_election.config"):
        config = read_bot_config(path)

    assert "token" not in config
    assert '"token" is an unrecognized config option' in caplog.text


@pytest.mark.parametrize("config, match", [
    ({"max_records": "lots"}, "invalid value"),
    ({"max_records": True}, "expected an integer"),
    ({"tie_break": "Borda"}, "unknown tie_break"),
])
def test_config_errors(tmp_path, config, match):

    with pytest.raises(RuntimeError, match=match):
        read_bot_config(write_config(tmp_path, config))


def test_config_file_errors(tmp_path):

    with pytest.raises(RuntimeError, match="not a valid file path"):
        read_bot_config(tmp_path / "missing.json")

    path = tmp_path / "list.json"
    path.write_text("[]", encoding="utf8")
    with pytest.raises(RuntimeError, match="expected a JSON object"):
        read_bot_config(path)


def test_make_rng():

    config = dict(DEFAULTS, random_seed=5)

    first = [make_rng(config).random() for _ in range(2)]
    assert first[0] == first[1]

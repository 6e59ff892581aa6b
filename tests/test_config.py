from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parent.parent))

from chain import DEFAULT_MAX_WALK_LENGTH  # noqa: E402
from config import (  # noqa: E402
    DEFAULT_LOCALES,
    ConfigurationError,
    load_config,
)
from phraser import DEFAULT_HAIKU_ATTEMPTS  # noqa: E402
from store import DB_PATH  # noqa: E402


def test_defaults():
    config = load_config({})
    assert config.token is None
    assert config.database_path == DB_PATH
    assert config.mutation_probability == 0.2
    assert config.max_walk_length == DEFAULT_MAX_WALK_LENGTH
    assert config.haiku_attempts == DEFAULT_HAIKU_ATTEMPTS
    assert config.listen_to_ayy_lmao is True
    assert config.log_level == "INFO"
    assert config.locales == DEFAULT_LOCALES


def test_values_are_parsed():
    config = load_config(
        {
            "TELEGRAM_TOKEN": "123:abc",
            "DATABASE_PATH": "/tmp/chains.sqlite",
            "MUTATION_PROBABILITY": "0.5",
            "MAX_WALK_LENGTH": "30",
            "HAIKU_ATTEMPTS": "5",
            "LISTEN_TO_AYY_LMAO": "no",
            "LOG_LEVEL": "debug",
            "LOCALE_WELCOME_MESSAGE": "¡Hola!",
        }
    )
    assert config.require_token() == "123:abc"
    assert config.database_path == Path("/tmp/chains.sqlite")
    assert config.mutation_probability == 0.5
    assert config.max_walk_length == 30
    assert config.haiku_attempts == 5
    assert config.listen_to_ayy_lmao is False
    assert config.log_level == "DEBUG"
    assert config.locales["WELCOME_MESSAGE"] == "¡Hola!"
    assert config.locales["NO_TRANSITIONS"] == DEFAULT_LOCALES["NO_TRANSITIONS"]

    properties = config.chain_properties()
    assert properties.mutation_probability == 0.5
    assert properties.max_walk_length == 30


def test_invalid_numbers_fall_back_to_defaults(caplog):
    config = load_config({"MAX_WALK_LENGTH": "lots", "MUTATION_PROBABILITY": "?"})
    assert config.max_walk_length == DEFAULT_MAX_WALK_LENGTH
    assert config.mutation_probability == 0.2
    assert "MAX_WALK_LENGTH" in caplog.text


def test_missing_token():
    with pytest.raises(ConfigurationError):
        load_config({}).require_token()

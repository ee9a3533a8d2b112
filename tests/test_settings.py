import logging

import pytest

from tally.logging_config import setup_logging
from tally.settings import Settings


def test_defaults_from_empty_env():
    s = Settings.from_env({})
    assert s == Settings()
    assert s.api_url == "http://localhost:3000"
    assert s.api_token is None
    assert s.page_limit == 50


def test_values_from_env():
    s = Settings.from_env({
        "TALLY_API_URL": "https://finance.example.com/",
        "TALLY_API_TOKEN": "jwt",
        "TALLY_CURRENCY": "eur",
        "TALLY_PAGE_LIMIT": "5",
        "TALLY_TIMEOUT": "3",
        "TALLY_LOG_LEVEL": "debug",
    })
    assert s.api_url == "https://finance.example.com"
    assert s.api_token == "jwt"
    assert s.currency == "EUR"
    assert s.page_limit == 5
    assert s.timeout == 3
    assert s.log_level == "DEBUG"


@pytest.mark.parametrize("raw", ["ten", "0", "-1"])
def test_bad_numbers_rejected(raw):
    with pytest.raises(ValueError):
        Settings.from_env({"TALLY_PAGE_LIMIT": raw})


def test_setup_logging_is_idempotent():
    logger = setup_logging("debug")
    count = len(logger.handlers)
    again = setup_logging(logging.WARNING)
    assert again is logger
    assert len(again.handlers) == count
    assert again.level == logging.WARNING


def test_setup_logging_unknown_level():
    with pytest.raises(ValueError):
        setup_logging("chatty")

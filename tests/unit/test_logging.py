import logging

import pytest

from portfolio_engine.core.logging import resolve_level, setup_logging


@pytest.mark.parametrize(
    "name, expected",
    [("debug", logging.DEBUG), (" WARNING ", logging.WARNING), ("verbose", logging.INFO)],
)
def test_resolve_level(name, expected):
    assert resolve_level(name) == expected


def test_setup_logging_quiets_third_party_loggers():
    setup_logging("INFO", quiet=("portfolio_engine_tests.noisy",))
    assert logging.getLogger("portfolio_engine_tests.noisy").level == logging.WARNING
    assert logging.getLogger("portfolio_engine").level == logging.INFO

    setup_logging("DEBUG", quiet=("portfolio_engine_tests.noisy",))
    assert logging.getLogger("portfolio_engine_tests.noisy").level == logging.DEBUG
    assert logging.getLogger("portfolio_engine").level == logging.DEBUG

    logging.getLogger("portfolio_engine").setLevel(logging.NOTSET)

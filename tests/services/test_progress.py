from __future__ import annotations

import io
import logging

from s3console.services.progress import (
    ConsoleProgressReporter,
    LoggingProgressReporter,
    NullProgressReporter,
    percentage,
)


def test_percentage_floors():
    assert percentage(0, 200) == 0
    assert percentage(1, 200) == 0
    assert percentage(199, 200) == 99
    assert percentage(200, 200) == 100
    assert percentage(1, 3) == 33


def test_percentage_with_zero_total():
    assert percentage(0, 0) == 0
    assert percentage(10, 0) == 0


def test_console_reporter_overwrites_single_line():
    stream = io.StringIO()
    reporter = ConsoleProgressReporter(stream)

    reporter.report(10, 100)
    reporter.report(10, 100)
    reporter.report(55, 100)
    reporter.report(100, 100)

    assert stream.getvalue() == "\r10\r55\r100"
    assert "\n" not in stream.getvalue()

    reporter.finish()
    assert stream.getvalue().endswith("\n")


def test_console_reporter_finish_without_output():
    stream = io.StringIO()
    reporter = ConsoleProgressReporter(stream)

    reporter.finish()

    assert stream.getvalue() == ""


def test_console_reporter_zero_total():
    stream = io.StringIO()
    ConsoleProgressReporter(stream).report(0, 0)

    assert stream.getvalue() == "\r0"


def test_null_reporter_is_silent():
    reporter = NullProgressReporter()
    reporter.report(1, 0)
    reporter.finish()


def test_logging_reporter_steps(caplog):
    logger = logging.getLogger("test.progress")
    reporter = LoggingProgressReporter(logger, step=50)

    with caplog.at_level(logging.DEBUG, logger="test.progress"):
        for done in (0, 10, 49, 50, 70, 100):
            reporter.report(done, 100)

    percents = [record.extra["percent"] for record in caplog.records]
    assert percents == [0, 50, 100]

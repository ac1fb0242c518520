"""Tests for library logging defaults."""

import structlog

from family import FamilyTree
from log import get_logger
from models import ParentRole, Person


def test_library_use_keeps_stdout_clean(capsys):
    tree = FamilyTree()
    tree.add_person(Person(id="A", name="Ada"))
    tree.add_person(Person(id="B", name="Ben"))
    tree.add_parent_edge("A", "B", ParentRole.MOTHER)

    tree.project("A")

    assert capsys.readouterr().out == ""


def test_loggers_go_through_stdlib_logging():
    logger_factory = structlog.get_config()["logger_factory"]

    assert isinstance(logger_factory, structlog.stdlib.LoggerFactory)
    get_logger().info("logging_checked")

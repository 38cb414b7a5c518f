"""Tests for the exception ignore rules."""

from errbit_debugger.errors import BadRequestError, InvalidRouteError, NotFoundError
from errbit_debugger.services.diagnostics.ignore_filter import (
    IgnoreFilter,
    should_ignore,
    type_tags,
)

PARENTS = {
    "NotFoundError": ["BadRequestError"],
    "InvalidRouteError": ["BadRequestError"],
    "BadRequestError": ["DebuggerError"],
}


def test_exact_tag_is_ignored():
    assert should_ignore("NotFoundException", ["NotFoundException"])


def test_unlisted_tag_is_not_ignored():
    assert not should_ignore("ValueError", ["NotFoundException"])
    assert not should_ignore("ValueError", [])


def test_subtype_from_parents_table():
    rules = IgnoreFilter(["BadRequestError"], PARENTS)
    assert rules.should_ignore("NotFoundError")
    assert rules.should_ignore("InvalidRouteError")
    assert not rules.should_ignore("DebuggerError")


def test_transitive_parents():
    rules = IgnoreFilter(["DebuggerError"], PARENTS)
    assert rules.should_ignore("NotFoundError")
    assert rules.ancestors("NotFoundError") == {"BadRequestError", "DebuggerError"}


def test_cycles_terminate():
    rules = IgnoreFilter(["Other"], {"A": ["B"], "B": ["A"]})
    assert not rules.should_ignore("A")
    assert rules.ancestors("A") == {"B"}


def test_type_tags_cover_short_and_dotted_names():
    assert type_tags(NotFoundError("x")) == (
        "NotFoundError",
        "errbit_debugger.errors.NotFoundError",
    )
    assert type_tags(KeyError) == ("KeyError", "builtins.KeyError")


def test_exception_matched_by_dotted_rule():
    rules = IgnoreFilter(["errbit_debugger.errors.InvalidRouteError"])
    assert rules.should_ignore_exception(InvalidRouteError("/nope"))
    assert not rules.should_ignore_exception(NotFoundError("/nope"))


def test_class_hierarchy_alone_does_not_match():
    # NotFoundError subclasses BadRequestError, but the table is empty.
    rules = IgnoreFilter(["BadRequestError"])
    assert rules.should_ignore_exception(BadRequestError())
    assert not rules.should_ignore_exception(NotFoundError())

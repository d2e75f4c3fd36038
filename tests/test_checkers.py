from __future__ import annotations

import pytest

from returncheck.checkers import (
    CHECKERS,
    ConfigurableCheckReturnValue,
    OptionalCheckReturnValue,
    create_checkers,
)
from returncheck.config import CheckerFlags, ConfigError
from returncheck.models import Finding


CONFIGURABLE = ["ConfigurableCheckReturnValue"]
OPTIONAL = ["OptionalCheckReturnValue"]

HEADER = """
from returncheck.annotations import CanIgnoreReturnValue, CheckReturnValue
"""


def _summary(diagnostics):
    return [(item.finding, item.location.line, item.symbol) for item in diagnostics]


def test_ignored_result_of_annotated_method_is_reported_once(run_checks):
    diagnostics = run_checks(
        {
            "pkg/mod.py": HEADER
            + """
@CheckReturnValue
def compute() -> int:
    return 1


def caller():
    compute()
    value = compute()
    return value
"""
        },
        checks=CONFIGURABLE,
    )

    assert _summary(diagnostics) == [
        (Finding.IGNORED_MUST_CHECK_VALUE, 10, "pkg.mod.compute"),
    ]
    assert diagnostics[0].message == ConfigurableCheckReturnValue.summary
    assert diagnostics[0].check == "ConfigurableCheckReturnValue"
    assert diagnostics[0].severity == "error"
    assert diagnostics[0].path == "pkg/mod.py"


def test_may_ignore_method_in_must_check_class(run_checks):
    diagnostics = run_checks(
        {
            "pkg/mod.py": HEADER
            + """
@CheckReturnValue
class Builder:
    @CanIgnoreReturnValue
    def add(self, item) -> "Builder":
        return self

    def build(self) -> list:
        return []

    def use(self):
        self.add(1)
        self.build()
"""
        },
        checks=CONFIGURABLE,
    )

    assert _summary(diagnostics) == [
        (Finding.IGNORED_MUST_CHECK_VALUE, 15, "pkg.mod.Builder.build"),
    ]


def test_void_method_is_reported_at_declaration_only(run_checks):
    diagnostics = run_checks(
        {
            "pkg/mod.py": HEADER
            + """
@CheckReturnValue
def log(message) -> None:
    print(message)


def caller():
    log("hi")
"""
        },
        checks=CONFIGURABLE,
    )

    assert _summary(diagnostics) == [(Finding.MISPLACED_ON_VOID, 5, "pkg.mod.log")]
    assert diagnostics[0].message == (
        "@CheckReturnValue may not be applied to void-returning methods"
    )


def test_class_with_both_annotations_reports_one_conflict(run_checks):
    diagnostics = run_checks(
        {
            "pkg/mod.py": HEADER
            + """
@CheckReturnValue
@CanIgnoreReturnValue
class Both:
    pass
"""
        },
        checks=CONFIGURABLE,
    )

    assert len(diagnostics) == 1
    assert diagnostics[0].finding is Finding.CONFLICTING_ANNOTATIONS
    assert diagnostics[0].message == (
        "@CheckReturnValue and @CanIgnoreReturnValue cannot both be applied to the same class"
    )


def test_void_method_with_both_annotations_reports_only_the_conflict(run_checks):
    diagnostics = run_checks(
        {
            "pkg/mod.py": HEADER
            + """
@CheckReturnValue
@CanIgnoreReturnValue
def both() -> None:
    pass
"""
        },
        checks=CONFIGURABLE,
    )

    assert [item.finding for item in diagnostics] == [Finding.CONFLICTING_ANNOTATIONS]


def test_excluded_annotation_produces_no_diagnostic(run_checks):
    files = {
        "pkg/mod.py": """
from returncheck.annotations import CheckReturnValue


@CheckReturnValue
def compute() -> int:
    return 1


compute()
"""
    }
    flags = CheckerFlags(
        exclude_annotations=("CheckReturnValue", "returncheck.annotations.CheckReturnValue")
    )

    assert len(run_checks(files, checks=CONFIGURABLE)) == 1
    assert run_checks(files, flags=flags, checks=CONFIGURABLE) == []


def test_qualified_custom_name_matches_only_that_annotation(run_checks):
    files = {
        "pkg/mod.py": """
import foo.bar
import other


@foo.bar.CheckReturnValue
def exact() -> int:
    return 1


@other.CheckReturnValue
def elsewhere() -> int:
    return 1


exact()
elsewhere()
"""
    }

    qualified = CheckerFlags(custom_annotations=("foo.bar.CheckReturnValue",))
    simple = CheckerFlags(custom_annotations=("CheckReturnValue",))

    assert [item.symbol for item in run_checks(files, qualified, CONFIGURABLE)] == [
        "pkg.mod.exact"
    ]
    assert [item.symbol for item in run_checks(files, simple, CONFIGURABLE)] == [
        "pkg.mod.exact",
        "pkg.mod.elsewhere",
    ]


def test_package_annotation_applies_to_calls(run_checks):
    diagnostics = run_checks(
        {
            "pkg/__init__.py": HEADER + "__package_annotations__ = (CheckReturnValue,)\n",
            "pkg/mod.py": HEADER
            + """
def compute() -> int:
    return 1


def log() -> None:
    pass


@CanIgnoreReturnValue
def optional() -> int:
    return 1


def caller():
    compute()
    log()
    optional()
""",
        },
        checks=CONFIGURABLE,
    )

    assert _summary(diagnostics) == [
        (Finding.IGNORED_MUST_CHECK_VALUE, 18, "pkg.mod.compute"),
    ]


def test_optional_variant_uses_its_own_annotation(run_checks):
    files = {
        "pkg/mod.py": """
from returncheck.annotations import CheckReturnValue, OptionalCheckReturnValue


@OptionalCheckReturnValue
def maybe() -> int:
    return 1


@CheckReturnValue
def strict() -> int:
    return 1


@OptionalCheckReturnValue
def nothing() -> None:
    pass


maybe()
strict()
"""
    }

    diagnostics = run_checks(files, checks=OPTIONAL)
    assert _summary(diagnostics) == [
        (Finding.MISPLACED_ON_VOID, 16, "pkg.mod.nothing"),
        (Finding.IGNORED_MUST_CHECK_VALUE, 20, "pkg.mod.maybe"),
    ]
    assert diagnostics[1].message == OptionalCheckReturnValue.summary
    assert diagnostics[0].message == (
        "@OptionalCheckReturnValue may not be applied to void-returning methods"
    )


def test_optional_variant_ignores_configuration(run_checks):
    files = {
        "pkg/mod.py": """
from returncheck.annotations import OptionalCheckReturnValue


@OptionalCheckReturnValue
def maybe() -> int:
    return 1


maybe()
"""
    }
    flags = CheckerFlags(custom_annotations=("Other",), exclude_annotations=("Other",))

    assert len(run_checks(files, flags=flags, checks=OPTIONAL)) == 1


def test_both_variants_run_by_default(run_checks):
    diagnostics = run_checks(
        {
            "pkg/mod.py": HEADER
            + """
from returncheck.annotations import OptionalCheckReturnValue


@CheckReturnValue
def strict() -> int:
    return 1


@OptionalCheckReturnValue
def maybe() -> int:
    return 1


strict()
maybe()
"""
        }
    )

    assert [(item.check, item.symbol) for item in diagnostics] == [
        ("ConfigurableCheckReturnValue", "pkg.mod.strict"),
        ("OptionalCheckReturnValue", "pkg.mod.maybe"),
    ]


def test_suppressed_call_shapes_are_not_reported(run_checks):
    diagnostics = run_checks(
        {
            "pkg/mod.py": HEADER
            + """
import pytest


@CheckReturnValue
def parse(text) -> int:
    return int(text)


def test_parse_fails():
    try:
        parse("x")
        pytest.fail()
    except ValueError:
        pass
    with pytest.raises(ValueError):
        parse("y")
    parse("z")
"""
        },
        checks=CONFIGURABLE,
    )

    assert _summary(diagnostics) == [(Finding.IGNORED_MUST_CHECK_VALUE, 20, "pkg.mod.parse")]


def test_constructor_calls_follow_the_class_annotation(run_checks):
    diagnostics = run_checks(
        {
            "pkg/mod.py": HEADER
            + """
@CheckReturnValue
class Connection:
    def __init__(self, url) -> None:
        self.url = url


Connection("db://")
"""
        },
        checks=CONFIGURABLE,
    )

    assert _summary(diagnostics) == [
        (Finding.IGNORED_MUST_CHECK_VALUE, 10, "pkg.mod.Connection.__init__"),
    ]


def test_unresolved_and_used_calls_are_not_reported(run_checks):
    diagnostics = run_checks(
        {
            "pkg/mod.py": HEADER
            + """
import os


@CheckReturnValue
def compute() -> int:
    return 1


os.getcwd()
print(compute())
if compute():
    pass
"""
        },
        checks=CONFIGURABLE,
    )

    assert diagnostics == []


def test_create_checkers_rejects_unknown_names():
    with pytest.raises(ConfigError, match="Unknown checks: Nope"):
        create_checkers(["ConfigurableCheckReturnValue", "Nope"])

    assert [checker.name for checker in create_checkers()] == list(CHECKERS)


def test_calls_through_a_re_exporting_package_are_resolved(run_checks):
    diagnostics = run_checks(
        {
            "pkg/__init__.py": "from .core import make\n",
            "pkg/core.py": HEADER
            + """
@CheckReturnValue
def make() -> int:
    return 1
""",
            "app/main.py": """
import pkg
from pkg import make


def run():
    make()
    pkg.make()
""",
        },
        checks=CONFIGURABLE,
    )

    assert _summary(diagnostics) == [
        (Finding.IGNORED_MUST_CHECK_VALUE, 7, "pkg.core.make"),
        (Finding.IGNORED_MUST_CHECK_VALUE, 8, "pkg.core.make"),
    ]
    assert {item.path for item in diagnostics} == {"app/main.py"}


def test_inherited_methods_resolve_through_bases(run_checks):
    diagnostics = run_checks(
        {
            "pkg/base.py": HEADER
            + """
class Base:
    @CheckReturnValue
    def build(self) -> int:
        return 1
""",
            "pkg/mod.py": """
from pkg.base import Base


class Middle(Base):
    pass


class Sub(Middle):
    def run(self):
        self.build()


Sub.build(Sub())
""",
        },
        checks=CONFIGURABLE,
    )

    assert _summary(diagnostics) == [
        (Finding.IGNORED_MUST_CHECK_VALUE, 11, "pkg.base.Base.build"),
        (Finding.IGNORED_MUST_CHECK_VALUE, 14, "pkg.base.Base.build"),
    ]


def test_inherited_method_keeps_the_marks_of_its_declaring_class(run_checks):
    diagnostics = run_checks(
        {
            "pkg/mod.py": HEADER
            + """
class Base:
    def build(self) -> int:
        return 1


@CheckReturnValue
class Sub(Base):
    def run(self):
        self.build()
"""
        },
        checks=CONFIGURABLE,
    )

    assert diagnostics == []


def test_instantiating_an_annotated_class_without_init(run_checks):
    diagnostics = run_checks(
        {
            "pkg/mod.py": HEADER
            + """
@CheckReturnValue
class Token:
    pass


class Plain:
    pass


Token()
Plain()
"""
        },
        checks=CONFIGURABLE,
    )

    assert _summary(diagnostics) == [
        (Finding.IGNORED_MUST_CHECK_VALUE, 12, "pkg.mod.Token.__init__"),
    ]


def test_suggestion_is_carried_into_the_diagnostic(run_checks):
    diagnostics = run_checks(
        {
            "pkg/mod.py": HEADER
            + """
class Money:
    @CheckReturnValue(suggest="add_in_place")
    def plus(self, other) -> "Money":
        return self

    def add_in_place(self, other) -> None:
        pass

    def total(self, other):
        self.plus(other)
"""
        },
        checks=CONFIGURABLE,
    )

    assert _summary(diagnostics) == [
        (Finding.IGNORED_MUST_CHECK_VALUE, 13, "pkg.mod.Money.plus"),
    ]
    assert diagnostics[0].message == ConfigurableCheckReturnValue.summary
    assert diagnostics[0].suggestion == "add_in_place"
    assert diagnostics[0].to_dict()["suggestion"] == "add_in_place"

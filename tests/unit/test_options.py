"""
Unit tests for layered option resolution.
"""

import pytest

from rail_datatable.exceptions import (
    CircularOptionDependencyError,
    InvalidOptionTypeError,
    MissingOptionError,
    UndefinedOptionError,
)
from rail_datatable.options import OptionsResolver, ResolvedOptions, lazy

pytestmark = pytest.mark.unit


def _resolver():
    resolver = OptionsResolver()
    resolver.set_defaults({"width": "10%", "visible": True, "title": ""})
    return resolver


def test_resolve_without_input_returns_declared_defaults():
    resolved = _resolver().resolve({})

    assert isinstance(resolved, ResolvedOptions)
    assert dict(resolved) == {"width": "10%", "visible": True, "title": ""}


def test_override_wins_over_default():
    resolved = _resolver().resolve({"width": "25%"})
    assert resolved["width"] == "25%"
    assert resolved["visible"] is True


def test_resolved_options_are_read_only():
    resolved = _resolver().resolve()
    with pytest.raises(TypeError):
        resolved["width"] = "50%"


def test_resolve_does_not_mutate_declared_defaults():
    resolver = _resolver()
    resolver.resolve({"width": "25%"})
    assert resolver.resolve()["width"] == "10%"


def test_set_default_redefines_existing_key():
    resolver = _resolver()
    resolver.set_default("width", "50%")
    assert resolver.resolve()["width"] == "50%"


def test_missing_required_option_fails():
    resolver = _resolver()
    resolver.set_required("link_text_field")

    with pytest.raises(MissingOptionError) as excinfo:
        resolver.resolve()
    assert excinfo.value.option_name == "link_text_field"


def test_required_option_satisfied_by_input():
    resolver = _resolver()
    resolver.set_required("link_text_field")
    assert resolver.resolve({"link_text_field": "name"})["link_text_field"] == "name"


def test_required_option_satisfied_by_default():
    resolver = _resolver()
    resolver.set_required("width")
    assert resolver.resolve()["width"] == "10%"


def test_undefined_input_key_is_rejected():
    with pytest.raises(UndefinedOptionError) as excinfo:
        _resolver().resolve({"colour": "red"})
    assert "colour" in str(excinfo.value)


def test_defined_option_without_value_is_absent():
    resolver = _resolver()
    resolver.set_defined("placeholder")

    assert "placeholder" not in resolver.resolve()
    assert resolver.resolve({"placeholder": "x"})["placeholder"] == "x"


def test_allowed_types_rejects_wrong_type():
    resolver = _resolver()
    resolver.set_allowed_types("visible", bool)

    with pytest.raises(InvalidOptionTypeError) as excinfo:
        resolver.resolve({"visible": "yes"})
    assert excinfo.value.option_name == "visible"
    assert excinfo.value.value == "yes"


def test_allowed_types_accepts_none_and_callable_markers():
    resolver = OptionsResolver()
    resolver.set_defaults({"callback": None})
    resolver.set_allowed_types("callback", (callable, None))

    assert resolver.resolve()["callback"] is None
    assert resolver.resolve({"callback": len})["callback"] is len
    with pytest.raises(InvalidOptionTypeError):
        resolver.resolve({"callback": 3})


def test_allowed_types_on_undeclared_key_fails():
    with pytest.raises(UndefinedOptionError):
        OptionsResolver().set_allowed_types("unknown", str)


def test_lazy_default_reads_other_option():
    resolver = OptionsResolver()
    resolver.set_required("link_text_field")
    resolver.set_default("url_field", lazy(lambda options: options["link_text_field"]))

    assert resolver.resolve({"link_text_field": "name"})["url_field"] == "name"


def test_lazy_default_observes_overridden_value():
    resolver = OptionsResolver()
    resolver.set_default("base", "default")
    resolver.set_default("derived", lazy(lambda options: options["base"].upper()))

    assert resolver.resolve()["derived"] == "DEFAULT"
    assert resolver.resolve({"base": "custom"})["derived"] == "CUSTOM"


def test_lazy_default_declared_before_its_dependency():
    resolver = OptionsResolver()
    resolver.set_default("derived", lazy(lambda options: options["base"] * 2))
    resolver.set_default("base", 21)

    assert resolver.resolve()["derived"] == 42


def test_lazy_default_is_evaluated_once_per_resolve():
    calls = []

    def provider(options):
        calls.append(1)
        return options["base"] + 1

    resolver = OptionsResolver()
    resolver.set_default("base", 1)
    resolver.set_default("first", lazy(provider))
    resolver.set_default("second", lazy(lambda options: options["first"] + options["first"]))

    resolved = resolver.resolve()
    assert resolved["second"] == 4
    assert len(calls) == 1

    resolver.resolve()
    assert len(calls) == 2


def test_plain_callable_default_is_not_evaluated():
    def callback(value, row):
        return value

    resolver = OptionsResolver()
    resolver.set_default("callback", callback)
    assert resolver.resolve()["callback"] is callback


def test_lazy_value_is_type_checked():
    resolver = OptionsResolver()
    resolver.set_default("count", lazy(lambda options: "many"))
    resolver.set_allowed_types("count", int)

    with pytest.raises(InvalidOptionTypeError):
        resolver.resolve()


def test_override_replaces_lazy_default():
    resolver = OptionsResolver()
    resolver.set_default("derived", lazy(lambda options: 1 / 0))
    assert resolver.resolve({"derived": 5})["derived"] == 5


def test_provider_error_propagates():
    resolver = OptionsResolver()
    resolver.set_default("broken", lazy(lambda options: 1 / 0))

    with pytest.raises(ZeroDivisionError):
        resolver.resolve()


def test_direct_cycle_fails():
    resolver = OptionsResolver()
    resolver.set_default("self", lazy(lambda options: options["self"]))

    with pytest.raises(CircularOptionDependencyError):
        resolver.resolve()


def test_transitive_cycle_reports_chain():
    resolver = OptionsResolver()
    resolver.set_default("a", lazy(lambda options: options["b"]))
    resolver.set_default("b", lazy(lambda options: options["c"]))
    resolver.set_default("c", lazy(lambda options: options["a"]))

    with pytest.raises(CircularOptionDependencyError) as excinfo:
        resolver.resolve()
    assert excinfo.value.chain == ("a", "b", "c", "a")


def test_cycle_broken_by_override_resolves():
    resolver = OptionsResolver()
    resolver.set_default("a", lazy(lambda options: options["b"]))
    resolver.set_default("b", lazy(lambda options: options["a"]))

    assert dict(resolver.resolve({"b": 1})) == {"a": 1, "b": 1}


def test_provider_reading_undeclared_option_fails():
    resolver = OptionsResolver()
    resolver.set_default("derived", lazy(lambda options: options["nope"]))

    with pytest.raises(UndefinedOptionError):
        resolver.resolve()


def test_resolver_introspection():
    resolver = _resolver()
    resolver.set_required("link_text_field")

    assert resolver.is_defined("width")
    assert resolver.has_default("width")
    assert not resolver.has_default("link_text_field")
    assert resolver.is_required("link_text_field")
    assert resolver.get_defined_options() == ["width", "visible", "title", "link_text_field"]

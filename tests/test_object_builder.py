"""
Tests for building object graphs from configuration.
"""

from typing import Any, Dict, List, Optional

import pytest

from objectfactory import create
from objectfactory.framework.conversion import DefaultTypes, ValueConverters
from objectfactory.framework.members import get_constructors
from objectfactory.framework.object_builder import ObjectBuilder
from objectfactory.framework.resolution import Resolver
from objectfactory.infrastructure.di import DIContainer
from objectfactory.infrastructure.exceptions import (
    ConstructionFailureError, ConversionFailureError, InvalidConfigurationError
)

from tests.fixtures.sample_types import (
    Bucket, Client, Clock, Coordinates, Dual, Endpoint, Exploding, ExponentialRetry, FixedClock, FixedRetry,
    FrozenPoint, Level, Multi, Point, Pool, RetryPolicy, Scheduler, Settings, StrictWidget, Widget, type_ref
)


class TestWidgetScenarios:
    """Test the basic construction scenarios."""

    def test_default_parameter_value(self, config_from):
        """Test that an unmatched parameter takes its declared default."""
        widget = ObjectBuilder().build(config_from({"size": "5"}), Widget)
        assert widget.size == 5
        assert widget.label == "x"

    def test_missing_required_parameter(self, config_from):
        """Test that a missing required parameter fails with its name."""
        with pytest.raises(ConstructionFailureError) as exc_info:
            ObjectBuilder().build(config_from({}), StrictWidget)
        assert exc_info.value.missing_parameter_names == ["size"]

    def test_keys_match_case_insensitively(self, config_from):
        widget = ObjectBuilder().build(config_from({"Size": 3, "LABEL": "big"}), Widget)
        assert (widget.size, widget.label) == (3, "big")

    def test_round_trip_equality(self, config_from):
        """Test that identical configuration builds instances with equal values."""
        data = {"size": "5", "label": "same"}
        first = ObjectBuilder().build(config_from(dict(data)), Widget)
        second = ObjectBuilder().build(config_from(dict(data)), Widget)
        assert first is not second
        assert vars(first) == vars(second)

    def test_nested_section(self, config_from):
        """Test building from a section deeper in the tree."""
        config = config_from({"app": {"widget": {"size": 9}}})
        widget = ObjectBuilder().build(config.get_section("app:widget"), Widget)
        assert widget.size == 9

    def test_module_level_create(self, config_from):
        assert create(config_from({"size": "2"}), Widget).size == 2


class TestConstructorSelection:
    """Test that the best constructor is used."""

    def test_alternate_constructor(self, config_from):
        endpoint = ObjectBuilder().build(config_from({"url": "example.com:8080"}), Endpoint)
        assert endpoint.source == "from_url"
        assert (endpoint.host, endpoint.port) == ("example.com", 8080)

    def test_primary_constructor(self, config_from):
        endpoint = ObjectBuilder().build(config_from({"host": "a", "port": "81"}), Endpoint)
        assert endpoint.source == "init"
        assert endpoint.port == 81

    def test_tie_uses_first_declared(self, config_from):
        dual = ObjectBuilder().build(config_from({"width": "3"}), Dual)
        assert dual.source == "init"
        assert dual.width == 3

    def test_most_matched_constructor(self, config_from):
        multi = ObjectBuilder().build(config_from({"a": "1", "b": "2"}), Multi)
        assert multi.source == "full"
        assert (multi.a, multi.b) == (1, 2)

    def test_constructor_exception_is_wrapped(self, config_from):
        """Test that exceptions raised by a constructor become ConstructionFailureError."""
        with pytest.raises(ConstructionFailureError) as exc_info:
            ObjectBuilder().build(config_from({}), Exploding)
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_resolver_supplies_missing_parameter(self, config_from):
        """Test that the resolver fills parameters absent from configuration."""
        clock = FixedClock("09:30")
        resolver = Resolver.from_container(DIContainer().register_singleton(Clock, clock))
        scheduler = ObjectBuilder(resolver=resolver).build(config_from({"name": "nightly"}), Scheduler)
        assert scheduler.clock is clock
        assert scheduler.name == "nightly"

    def test_configuration_beats_resolver(self, config_from):
        """Test that a configured value is used even when the resolver could supply one."""
        resolver = Resolver(lambda t: "from-resolver" if t is str else None)
        widget = ObjectBuilder(resolver=resolver).build(config_from({"size": 1, "label": "configured"}), Widget)
        assert widget.label == "configured"

    def test_resolver_beats_default(self, config_from):
        resolver = Resolver(lambda t: "from-resolver" if t is str else None)
        widget = ObjectBuilder(resolver=resolver).build(config_from({"size": 1}), Widget)
        assert widget.label == "from-resolver"

    def test_positional_only_parameters(self, config_from):
        coordinates = ObjectBuilder().build(config_from({"x": 1, "y": 2, "label": "origin"}), Coordinates)
        assert (coordinates.x, coordinates.y, coordinates.label) == (1, 2, "origin")

    def test_resolver_that_finds_nothing(self, config_from):
        """Test that a parameter the resolver claims but cannot supply fails the build."""
        resolver = Resolver(lambda t: None, can_resolve=lambda t: True)
        with pytest.raises(ConstructionFailureError) as exc_info:
            ObjectBuilder(resolver=resolver).build(config_from({"y": 2}), Coordinates)
        assert exc_info.value.missing_parameter_names == ["x"]

    def test_missing_positional_only_argument_is_never_passed(self):
        constructor = get_constructors(Coordinates)[0]
        with pytest.raises(TypeError, match="positional-only argument 'x'"):
            constructor.invoke({"y": 2})


class TestTypeSelection:
    """Test the choice of concrete type."""

    def test_explicit_type_with_value_section(self, config_from):
        config = config_from({"retry": {"type": type_ref(ExponentialRetry), "value": {"base": "0.5"}}})
        policy = ObjectBuilder().build(config.get_section("retry"), RetryPolicy)
        assert isinstance(policy, ExponentialRetry)
        assert policy.base == 0.5
        assert policy.factor == 2.0

    def test_explicit_type_without_value_section(self, config_from):
        """Test that a missing value section binds against no keys."""
        config = config_from({"retry": {"type": type_ref(FixedRetry)}})
        policy = ObjectBuilder().build(config.get_section("retry"), RetryPolicy)
        assert policy.seconds == 1.0

    def test_unassignable_type(self, config_from):
        """Test that the configured type must implement the target."""
        config = config_from({"retry": {"type": type_ref(Widget), "value": {"size": 1}}})
        with pytest.raises(InvalidConfigurationError) as exc_info:
            ObjectBuilder().build(config.get_section("retry"), RetryPolicy)
        message = str(exc_info.value)
        assert "Widget" in message and "RetryPolicy" in message

    def test_default_type(self, config_from):
        default_types = DefaultTypes().add(RetryPolicy, FixedRetry)
        config = config_from({"retry": {"seconds": "3"}})
        policy = ObjectBuilder(default_types=default_types).build(config.get_section("retry"), RetryPolicy)
        assert isinstance(policy, FixedRetry)
        assert policy.seconds == 3.0

    def test_interface_without_type(self, config_from):
        config = config_from({"retry": {"seconds": "3"}})
        with pytest.raises(InvalidConfigurationError, match="No concrete type"):
            ObjectBuilder().build(config.get_section("retry"), RetryPolicy)

    def test_unknown_type_name(self, config_from):
        config = config_from({"retry": {"type": "nowhere.Retry"}})
        with pytest.raises(InvalidConfigurationError, match="Unable to locate type"):
            ObjectBuilder().build(config.get_section("retry"), RetryPolicy)


class TestNestedObjects:
    """Test recursive construction of members."""

    def test_nested_explicit_type(self, config_from):
        config = config_from({
            "endpoint": "https://api",
            "retry": {"type": type_ref(ExponentialRetry), "value": {"base": "1", "factor": "3"}},
        })
        client = ObjectBuilder().build(config, Client)
        assert client.endpoint == "https://api"
        assert client.retry.delay(2) == 9.0
        assert client.timeout == 5.0

    def test_nested_member_default_type(self, config_from):
        """Test a default type registered for a specific member."""
        default_types = DefaultTypes().add_for_member(Client, "retry", FixedRetry)
        config = config_from({"endpoint": "x", "retry": {"seconds": "2"}})
        client = ObjectBuilder(default_types=default_types).build(config, Client)
        assert isinstance(client.retry, FixedRetry)
        assert client.retry.seconds == 2.0

    def test_nested_failure_fails_whole_build(self, config_from):
        """Test that an error in a nested member fails the enclosing build."""
        config = config_from({"endpoint": "x", "retry": {"type": type_ref(ExponentialRetry), "value": {}}})
        with pytest.raises(ConstructionFailureError) as exc_info:
            ObjectBuilder().build(config, Client)
        assert exc_info.value.missing_parameter_names == ["base"]

    def test_dataclass(self, config_from):
        point = ObjectBuilder().build(config_from({"x": "4"}), Point)
        assert point == Point(4, 0)

    def test_frozen_dataclass(self, config_from):
        point = ObjectBuilder().build(config_from({"x": "1", "y": "2"}), FrozenPoint)
        assert point == FrozenPoint(1, 2)


class TestCollections:
    """Test list, dict, set and tuple targets."""

    def test_collection_parameters(self, config_from):
        config = config_from({
            "hosts": ["a", "b"],
            "ports": {"http": 80, "https": "443"},
            "weights": [1, "2"],
            "pair": ["primary", 5],
        })
        pool = ObjectBuilder().build(config, Pool)
        assert pool.hosts == ["a", "b"]
        assert pool.ports == {"http": 80, "https": 443}
        assert pool.weights == (1, 2)
        assert pool.pair == ("primary", 5)

    def test_single_value_becomes_list(self, config_from):
        pool = ObjectBuilder().build(config_from({"hosts": "only", "ports": {}}), Pool)
        assert pool.hosts == ["only"]
        assert pool.ports == {}

    def test_fixed_tuple_length_mismatch(self, config_from):
        config = config_from({"hosts": [], "ports": {}, "pair": ["a", 1, 2]})
        with pytest.raises(ConversionFailureError, match="Expected 2 items"):
            ObjectBuilder().build(config, Pool)

    def test_list_of_objects(self, config_from):
        class Fleet:
            def __init__(self, widgets: List[Widget]):
                self.widgets = widgets

        fleet = ObjectBuilder().build(config_from({"widgets": [{"size": 1}, {"size": 2, "label": "b"}]}), Fleet)
        assert [(w.size, w.label) for w in fleet.widgets] == [(1, "x"), (2, "b")]

    def test_untyped_values(self, config_from):
        """Test that Any-typed parameters receive raw strings, lists and dicts."""
        class Bag:
            def __init__(self, data: Any = None, items: Any = None, flag: Any = None):
                self.data = data
                self.items = items
                self.flag = flag

        config = config_from({"data": {"a": 1, "b": {"c": True}}, "items": ["x", "y"], "flag": 5})
        bag = ObjectBuilder().build(config, Bag)
        assert bag.data == {"a": "1", "b": {"c": "true"}}
        assert bag.items == ["x", "y"]
        assert bag.flag == "5"

    def test_missing_optional_collection_is_empty(self, config_from):
        class Holder:
            def __init__(self, names: List[str], lookup: Dict[str, int], note: Optional[str] = "n"):
                self.names = names
                self.lookup = lookup
                self.note = note

        config = config_from({"names": None, "lookup": None, "note": None})
        holder = ObjectBuilder().build(config, Holder)
        assert holder.names == []
        assert holder.lookup == {}
        assert holder.note is None


class TestPropertyBinding:
    """Test binding keys that are not constructor parameters."""

    def test_writable_properties(self, config_from):
        config = config_from({"name": "primary", "timeout": "2.5", "level": "debug", "owner": "ops"})
        settings = ObjectBuilder().build(config, Settings)
        assert settings.name == "primary"
        assert settings.timeout == 2.5
        assert settings.level is Level.DEBUG
        assert settings.owner == "ops"

    def test_read_only_collections_are_populated(self, config_from):
        """Test that read-only list, set and dict properties are filled in place."""
        config = config_from({"tags": ["a", "b"], "labels": {"team": "core"}, "ports": [80, 80, 443]})
        settings = ObjectBuilder().build(config, Settings)
        assert settings.tags == ["a", "b"]
        assert settings.labels == {"team": "core"}
        assert settings.ports == {80, 443}

    @pytest.mark.parametrize("tags", [[], None])
    def test_empty_read_only_collection(self, config_from, tags):
        """Test that an empty or null list leaves a read-only collection empty."""
        settings = ObjectBuilder().build(config_from({"tags": tags}), Settings)
        assert settings.tags == []

    def test_single_value_for_read_only_collection(self, config_from):
        settings = ObjectBuilder().build(config_from({"tags": "solo"}), Settings)
        assert settings.tags == ["solo"]

    def test_read_only_collection_owned_by_constructor(self, config_from):
        bucket = ObjectBuilder().build(config_from({"items": ["a"]}), Bucket)
        assert bucket.items == ["a"]

    def test_unknown_keys_are_ignored(self, config_from, captured_logs):
        """Test that keys without a member are logged and skipped."""
        settings = ObjectBuilder().build(config_from({"unknown": "1", "description": "x"}), Settings)
        assert settings.name == ""
        assert len(captured_logs.find("no matching member")) == 2

    def test_scalar_conversion_failure(self, config_from):
        with pytest.raises(ConversionFailureError) as exc_info:
            ObjectBuilder().build(config_from({"timeout": "soon"}), Settings)
        assert exc_info.value.config_path == "timeout"

    def test_section_for_scalar_member(self, config_from):
        with pytest.raises(ConversionFailureError, match="configuration section"):
            ObjectBuilder().build(config_from({"size": {"nested": 1}}), Widget)

    def test_member_converter(self, config_from):
        converters = ValueConverters().add_for_member(Settings, "timeout", lambda s: float(s.rstrip("s")))
        settings = ObjectBuilder(value_converters=converters).build(config_from({"timeout": "30s"}), Settings)
        assert settings.timeout == 30.0

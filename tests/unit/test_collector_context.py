"""
Unit tests for CollectorContext.

Covers slot registration, the combine facade, collector loading and reset.
These tests run fast and need no threads or files.
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from collector_context import (
    AbstractCollector,
    CollectorContext,
    CollectorNotFoundError,
    CollectorSettings,
    CollectorsAlreadyLoadedError,
    NotACollectorError,
    ReducingCollector,
)


class RecordingCollector:
    """Collector that records every combined item and counts finalize calls."""

    def __init__(self):
        self.items = []
        self.finalize_calls = 0

    def combine(self, data):
        self.items.append(data)

    def finalize(self):
        self.finalize_calls += 1
        return list(self.items)


@dataclass
class StepOptions:
    """Plain value with data fields named like the collector methods."""

    combine: bool = True
    finalize: bool = False


def summing_collector():
    return ReducingCollector(0, lambda total, n: total + n)


class TestSlotRegistry:
    """Tests for add() and get()."""

    def test_get_unregistered_returns_none(self, context):
        """Test that an unknown name returns None."""
        assert context.get("missing") is None

    def test_get_unregistered_returns_default(self, context):
        """Test that get() honours an explicit default."""
        assert context.get("missing", default="fallback") == "fallback"

    def test_plain_value_round_trips(self, context):
        """Test that a plain value is returned unchanged."""
        payload = {"$id": "https://example.com/schema"}
        context.add("x", payload)

        assert context.get("x") is payload

    def test_plain_value_unchanged_after_load(self, context):
        """Test that loading leaves plain values alone."""
        context.add("x", 5)
        context.load_collectors()

        assert context.get("x") == 5
        assert "x" not in context.results()

    def test_collector_returned_before_load(self, context):
        """Test that get() returns the collector itself before loading."""
        collector = RecordingCollector()
        context.add("x", collector)

        assert context.get("x") is collector

    def test_add_overwrites_existing_slot(self, context):
        """Test last-write-wins on duplicate names."""
        context.add("x", 1)
        context.add("x", 2)

        assert context.get("x") == 2
        assert len(context) == 1

    def test_overwrite_drops_loaded_result(self, context):
        """Test that replacing a loaded collector discards its stale result."""
        context.add("x", RecordingCollector())
        context.combine_with_collector("x", "a")
        context.load_collectors()

        context.add("x", "plain")

        assert context.get("x") == "plain"
        assert context.results() == {}

    def test_none_is_a_valid_plain_value(self, context):
        """Test that None can be stored and is distinguishable via membership."""
        context.add("x", None)

        assert "x" in context
        assert context.get("x", default="absent") is None

    def test_collector_class_is_stored_as_plain_value(self, context):
        """Test that registering a collector type does not treat it as a collector."""
        context.add("x", RecordingCollector)

        assert context.is_collector("x") is False
        context.combine_with_collector("x", 1)
        context.load_collectors()
        assert context.get("x") is RecordingCollector


class TestCombineWithCollector:
    """Tests for the combine facade."""

    def test_combine_unregistered_is_noop(self, context):
        """Test combine on a missing name raises nothing and creates no slot."""
        context.combine_with_collector("missing", 1)

        assert "missing" not in context
        assert context.get("missing") is None

    def test_combine_plain_slot_is_noop(self, context):
        """Test combine on a plain value leaves it unchanged."""
        context.add("x", 5)
        context.combine_with_collector("x", 1)

        assert context.get("x") == 5

    def test_combine_preserves_order(self, context):
        """Test that combined data reaches the collector in call order."""
        context.add("x", RecordingCollector())
        context.combine_with_collector("x", "d1")
        context.combine_with_collector("x", "d2")
        context.load_collectors()

        direct = RecordingCollector()
        direct.combine("d1")
        direct.combine("d2")

        assert context.get("x") == direct.finalize() == ["d1", "d2"]

    def test_combine_and_load_ignore_plain_value_with_method_named_fields(self, context):
        """Test fields named combine/finalize do not turn a value into a collector."""
        options = StepOptions()
        context.add("opts", options)

        context.combine_with_collector("opts", 1)
        context.load_collectors()

        assert context.get("opts") is options
        assert context.results() == {}

    def test_combine_error_from_collector_propagates(self, context):
        """Test that errors raised by a collector itself are not swallowed."""

        class FailingCollector(AbstractCollector[int]):
            def combine(self, data):
                raise RuntimeError("bad data")

            def finalize(self):
                return 0

        context.add("x", FailingCollector())

        with pytest.raises(RuntimeError, match="bad data"):
            context.combine_with_collector("x", 1)


class TestLoadCollectors:
    """Tests for the finalization stage."""

    def test_count_scenario(self, context):
        """Test a summing collector fed three ones finalizes to 3."""
        context.add("count", summing_collector())
        for _ in range(3):
            context.combine_with_collector("count", 1)

        context.load_collectors()

        assert context.get("count") == 3

    def test_result_replaces_collector_after_load(self, context):
        """Test get() returns exactly finalize()'s result after loading."""
        collector = RecordingCollector()
        context.add("x", collector)
        context.combine_with_collector("x", "a")

        context.load_collectors()

        assert context.get("x") == ["a"]
        assert collector.finalize_calls == 1

    def test_none_result_is_returned_after_load(self, context):
        """Test that a None result is returned instead of the collector."""

        class NoneCollector(AbstractCollector[None]):
            def finalize(self):
                return None

        context.add("x", NoneCollector())
        context.load_collectors()

        assert context.get("x", default="absent") is None
        assert context.results() == {"x": None}

    def test_combine_after_load_invisible_until_reload(self, context):
        """Test that loading captures only the combines issued before it."""
        context.add("x", RecordingCollector())
        context.combine_with_collector("x", "a")
        context.load_collectors()
        context.combine_with_collector("x", "b")

        assert context.get("x") == ["a"]

        context.load_collectors()

        assert context.get("x") == ["a", "b"]

    def test_reload_runs_finalize_again(self, context):
        """Test that each load runs finalize() once per collector."""
        collector = RecordingCollector()
        context.add("x", collector)

        context.load_collectors()
        context.load_collectors()

        assert collector.finalize_calls == 2

    def test_reload_disabled_raises(self):
        """Test that reloading before reset raises when allow_reload is off."""
        context = CollectorContext(CollectorSettings(allow_reload=False))
        collector = RecordingCollector()
        context.add("x", collector)
        context.load_collectors()

        with pytest.raises(CollectorsAlreadyLoadedError):
            context.load_collectors()

        assert collector.finalize_calls == 1

    def test_reload_disabled_allows_load_after_reset(self):
        """Test that reset() re-opens loading when allow_reload is off."""
        context = CollectorContext(CollectorSettings(allow_reload=False))
        context.load_collectors()
        context.reset()

        context.load_collectors()

        assert context.loaded is True

    def test_results_only_hold_collectors(self, context):
        """Test the results mapping never contains plain values."""
        context.add("plain", "value")
        context.add("count", summing_collector())

        context.load_collectors()

        assert context.results() == {"count": 0}

    def test_loaded_flag(self, context):
        """Test that loaded tracks load_collectors() since the last reset."""
        assert context.loaded is False
        context.load_collectors()
        assert context.loaded is True
        context.reset()
        assert context.loaded is False


class TestReset:
    """Tests for reset()."""

    def test_reset_clears_plain_values(self, context):
        """Test that reset removes registered values."""
        context.add("x", 1)
        context.reset()

        assert context.get("x") is None

    def test_reset_clears_results(self, context):
        """Test that reset removes loaded results and collectors."""
        context.add("count", summing_collector())
        context.load_collectors()
        context.reset()

        assert context.get("count") is None
        assert context.results() == {}
        assert len(context) == 0


class TestStrictMode:
    """Tests for opt-in strict combine behaviour."""

    def test_combine_missing_raises(self, strict_context):
        """Test strict combine on a missing name."""
        strict_context.add("other", 1)

        with pytest.raises(CollectorNotFoundError) as exc_info:
            strict_context.combine_with_collector("missing", 1)

        assert exc_info.value.slot_name == "missing"
        assert "other" in str(exc_info.value)
        assert "missing" not in strict_context

    def test_combine_plain_raises(self, strict_context):
        """Test strict combine on a plain value."""
        strict_context.add("x", 5)

        with pytest.raises(NotACollectorError) as exc_info:
            strict_context.combine_with_collector("x", 1)

        assert "int" in str(exc_info.value)
        assert strict_context.get("x") == 5

    def test_combine_collector_still_works(self, strict_context):
        """Test strict mode does not affect valid combines."""
        strict_context.add("count", summing_collector())
        strict_context.combine_with_collector("count", 2)
        strict_context.load_collectors()

        assert strict_context.get("count") == 2

    def test_get_missing_still_returns_none(self, strict_context):
        """Test lookups stay permissive in strict mode."""
        assert strict_context.get("missing") is None


class TestHelperMethods:
    """Tests for read helpers."""

    def test_names_sorted(self, context):
        """Test names() returns sorted slot names."""
        context.add("b", 1)
        context.add("a", summing_collector())

        assert context.names() == ["a", "b"]
        assert list(context) == ["a", "b"]

    def test_is_collector(self, context):
        """Test is_collector distinguishes slot variants."""
        context.add("plain", 1)
        context.add("count", summing_collector())

        assert context.is_collector("count") is True
        assert context.is_collector("plain") is False
        assert context.is_collector("missing") is False

    def test_results_is_a_copy(self, context):
        """Test mutating results() does not affect the context."""
        context.add("count", summing_collector())
        context.load_collectors()

        context.results()["count"] = 99

        assert context.get("count") == 0

    def test_summary_empty(self, context):
        """Test summary for an empty context."""
        assert "No slots registered" in context.summary()

    def test_summary_with_slots(self, context):
        """Test summary lists slot names and kinds."""
        context.add("count", summing_collector())
        context.add("version", "2020-12")
        context.load_collectors()

        summary = context.summary()

        assert "2 slots, loaded" in summary
        assert "count [collector]" in summary
        assert "version [plain]" in summary

"""Tests for the Event record and logging setup"""
from datetime import datetime, timezone

import pytest
import structlog

from transaction_time import Event, Record, TransactionTimeFilter, TransactionTimeSettings, configure_logging


class TestEvent:
    """Test the dict-backed Event"""

    def test_implements_record(self):
        assert isinstance(Event(), Record)

    def test_timestamp_defaults_to_now(self):
        before = datetime.now(timezone.utc)

        assert Event().get("@timestamp") >= before

    def test_explicit_timestamp_kept(self):
        assert Event({"@timestamp": "2018-04-22T09:46:22.000+01:00"}).get("@timestamp") == "2018-04-22T09:46:22.000+01:00"

    def test_tag_is_not_duplicated(self):
        event = Event({"tags": ["a"]})

        event.tag("a")
        event.tag("b")

        assert event.get("tags") == ["a", "b"]
        assert event.tags == {"a", "b"}

    def test_single_tag_string(self):
        assert Event({"tags": "transaction"}).tags == {"transaction"}

    def test_clone_is_independent(self):
        event = Event({"nested": {"key": "value"}, "tags": ["a"]})

        clone = event.clone()
        clone.tag("b")
        clone.get("nested")["key"] = "changed"

        assert clone == Event({"@timestamp": event.get("@timestamp"), "nested": {"key": "changed"}, "tags": ["a", "b"]})
        assert event.tags == {"a"}
        assert event.get("nested") == {"key": "value"}

    def test_set_get_remove(self):
        event = Event()

        event.set("field", 1)
        assert "field" in event
        assert event.remove("field") == 1
        assert event.get("field", "default") == "default"


class TestConfigureLogging:
    """Test structlog configuration"""

    @pytest.fixture(autouse=True)
    def restore_structlog(self):
        yield
        structlog.reset_defaults()

    def test_json_output(self, capsys):
        configure_logging("info", "json")

        structlog.get_logger().info("transaction_completed", uid="uid-1")

        out = capsys.readouterr().out
        assert '"event": "transaction_completed"' in out
        assert '"uid": "uid-1"' in out

    def test_level_filtering(self, capsys):
        configure_logging("warning", "json")

        structlog.get_logger().info("transaction_completed")

        assert capsys.readouterr().out == ""

    def test_per_event_logs_hidden_at_info(self, capsys):
        """Opening and completing transactions only logs at debug level"""
        configure_logging("info", "json")
        transaction_filter = TransactionTimeFilter(TransactionTimeSettings(uid_field="uid"))
        capsys.readouterr()

        transaction_filter.filter(Event({"uid": "uid-1"}))
        transaction_filter.filter(Event({"uid": "uid-1"}))

        assert capsys.readouterr().out == ""

    def test_per_event_logs_shown_at_debug(self, capsys):
        configure_logging("debug", "json")
        transaction_filter = TransactionTimeFilter(TransactionTimeSettings(uid_field="uid"))

        transaction_filter.filter(Event({"uid": "uid-1"}))

        assert '"event": "transaction_opened"' in capsys.readouterr().out

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            configure_logging("verbose")

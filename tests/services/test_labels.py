"""
Unit tests for repair status labels: pure functions, no DB.
"""
import pytest

from horplus.core.errors import InvalidInput
from horplus.services.labels import (
    REPAIR_COMPLETE,
    REPAIR_IN_PROGRESS,
    REPAIR_PENDING,
    parse_repair_status,
    translate_repair_status,
)


class TestTranslate:
    def test_pending(self):
        assert translate_repair_status("pending") == "รอรับเรื่อง"

    def test_in_progress(self):
        assert translate_repair_status("in progress") == "กำลังดำเนินการ"

    def test_complete(self):
        assert translate_repair_status("complete") == "เสร็จสิ้น"

    def test_unknown_passes_through(self):
        assert translate_repair_status("on hold") == "on hold"


class TestParse:
    def test_missing_means_pending(self):
        assert parse_repair_status(None) == REPAIR_PENDING
        assert parse_repair_status("  ") == REPAIR_PENDING

    def test_code_is_case_insensitive(self):
        assert parse_repair_status("In Progress") == REPAIR_IN_PROGRESS

    def test_thai_labels(self):
        assert parse_repair_status("กำลังดำเนินการ") == REPAIR_IN_PROGRESS
        assert parse_repair_status("เสร็จสิ้น") == REPAIR_COMPLETE
        assert parse_repair_status("รอดำเนินการ") == REPAIR_PENDING

    def test_unknown_status(self):
        with pytest.raises(InvalidInput) as exc_info:
            parse_repair_status("lost")
        assert exc_info.value.field == "status"

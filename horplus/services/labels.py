"""
Repair status labels: pure lookups, no DB.

Statuses are stored in English codes and shown in Thai.  Input may use
either the code or one of the Thai labels the front end sends.
"""
from horplus.core.errors import InvalidInput

REPAIR_PENDING = "pending"
REPAIR_IN_PROGRESS = "in progress"
REPAIR_COMPLETE = "complete"

REPAIR_STATUSES = (REPAIR_PENDING, REPAIR_IN_PROGRESS, REPAIR_COMPLETE)

REPAIR_STATUS_LABELS: dict[str, str] = {
    REPAIR_PENDING: "รอรับเรื่อง",
    REPAIR_IN_PROGRESS: "กำลังดำเนินการ",
    REPAIR_COMPLETE: "เสร็จสิ้น",
}

_LABEL_TO_STATUS: dict[str, str] = {
    "รอรับเรื่อง": REPAIR_PENDING,
    "รอดำเนินการ": REPAIR_PENDING,
    "กำลังดำเนินการ": REPAIR_IN_PROGRESS,
    "เสร็จสิ้น": REPAIR_COMPLETE,
}


def translate_repair_status(status: str) -> str:
    """Stored code → display label; unknown values pass through unchanged."""
    return REPAIR_STATUS_LABELS.get(status, status)


def parse_repair_status(value: str | None) -> str:
    """Code or Thai label → stored code. Missing means pending."""
    if value is None or not value.strip():
        return REPAIR_PENDING
    value = value.strip()
    if value.lower() in REPAIR_STATUSES:
        return value.lower()
    status = _LABEL_TO_STATUS.get(value)
    if status is None:
        raise InvalidInput("status", f"unknown repair status '{value}'")
    return status

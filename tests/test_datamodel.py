import pytest

from remindme.datamodel import ReminderPriority, parse_priority


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("low", ReminderPriority.LOW),
        ("HIGH", ReminderPriority.HIGH),
        (" critical ", ReminderPriority.CRITICAL),
        ("medium", ReminderPriority.MEDIUM),
        (ReminderPriority.HIGH, ReminderPriority.HIGH),
        ("urgent", ReminderPriority.MEDIUM),
        ("", ReminderPriority.MEDIUM),
        (None, ReminderPriority.MEDIUM),
        (3, ReminderPriority.MEDIUM),
    ],
)
def test_parse_priority_is_total(raw, expected) -> None:
    assert parse_priority(raw) is expected

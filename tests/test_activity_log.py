import re
from pathlib import Path
from typing import Generator

import pytest
from loguru import logger

from inkwell.activity_log import LocalActivityLog
from inkwell.domain.errors import StorageError

ENTRY_PATTERN = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] (.*)$")


@pytest.fixture
def activity_log(tmp_path: Path) -> Generator[LocalActivityLog, None, None]:
    log = LocalActivityLog(tmp_path / "logs" / "activity.log")
    yield log
    log.close()


def _messages(content: str) -> list[str]:
    messages = []
    for line in content.splitlines():
        match = ENTRY_PATTERN.match(line)
        assert match, f"Malformed activity entry: {line!r}"
        messages.append(match.group(1))
    return messages


def test_fresh_log_is_empty(activity_log: LocalActivityLog) -> None:
    """Test that nothing is read before anything is recorded."""
    assert activity_log.read() == ""


def test_entries_are_timestamped(activity_log: LocalActivityLog) -> None:
    """Test that entries are appended one per line with a timestamp."""
    activity_log.record("TRASH: Moved 'a' to trash")
    activity_log.record("TRASH: Restored 'a' from trash")

    assert _messages(activity_log.read()) == [
        "TRASH: Moved 'a' to trash",
        "TRASH: Restored 'a' from trash",
    ]


def test_application_logging_stays_out(activity_log: LocalActivityLog) -> None:
    """Test that regular log messages never reach the activity log."""
    logger.info("Regular application message")
    activity_log.record("LOGS: visible")

    assert _messages(activity_log.read()) == ["LOGS: visible"]


def test_logs_are_separate(tmp_path: Path, activity_log: LocalActivityLog) -> None:
    """Test that two activity logs do not see each other's entries."""
    other = LocalActivityLog(tmp_path / "other.log")
    try:
        other.record("other entry")
        activity_log.record("own entry")

        assert _messages(other.read()) == ["other entry"]
        assert _messages(activity_log.read()) == ["own entry"]
    finally:
        other.close()


def test_clear_leaves_a_marker(activity_log: LocalActivityLog) -> None:
    """Test that clearing drops old entries and records that it happened."""
    activity_log.record("old entry")

    activity_log.clear()
    activity_log.record("new entry")

    assert _messages(activity_log.read()) == ["LOGS: Activity log cleared.", "new entry"]


def test_unreadable_log_raises_storage_error(
    activity_log: LocalActivityLog, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that file system failures surface as storage errors."""
    activity_log.record("entry")

    def denied(self: Path, *args, **kwargs) -> str:
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "read_text", denied)
    monkeypatch.setattr(Path, "write_text", denied)

    with pytest.raises(StorageError):
        activity_log.read()
    with pytest.raises(StorageError):
        activity_log.clear()

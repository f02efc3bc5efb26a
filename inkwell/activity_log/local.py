from pathlib import Path

from loguru import logger

from inkwell.activity_log.base import ActivityLog
from inkwell.domain.errors import StorageError

ACTIVITY_FORMAT = "[{time:YYYY-MM-DD HH:mm:ss}] {message}"


class LocalActivityLog(ActivityLog):
    """Activity log appended to a text file through a dedicated loguru sink.

    Entries are routed to the file by binding a marker into the record's
    ``extra`` dict, so regular application logging never lands in the
    activity log. The sink is added with ``catch=True``: a failing write is
    reported on stderr by loguru and never propagates into the caller.
    """

    def __init__(self, filepath: str | Path) -> None:
        """Initialize LocalActivityLog.

        Args:
            filepath: Path to the activity log file. Parent folders are created.
        """
        self._filepath = Path(filepath)
        self._filepath.parent.mkdir(parents=True, exist_ok=True)
        self._sink_key = str(self._filepath.resolve())
        self._handler_id = logger.add(
            self._filepath,
            format=ACTIVITY_FORMAT,
            filter=self._accepts,
            level="INFO",
            encoding="utf-8",
            catch=True,
        )
        self._logger = logger.bind(activity_log=self._sink_key)

    def _accepts(self, record) -> bool:  # noqa: ANN001
        return record["extra"].get("activity_log") == self._sink_key

    def record(self, message: str) -> None:
        self._logger.info(message)

    def read(self) -> str:
        try:
            return self._filepath.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        except OSError as e:
            raise StorageError(f"Could not read activity log {self._filepath}: {e}") from e

    def clear(self) -> None:
        # The sink appends, so truncating in place keeps it writing at the start
        try:
            self._filepath.write_text("", encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not clear activity log {self._filepath}: {e}") from e
        self.record("LOGS: Activity log cleared.")

    def close(self) -> None:
        """Detach the file sink from loguru."""
        logger.remove(self._handler_id)

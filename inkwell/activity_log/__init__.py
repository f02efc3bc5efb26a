from inkwell.activity_log.base import ActivityLog
from inkwell.activity_log.local import LocalActivityLog

__all__ = ["ActivityLog", "LocalActivityLog"]

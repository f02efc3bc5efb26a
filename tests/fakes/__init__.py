from tests.fakes.failing_reference_index import FailingReferenceIndex
from tests.fakes.fake_activity_log import FakeActivityLog
from tests.fakes.fake_clock import FakeClock

__all__ = ["FakeActivityLog", "FakeClock", "FailingReferenceIndex"]

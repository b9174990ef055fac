from parca.integrations.time.abc import Time
from parca.integrations.time.fake import FakeTime
from parca.integrations.time.real import RealTime

__all__ = ["FakeTime", "RealTime", "Time"]

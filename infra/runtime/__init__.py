from .clock import SystemClock, TimestampRunIdGenerator
from .structured_logger import StructuredLogger

__all__ = ["SystemClock", "TimestampRunIdGenerator", "StructuredLogger"]

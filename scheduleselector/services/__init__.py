"""
Service layer helpers that wire adapters and domain logic together.
"""

from .schedule_selector import ScheduleSelector

__all__ = ["ScheduleSelector"]

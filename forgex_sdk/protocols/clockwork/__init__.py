from .adapter import THREAD_PROGRAM_ID, ClockworkAdapter

__all__ = ["ClockworkAdapter", "THREAD_PROGRAM_ID"]

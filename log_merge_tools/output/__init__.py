"""Output module - Threaded, bounded writer for the merged stream."""

from .queued_writer import QUEUE_CAPACITY, QueuedLineWriter

__all__ = ["QueuedLineWriter", "QUEUE_CAPACITY"]

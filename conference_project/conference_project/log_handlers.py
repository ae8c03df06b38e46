import atexit
import logging
import queue
from logging.handlers import QueueHandler, QueueListener


def audit_queue_handler():
    """
    Handler for the ``security.audit`` logger.

    The request thread only enqueues the record; a listener thread
    writes it out, so a denied request never waits on the stream.
    """
    records = queue.SimpleQueue()
    listener = QueueListener(
        records,
        logging.StreamHandler(),
        respect_handler_level=True,
    )
    listener.start()
    atexit.register(listener.stop)
    return QueueHandler(records)

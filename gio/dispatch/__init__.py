from .callbacks import CallbackRegistry, ErrorCallback, SuccessCallback
from .dispatcher import BatchDispatcher, Transport
from .queue import MessageQueue

__all__ = [
    "BatchDispatcher",
    "CallbackRegistry",
    "ErrorCallback",
    "MessageQueue",
    "SuccessCallback",
    "Transport",
]

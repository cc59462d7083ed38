from codeshare.extension.eventbus.base import EventBus

__all__ = ["EventBus"]

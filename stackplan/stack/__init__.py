from .component import Stack

__all__ = ["Stack"]

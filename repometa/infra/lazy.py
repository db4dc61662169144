"""
Single-assignment cache cell.

A Lazy runs its factory at most once, even under concurrent access, and
then hands out the same value (or re-raises the same error) forever.
"""

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar('T')


class Lazy(Generic[T]):
    """
    Example:
        head = Lazy(resolver.resolve_head_reference)
        head.value  # resolved on first access
    """

    def __init__(self, factory: Callable[[], T]):
        self._factory: Optional[Callable[[], T]] = factory
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._error: Optional[BaseException] = None

    @classmethod
    def of(cls, value: T) -> 'Lazy[T]':
        """A cell that is already assigned."""
        cell = cls(lambda: value)
        cell.value
        return cell

    @property
    def is_assigned(self) -> bool:
        return self._factory is None

    @property
    def value(self) -> T:
        if self._factory is not None:
            with self._lock:
                if self._factory is not None:
                    try:
                        self._value = self._factory()
                    except Exception as e:
                        self._error = e
                    self._factory = None
        if self._error is not None:
            raise self._error
        return self._value

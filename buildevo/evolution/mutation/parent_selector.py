from abc import ABC, abstractmethod
from itertools import cycle
from typing import Iterator, TypeVar

T = TypeVar("T")


class ParentSelector(ABC):
    """Abstract base class for selecting parents for mutation."""

    @abstractmethod
    def create_parent_iterator(self, available_parents: list[T]) -> Iterator[list[T]]:
        """Create an iterator that yields parent selections.

        Args:
            available_parents: Candidates available for selection, best first

        Returns:
            Iterator that yields selected parents for mutation
        """


class CyclicParentSelector(ParentSelector):
    """Walks the elites in rank order, wrapping around as often as needed."""

    def create_parent_iterator(self, available_parents: list[T]) -> Iterator[list[T]]:
        """Yields single-parent selections forever (consumer controls limit)."""
        if not available_parents:
            return
        for parent in cycle(available_parents):
            yield [parent]

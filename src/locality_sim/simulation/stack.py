"""
LRU stack for exact reuse (stack) distances.

Classic Mattson stack over a singly linked list: ``touch`` walks from
the top until it finds the key, splices it out and pushes it back on
top. The walk depth is the reuse distance.
"""

from typing import Hashable, Iterator, List, Optional

COLD_MISS = -1


class _ListNode:
    __slots__ = ("value", "next")

    def __init__(self, value: Hashable, next: Optional["_ListNode"] = None):
        self.value = value
        self.next = next


class LinkedStack:
    """Singly linked stack; the head is the top."""

    def __init__(self):
        self.top: Optional[_ListNode] = None
        self._size = 0

    def push(self, value: Hashable) -> None:
        self.top = _ListNode(value, self.top)
        self._size += 1

    def pop(self) -> Hashable:
        if self.top is None:
            raise IndexError("pop from empty stack")
        node = self.top
        self.top = node.next
        self._size -= 1
        return node.value

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Hashable]:
        node = self.top
        while node is not None:
            yield node.value
            node = node.next

    def to_list(self) -> List[Hashable]:
        """Contents from top to bottom."""
        return list(self)


class AccessStack(LinkedStack):
    """
    LRU stack returning reuse distances.

    Example:
        >>> stack = AccessStack()
        >>> [stack.touch(k) for k in "ABCABA"]
        [-1, -1, -1, 2, 2, 1]
        >>> stack.to_list()
        ['A', 'B', 'C']
    """

    def touch(self, key: Hashable) -> int:
        """
        Move a key to the top of the stack.

        Returns:
            The key's depth before the touch (top is 0), or
            ``COLD_MISS`` (-1) if it was not on the stack.
        """
        previous = None
        node = self.top
        depth = 0
        while node is not None:
            if node.value == key:
                if previous is not None:
                    previous.next = node.next
                    node.next = self.top
                    self.top = node
                return depth
            previous = node
            node = node.next
            depth += 1

        self.push(key)
        return COLD_MISS

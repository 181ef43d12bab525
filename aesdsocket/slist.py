"""Singly-linked list and singly-linked tail queue containers.

Membership is by identity: an object may appear at most once in a list,
and lookups (``next_of``, ``remove``, ``in``) match the very same object.
Iteration tolerates removal of the item just yielded.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional


class _Node:
    __slots__ = ("item", "next")

    def __init__(self, item: Any) -> None:
        self.item = item
        self.next: Optional[_Node] = None


class SList:
    """Singly-linked list: insert at head or after an item."""

    def __init__(self, items: Iterable[Any] = ()) -> None:
        self._reset()
        for item in items:
            self._append(item)

    def _reset(self) -> None:
        self._head: Optional[_Node] = None
        self._tail: Optional[_Node] = None
        self._nodes: dict[int, _Node] = {}

    def _node(self, item: Any) -> _Node:
        node = self._nodes.get(id(item))
        if node is None or node.item is not item:
            raise ValueError(f"{item!r} is not in the list")
        return node

    def _claim(self, item: Any) -> _Node:
        if self._holds(item):
            raise ValueError(f"{item!r} is already in the list")
        node = _Node(item)
        self._nodes[id(item)] = node
        return node

    def _holds(self, item: Any) -> bool:
        node = self._nodes.get(id(item))
        return node is not None and node.item is item

    def _append(self, item: Any) -> None:
        node = self._claim(item)
        if self._tail is None:
            self._head = node
        else:
            self._tail.next = node
        self._tail = node

    def _unlink_after(self, ref: _Node) -> Any:
        victim = ref.next
        if victim is None:
            raise IndexError("no element follows the reference item")
        ref.next = victim.next
        if self._tail is victim:
            self._tail = ref
        del self._nodes[id(victim.item)]
        return victim.item

    def _check_peer(self, other: Any) -> None:
        if type(other) is not type(self):
            raise TypeError(
                f"expected {type(self).__name__}, got {type(other).__name__}"
            )

    def first(self) -> Any:
        """Return the first item, or None when empty."""
        return self._head.item if self._head is not None else None

    def next_of(self, item: Any) -> Any:
        """Return the item following ``item``, or None if it is last."""
        following = self._node(item).next
        return following.item if following is not None else None

    def insert_head(self, item: Any) -> None:
        """Put ``item`` at the front."""
        node = self._claim(item)
        node.next = self._head
        self._head = node
        if self._tail is None:
            self._tail = node

    def insert_after(self, ref: Any, item: Any) -> None:
        """Put ``item`` directly after ``ref``."""
        ref_node = self._node(ref)
        node = self._claim(item)
        node.next = ref_node.next
        ref_node.next = node
        if self._tail is ref_node:
            self._tail = node

    def remove_head(self) -> Any:
        """Remove and return the first item."""
        node = self._head
        if node is None:
            raise IndexError("remove from empty list")
        self._head = node.next
        if self._head is None:
            self._tail = None
        del self._nodes[id(node.item)]
        return node.item

    def remove_after(self, ref: Any) -> Any:
        """Remove and return the item that follows ``ref``."""
        return self._unlink_after(self._node(ref))

    def remove(self, item: Any) -> None:
        """Remove ``item``; walks the list to find its predecessor."""
        node = self._node(item)
        if self._head is node:
            self.remove_head()
            return
        prev = self._head
        while prev is not None and prev.next is not node:
            prev = prev.next
        if prev is None:
            raise ValueError(f"{item!r} is not in the list")
        self._unlink_after(prev)

    def concat(self, other: "SList") -> None:
        """Move every item of ``other`` to the end of this list."""
        self._check_peer(other)
        if other is self:
            raise ValueError("cannot concatenate a list with itself")
        if any(self._holds(item) for item in other):
            raise ValueError("lists share items")
        if other._head is None:
            return
        if self._tail is None:
            self._head = other._head
        else:
            self._tail.next = other._head
        self._tail = other._tail
        self._nodes.update(other._nodes)
        other._reset()

    def swap(self, other: "SList") -> None:
        """Exchange contents with ``other``."""
        self._check_peer(other)
        self._head, other._head = other._head, self._head
        self._tail, other._tail = other._tail, self._tail
        self._nodes, other._nodes = other._nodes, self._nodes

    def clear(self) -> None:
        """Drop every item."""
        self._reset()

    def __iter__(self) -> Iterator[Any]:
        node = self._head
        while node is not None:
            following = node.next
            yield node.item
            node = following

    def __len__(self) -> int:
        return len(self._nodes)

    def __bool__(self) -> bool:
        return self._head is not None

    def __contains__(self, item: Any) -> bool:
        return self._holds(item)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"


class STailQ(SList):
    """Singly-linked tail queue: like SList with O(1) access to the tail."""

    def __init__(self, items: Iterable[Any] = ()) -> None:
        super().__init__(items)

    def first(self) -> Any:
        """Return the first item, or None when empty."""
        return super().first()

    def last(self) -> Any:
        """Return the last item, or None when empty."""
        return self._tail.item if self._tail is not None else None

    def next_of(self, item: Any) -> Any:
        """Return the item following ``item``, or None if it is last."""
        return super().next_of(item)

    def insert_head(self, item: Any) -> None:
        """Put ``item`` at the front."""
        super().insert_head(item)

    def insert_tail(self, item: Any) -> None:
        """Put ``item`` at the end."""
        self._append(item)

    def insert_after(self, ref: Any, item: Any) -> None:
        """Put ``item`` directly after ``ref``."""
        super().insert_after(ref, item)

    def remove_head(self) -> Any:
        """Remove and return the first item."""
        return super().remove_head()

    def remove_after(self, ref: Any) -> Any:
        """Remove and return the item that follows ``ref``."""
        return super().remove_after(ref)

    def remove(self, item: Any) -> None:
        """Remove ``item``; walks the queue to find its predecessor."""
        super().remove(item)

    def concat(self, other: "STailQ") -> None:
        """Move every item of ``other`` to the end of this queue."""
        super().concat(other)

    def swap(self, other: "STailQ") -> None:
        """Exchange contents with ``other``."""
        super().swap(other)

    def clear(self) -> None:
        """Drop every item."""
        super().clear()

    def __iter__(self) -> Iterator[Any]:
        return super().__iter__()

    def __len__(self) -> int:
        return super().__len__()

    def __bool__(self) -> bool:
        return super().__bool__()

    def __contains__(self, item: Any) -> bool:
        return super().__contains__(item)
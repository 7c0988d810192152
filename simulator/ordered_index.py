# simulator/ordered_index.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")


def _identity(v: Any) -> Any:
    return v


@dataclass
class AVLNode(Generic[T]):
    value: T
    height: int = 0
    balance: int = 0    # height(left) - height(right); empty subtree counts as -1
    left: Optional["AVLNode[T]"] = None
    right: Optional["AVLNode[T]"] = None


class AVLTree(Generic[T]):
    """
    Height-balanced binary search tree ordered by `key(value)`.

    Values with equal keys are treated as the same value, so the tree never holds
    two of them. Nodes carry no parent link; ancestor lookups re-descend from root.
    """

    def __init__(self, key: Callable[[T], Any] = _identity):
        self.key = key
        self.root: Optional[AVLNode[T]] = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self.root is not None

    def __iter__(self) -> Iterator[T]:
        stack: List[AVLNode[T]] = []
        node = self.root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node.value
            node = node.right

    def __contains__(self, value: T) -> bool:
        return self._find_node(value) is not None

    # ----------------- queries -----------------
    def find(self, value: T) -> Optional[T]:
        node = self._find_node(value)
        return None if node is None else node.value

    def find_min(self) -> Optional[T]:
        return self._min_value(self.root)

    def find_max(self) -> Optional[T]:
        return self._max_value(self.root)

    def predecessors_of(self, value: T) -> List[T]:
        """All stored values strictly less than `value`, ascending."""
        out: List[T] = []
        self._collect_less(self.root, self.key(value), out)
        return out

    def successor_of(self, value: T) -> Optional[T]:
        """Smallest stored value strictly greater than the stored copy of `value`."""
        node = self._find_node(value)
        if node is None:
            return None

        if node.right is not None:
            return self._min_value(node.right)

        # no right subtree: lowest ancestor we turned left at
        k = self.key(value)
        successor = None
        ancestor = self.root
        while ancestor is not node:
            ak = self.key(ancestor.value)
            if k < ak:
                successor = ancestor
                ancestor = ancestor.left
            else:
                ancestor = ancestor.right
        return None if successor is None else successor.value

    def between(self, low: Any, high: Any) -> List[T]:
        """Values whose key lies in [low, high], ascending."""
        out: List[T] = []
        self._collect_range(self.root, low, high, out)
        return out

    # ----------------- updates -----------------
    def insert(self, value: Optional[T]) -> bool:
        if value is None or self._find_node(value) is not None:
            return False
        self.root = self._insert(self.root, value)
        self._size += 1
        return True

    def remove(self, value: Optional[T]) -> bool:
        if value is None or self._find_node(value) is None:
            return False
        self.root = self._remove(self.root, self.key(value))
        self._size -= 1
        return True

    # ----------------- mechanics -----------------
    def _find_node(self, value: Optional[T]) -> Optional[AVLNode[T]]:
        if value is None:
            return None
        k = self.key(value)
        node = self.root
        while node is not None:
            nk = self.key(node.value)
            if k < nk:
                node = node.left
            elif k > nk:
                node = node.right
            else:
                return node
        return None

    @staticmethod
    def _min_value(node: Optional[AVLNode[T]]) -> Optional[T]:
        if node is None:
            return None
        while node.left is not None:
            node = node.left
        return node.value

    @staticmethod
    def _max_value(node: Optional[AVLNode[T]]) -> Optional[T]:
        if node is None:
            return None
        while node.right is not None:
            node = node.right
        return node.value

    def _collect_less(self, node: Optional[AVLNode[T]], k: Any, out: List[T]) -> None:
        if node is None:
            return
        self._collect_less(node.left, k, out)
        if self.key(node.value) < k:
            out.append(node.value)
            self._collect_less(node.right, k, out)

    def _collect_range(self, node: Optional[AVLNode[T]], low: Any, high: Any, out: List[T]) -> None:
        if node is None:
            return
        nk = self.key(node.value)
        if nk < low:
            self._collect_range(node.right, low, high, out)
        elif nk > high:
            self._collect_range(node.left, low, high, out)
        else:
            self._collect_range(node.left, low, high, out)
            out.append(node.value)
            self._collect_range(node.right, low, high, out)

    def _insert(self, node: Optional[AVLNode[T]], value: T) -> AVLNode[T]:
        if node is None:
            return AVLNode(value)

        if self.key(value) < self.key(node.value):
            node.left = self._insert(node.left, value)
        else:
            node.right = self._insert(node.right, value)

        self._update(node)
        return self._rebalance(node)

    def _remove(self, node: Optional[AVLNode[T]], k: Any) -> Optional[AVLNode[T]]:
        if node is None:
            return None

        nk = self.key(node.value)
        if k < nk:
            node.left = self._remove(node.left, k)
        elif k > nk:
            node.right = self._remove(node.right, k)
        else:
            if node.left is None:
                return node.right
            if node.right is None:
                return node.left
            # two children: take over the largest value of the left subtree
            node.value = self._max_value(node.left)
            node.left = self._remove(node.left, self.key(node.value))

        self._update(node)
        return self._rebalance(node)

    @staticmethod
    def _update(node: AVLNode[T]) -> None:
        lh = node.left.height if node.left is not None else -1
        rh = node.right.height if node.right is not None else -1
        node.height = 1 + max(lh, rh)
        node.balance = lh - rh

    def _rebalance(self, node: AVLNode[T]) -> AVLNode[T]:
        if node.balance == 2:
            if node.left.balance < 0:
                node.left = self._rotate_left(node.left)
            return self._rotate_right(node)
        if node.balance == -2:
            if node.right.balance > 0:
                node.right = self._rotate_right(node.right)
            return self._rotate_left(node)
        return node

    def _rotate_right(self, node: AVLNode[T]) -> AVLNode[T]:
        pivot = node.left
        node.left = pivot.right
        pivot.right = node
        self._update(node)
        self._update(pivot)
        return pivot

    def _rotate_left(self, node: AVLNode[T]) -> AVLNode[T]:
        pivot = node.right
        node.right = pivot.left
        pivot.left = node
        self._update(node)
        self._update(pivot)
        return pivot

from __future__ import annotations

import heapq
import itertools
from typing import Iterable, List

from huffman_errors import UnderflowError


class MinHeap:
    """
    Binary min-heap of tree nodes keyed by `node.weight`.

    Entries are stored as (weight, order, node); `order` is the insertion sequence number,
    so equal weights come out first-in first-out and the tree built on top is reproducible.
    """

    def __init__(self):
        self._entries = []
        self._order = itertools.count()

    @classmethod
    def build(cls, nodes: Iterable) -> MinHeap: # O(n) heapify from an arbitrary sequence
        heap = cls()
        heap._entries = [(node.weight, next(heap._order), node) for node in nodes]
        heapq.heapify(heap._entries)
        return heap

    def insert(self, node) -> None:
        heapq.heappush(self._entries, (node.weight, next(self._order), node))

    def extract_min(self):
        if not self._entries:
            raise UnderflowError("extract_min from empty heap")
        return heapq.heappop(self._entries)[2]

    def peek(self):
        if not self._entries:
            raise UnderflowError("peek at empty heap")
        return self._entries[0][2]

    def is_empty(self) -> bool:
        return not self._entries

    def weights(self) -> List[float]: # array order, index i has children 2i+1 and 2i+2
        return [weight for weight, _, _ in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

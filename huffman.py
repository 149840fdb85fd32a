from __future__ import annotations

import logging
import weakref
from typing import Dict, Iterable, Optional, Union

from bitbuffer import BitBuffer
from frequency import FrequencyEntry
from huffman_errors import ArgumentError, FormatError, KeyNotFoundError
from minheap import MinHeap

logger = logging.getLogger(__name__)

LEFT = True # side bit of a parent's first (lighter) child
RIGHT = False
SINGLE_SYMBOL_BIT = LEFT # code of the lone symbol in a one-entry table


class HuffmanNode: # shared part of Leaf and Internal
    def __init__(self, weight):
        self.weight = weight
        self.side: Optional[bool] = None # None until placed under a parent
        self._parent = None # weakref.ref, the parent owns us and not the other way round

    @property
    def parent(self) -> Optional[Internal]:
        return self._parent() if self._parent is not None else None

    @parent.setter
    def parent(self, node: Optional[Internal]) -> None:
        self._parent = weakref.ref(node) if node is not None else None


class Leaf(HuffmanNode):
    def __init__(self, symbol: str, weight):
        super().__init__(weight)
        self.symbol = symbol

    def __repr__(self):
        return f"Leaf({self.symbol!r}, {self.weight})"


class Internal(HuffmanNode):
    def __init__(self, left: HuffmanNode, right: HuffmanNode):
        super().__init__(left.weight + right.weight)
        self.left = left
        self.right = right
        left.parent = self
        right.parent = self
        left.side = LEFT
        right.side = RIGHT

    def __repr__(self):
        return f"Internal({self.weight}, left={self.left!r}, right={self.right!r})"


Node = Union[Leaf, Internal]


class HuffmanTree:
    def __init__(self, root: Node, leaves: Dict[str, Leaf]):
        self.root = root
        self.leaves = leaves # symbol -> leaf, entry points for encode

    def __len__(self): # number of symbols
        return len(self.leaves)


def build_huffman_tree(frequencies: Iterable[FrequencyEntry]) -> HuffmanTree:
    """
    Greedy construction: keep merging the two lightest nodes until one is left.
    The first node extracted becomes the left child (side bit True), the second the right.
    """
    leaves: Dict[str, Leaf] = {}
    for entry in frequencies:
        leaves[entry.symbol] = Leaf(entry.symbol, entry.weight) # later duplicates win
    if not leaves:
        raise ArgumentError("cannot build a Huffman tree from an empty frequency table")

    priority_queue = MinHeap.build(leaves.values())
    root = None
    while len(priority_queue) > 1:
        left = priority_queue.extract_min()
        right = priority_queue.extract_min()
        root = Internal(left, right)
        if not priority_queue.is_empty():
            priority_queue.insert(root)

    if root is None: # one symbol, the leaf is the whole tree
        root = priority_queue.extract_min()

    logger.debug("built Huffman tree over %d symbols, total weight %s", len(leaves), root.weight)
    return HuffmanTree(root, leaves)


def decode(root: Node, bits: BitBuffer) -> str:
    """
    Walk from `root` popping one bit per internal node, True goes left and False right.
    UnderflowError from the buffer propagates when the bits end before a leaf.
    """
    if isinstance(root, Leaf):
        if bits.pop() != SINGLE_SYMBOL_BIT:
            raise FormatError(f"invalid code bit for single-symbol tree {root.symbol!r}")
        return root.symbol

    node = root
    while isinstance(node, Internal):
        node = node.left if bits.pop() else node.right
    return node.symbol


def _path_to(node: Node) -> BitBuffer:
    # root-to-node bits, collected leaf-upwards then reversed; a loop since trees can be very deep
    if node.parent is None and isinstance(node, Leaf):
        return BitBuffer([SINGLE_SYMBOL_BIT])
    sides = []
    while node.parent is not None:
        sides.append(node.side)
        node = node.parent
    return BitBuffer(reversed(sides))


def encode(symbol: str, tree: HuffmanTree) -> BitBuffer:
    leaf = tree.leaves.get(symbol)
    if leaf is None:
        raise KeyNotFoundError(f"symbol {symbol!r} is not in the frequency table")
    return _path_to(leaf)


def generate_codes(tree: HuffmanTree) -> Dict[str, BitBuffer]: # the encoding dictionary, symbol -> code
    return {symbol: encode(symbol, tree) for symbol in tree.leaves}


def iter_nodes(root: Node):
    """Pre-order traversal over every node of the tree."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, Internal):
            stack.append(node.right)
            stack.append(node.left)

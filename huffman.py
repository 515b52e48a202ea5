import heapq
from typing import Dict, List, Optional, Tuple

from codebook import (
    TooFewSymbols,
    validate_codebook,
    validate_frequencies,
)


class TraceUnavailable(RuntimeError):
    """Raised when a merge trace is requested from a model built from a codebook."""


class HuffmanNode: # Node for a prefix code tree
    def __init__(self, symbol=None, frequency=0, left=None, right=None):
        self.symbol = symbol    # str, or None for internal nodes and unlabeled placeholders
        self.frequency = frequency
        self.left = left
        self.right = right
        self.parent = None
        if left is not None and right is not None: # internal node: frequency is the sum of its children
            left.parent = self
            right.parent = self
            self.frequency = left.frequency + right.frequency

    def __lt__(self, other):
        return compare_trees(self, other) < 0 # allows heapq to use the total order below

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode({self.symbol!r}, {self.frequency})"
        return f"HuffmanNode(<internal>, {self.frequency})"

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    @property
    def is_labeled(self) -> bool:
        return self.symbol is not None

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def depth(self) -> int:
        """Length of the longest path from this node down to a leaf (0 for a leaf)."""
        deepest = 0
        stack = [(self, 0)]
        while stack:
            node, level = stack.pop()
            if node.is_leaf:
                deepest = max(deepest, level)
            else:
                stack.append((node.left, level + 1))
                stack.append((node.right, level + 1))
        return deepest

    def codeword(self) -> str:
        bits = []
        walk = self
        while walk.parent is not None: # walk up to the root, recording the side we came from
            bits.append('0' if walk is walk.parent.left else '1')
            walk = walk.parent
        bits.reverse()
        return ''.join(bits)

    def leaves(self):
        """Yield the leaves of this subtree from left to right."""
        stack = [self]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                yield node
            else:
                stack.append(node.right)
                stack.append(node.left)

    def symbols(self) -> List[str]:
        return [leaf.symbol for leaf in self.leaves() if leaf.symbol is not None]


def compare_trees(a, b) -> int:
    """
    Total order over subtrees: frequency first, then left subtrees, then right
    subtrees (a missing child sorts before a present one), then symbol.
    Returns -1, 0 or +1.
    """
    if a.frequency != b.frequency:
        return -1 if a.frequency < b.frequency else 1

    left_cmp = _compare_optional(a.left, b.left)
    if left_cmp != 0:
        return left_cmp
    right_cmp = _compare_optional(a.right, b.right)
    if right_cmp != 0:
        return right_cmp

    sym_a = a.symbol or ""
    sym_b = b.symbol or ""
    if sym_a == sym_b:
        return 0
    return -1 if sym_a < sym_b else 1


def _compare_optional(a, b) -> int:
    if a is None:
        return 0 if b is None else -1
    if b is None:
        return 1
    return compare_trees(a, b)


def build_huffman_tree(frequency_table, trace=None, merges=None): # frequency_table: ordered dict of symbol -> frequency
    if len(frequency_table) < 2:
        raise TooFewSymbols(
            "At least two symbols are needed to build a code",
            tuple(frequency_table),
        )

    leaves = {}
    priority_queue = []
    for symbol, frequency in frequency_table.items():
        leaf = HuffmanNode(symbol, frequency)
        leaves[symbol] = leaf
        priority_queue.append(leaf)
    heapq.heapify(priority_queue)

    # Build the tree
    while len(priority_queue) > 1:
        if trace is not None:
            trace.append(sorted(priority_queue)) # frontier before this merge, ascending
        smallest = heapq.heappop(priority_queue)
        second = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(left=second, right=smallest) # second-smallest always goes on the left
        heapq.heappush(priority_queue, merged_node)
        if merges is not None:
            merges.append(merged_node)

    root = priority_queue[0]
    if trace is not None:
        trace.append([root])
    return root, leaves


def generate_huffman_codes(leaves): # leaves: ordered dict of symbol -> leaf node
    return {symbol: leaf.codeword() for symbol, leaf in leaves.items()}


def build_code_tree(codebook): # codebook: ordered dict of symbol -> codeword, already prefix-free
    root = HuffmanNode()
    leaves = {}
    for symbol, codeword in codebook.items():
        walk = root
        for bit in codeword:
            if walk.is_leaf: # split the placeholder into two fresh placeholders
                walk.left = HuffmanNode()
                walk.right = HuffmanNode()
                walk.left.parent = walk
                walk.right.parent = walk
            walk = walk.left if bit == '0' else walk.right
        walk.symbol = symbol
        leaves[symbol] = walk
    return root, leaves


def huffman_encode(symbols, code_map) -> str: # symbols: iterable of symbols, code_map: dict of symbol -> codeword
    return ''.join(code_map[symbol] for symbol in symbols)


def huffman_decode(bitstring: str, root) -> List[str]: # bitstring: string of '0's and '1's, root: root of the code tree
    decoded = []
    current_node = root
    for bit in bitstring:
        if bit == '0':
            current_node = current_node.left
        elif bit == '1':
            current_node = current_node.right
        else:
            raise ValueError(f"Encoded text may only contain 0's and 1's, found {bit!r}")
        if current_node is None or (current_node.is_leaf and current_node.symbol is None):
            raise ValueError("Encoded text does not follow any codeword")
        if current_node.is_leaf: # reached a symbol
            decoded.append(current_node.symbol)
            current_node = root
    return decoded


class HuffmanModel:
    """
    The data behind a single prefix code: its codebook, the tree, and, when
    built from frequencies, those frequencies plus the trace of every merge.

    Use one of the ``from_*`` constructors; each validates its input before any
    node is created, so a failed build never yields a partial model.
    """

    def __init__(self, root, leaves, codebook, frequencies=None, trace=None, merges=None):
        self.root = root
        self._leaves = leaves
        self._codebook = dict(codebook)
        self._frequencies = dict(frequencies) if frequencies is not None else None
        self._trace = trace
        self._merges = merges

    @classmethod
    def from_frequencies(cls, frequencies: Dict[str, int]) -> "HuffmanModel":
        frequencies = validate_frequencies(frequencies)
        trace: List[List[HuffmanNode]] = []
        merges: List[HuffmanNode] = []
        root, leaves = build_huffman_tree(frequencies, trace=trace, merges=merges)
        codebook = generate_huffman_codes(leaves)
        return cls(root, leaves, codebook, frequencies, trace, merges)

    @classmethod
    def from_codebook(cls, codebook: Dict[str, str]) -> "HuffmanModel":
        codebook = validate_codebook(codebook)
        root, leaves = build_code_tree(codebook)
        return cls(root, leaves, codebook)

    @classmethod
    def from_text(cls, raw: str) -> "HuffmanModel":
        """Build the optimal code for the character frequencies of a sample text."""
        return cls.from_frequencies(frequencies_from_text(raw))

    def __len__(self):
        return len(self._codebook)

    def __contains__(self, symbol):
        return symbol in self._codebook

    @property
    def codebook(self) -> Dict[str, str]:
        return dict(self._codebook)

    @property
    def frequencies(self) -> Optional[Dict[str, int]]:
        if self._frequencies is None:
            return None
        return dict(self._frequencies)

    @property
    def has_frequency_data(self) -> bool:
        return self._frequencies is not None

    @property
    def num_steps(self) -> int:
        return len(self._trace) if self._trace is not None else 0

    def leaf(self, symbol) -> Optional[HuffmanNode]:
        return self._leaves.get(symbol)

    def trace_at(self, step: int) -> List[HuffmanNode]:
        """
        Subtrees in the frontier after ``step`` merges, from highest to lowest
        in the merge order. ``trace_at(len(model) - 1)`` is ``[root]``.
        """
        self._require_trace()
        if not 0 <= step < len(self._trace):
            raise IndexError(f"trace step {step} out of range 0..{len(self._trace) - 1}")
        return list(reversed(self._trace[step]))

    def merge_at(self, step: int) -> HuffmanNode:
        """The subtree created by merge number ``step``."""
        self._require_trace()
        if not 0 <= step < len(self._merges):
            raise IndexError(f"merge step {step} out of range 0..{len(self._merges) - 1}")
        return self._merges[step]

    def _require_trace(self):
        if self._trace is None:
            raise TraceUnavailable("Model was built from a codebook and has no frequency data")

    def unused_codewords(self) -> List[str]:
        """Codewords of tree slots that no symbol of an incomplete codebook claims."""
        return [leaf.codeword() for leaf in self.root.leaves() if leaf.symbol is None]

    @property
    def is_complete(self) -> bool:
        return not self.unused_codewords()

    def total_bits(self) -> int:
        self._require_trace()
        return sum(self._frequencies[s] * len(code) for s, code in self._codebook.items())

    def average_length(self) -> float:
        total = sum(self._frequencies.values()) if self._frequencies else 0
        return self.total_bits() / total

    def encode(self, symbols) -> str:
        return huffman_encode(symbols, self._codebook)

    def decode(self, bitstring: str) -> List[str]:
        return huffman_decode(bitstring, self.root)


def frequencies_from_text(raw: str) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for ch in raw:
        counts[ch] = counts.get(ch, 0) + 1
    return {ch: counts[ch] for ch in sorted(counts)}


def symbols_of(trees) -> List[Tuple[int, List[str]]]:
    """(frequency, symbols) for each subtree, as used by trace dumps."""
    return [(tree.frequency, tree.symbols()) for tree in trees]

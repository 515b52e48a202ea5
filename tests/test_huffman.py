from fractions import Fraction

import pytest

from codebook import (
    AmbiguousCodebook,
    EmptyInput,
    IllegalCodeword,
    NonPositiveFrequency,
    TooFewSymbols,
)
from huffman import (
    HuffmanModel,
    HuffmanNode,
    TraceUnavailable,
    build_huffman_tree,
    compare_trees,
    frequencies_from_text,
    generate_huffman_codes,
    huffman_decode,
)

EXAMPLE = {"a": 25, "b": 76, "e": 135}


def internal_nodes(root):
    stack = [root]
    while stack:
        node = stack.pop()
        if not node.is_leaf:
            yield node
            stack.extend([node.left, node.right])


def test_example_codebook_follows_merge_convention():
    model = HuffmanModel.from_frequencies(EXAMPLE)
    assert model.codebook == {"a": "11", "b": "10", "e": "0"}
    assert list(model.codebook) == ["a", "b", "e"]


def test_example_merges_two_smallest_first():
    model = HuffmanModel.from_frequencies(EXAMPLE)
    first = model.merge_at(0)
    assert first.left.symbol == "b"
    assert first.right.symbol == "a"
    assert first.frequency == 101

    second = model.merge_at(1)
    assert second is model.root
    assert second.left.symbol == "e"
    assert second.right is first


def test_example_trace_snapshots():
    model = HuffmanModel.from_frequencies(EXAMPLE)
    assert model.num_steps == 3
    assert [t.frequency for t in model.trace_at(0)] == [135, 76, 25]
    assert [t.symbol for t in model.trace_at(0)] == ["e", "b", "a"]
    assert [t.frequency for t in model.trace_at(1)] == [135, 101]
    assert model.trace_at(2) == [model.root]
    assert model.root.frequency == 236


def test_trace_out_of_range():
    model = HuffmanModel.from_frequencies(EXAMPLE)
    with pytest.raises(IndexError):
        model.trace_at(3)
    with pytest.raises(IndexError):
        model.merge_at(2)


def test_ties_broken_by_shape_then_symbol():
    model = HuffmanModel.from_frequencies({"x": 1, "y": 1, "z": 1, "w": 1})
    assert model.codebook == {"x": "10", "y": "01", "z": "00", "w": "11"}


def test_insertion_order_does_not_change_codewords(rng, make_frequencies):
    for _ in range(20):
        freqs = make_frequencies()
        items = list(freqs.items())
        rng.shuffle(items)
        a = HuffmanModel.from_frequencies(freqs).codebook
        b = HuffmanModel.from_frequencies(dict(items)).codebook
        assert a == b
        assert list(b) == [s for s, _ in items]


def test_trace_is_reproducible():
    freqs = {"a": 3, "b": 3, "c": 3, "d": 5, "e": 8, "f": 1}
    first = HuffmanModel.from_frequencies(freqs)
    second = HuffmanModel.from_frequencies(freqs)
    for step in range(first.num_steps):
        left = [(t.frequency, t.symbols()) for t in first.trace_at(step)]
        right = [(t.frequency, t.symbols()) for t in second.trace_at(step)]
        assert left == right


def test_trace_shrinks_by_one_per_merge(make_frequencies):
    freqs = make_frequencies()
    model = HuffmanModel.from_frequencies(freqs)
    assert model.num_steps == len(freqs)
    for step in range(model.num_steps):
        frontier = model.trace_at(step)
        assert len(frontier) == len(freqs) - step
        assert sum(t.frequency for t in frontier) == sum(freqs.values())
        assert all(compare_trees(frontier[i + 1], frontier[i]) < 0 for i in range(len(frontier) - 1))


def test_round_trip(rng, make_frequencies):
    for _ in range(30):
        freqs = make_frequencies()
        model = HuffmanModel.from_frequencies(freqs)
        message = [rng.choice(list(freqs)) for _ in range(rng.randint(0, 60))]
        assert model.decode(model.encode(message)) == message


def test_codes_are_prefix_free_and_complete(make_frequencies):
    for _ in range(20):
        model = HuffmanModel.from_frequencies(make_frequencies())
        codes = list(model.codebook.values())
        for i, c in enumerate(codes):
            for j, d in enumerate(codes):
                if i != j:
                    assert not d.startswith(c)
        assert sum(Fraction(1, 2 ** len(c)) for c in codes) == 1
        assert all(n.left is not None and n.right is not None for n in internal_nodes(model.root))


def test_total_and_average_length():
    model = HuffmanModel.from_frequencies(EXAMPLE)
    assert model.total_bits() == 25 * 2 + 76 * 2 + 135
    assert model.average_length() == pytest.approx(337 / 236)


def test_navigation():
    model = HuffmanModel.from_frequencies(EXAMPLE)
    leaf = model.leaf("a")
    assert leaf.is_leaf and leaf.is_labeled
    assert leaf.frequency == 25
    assert leaf.depth() == 0
    assert leaf.parent.parent is model.root
    assert model.root.is_root
    assert model.root.depth() == 2
    assert model.root.symbol is None
    assert leaf.codeword() == "11"
    assert model.leaf("q") is None
    assert "a" in model and "q" not in model
    assert len(model) == 3


def test_frequency_validation():
    with pytest.raises(EmptyInput):
        HuffmanModel.from_frequencies({})
    with pytest.raises(TooFewSymbols):
        HuffmanModel.from_frequencies({"a": 4})
    with pytest.raises(NonPositiveFrequency):
        HuffmanModel.from_frequencies({"a": 0, "b": 1})
    with pytest.raises(NonPositiveFrequency):
        HuffmanModel.from_frequencies({"a": -3, "b": 2})


def test_build_tree_rejects_single_symbol():
    with pytest.raises(TooFewSymbols):
        build_huffman_tree({"a": 1})


def test_generate_codes_matches_leaf_order():
    root, leaves = build_huffman_tree({"e": 135, "a": 25, "b": 76})
    assert list(generate_huffman_codes(leaves).items()) == [("e", "0"), ("a", "11"), ("b", "10")]
    assert root.frequency == 236


def test_from_text_counts_characters():
    model = HuffmanModel.from_text("abracadabra")
    assert model.frequencies == {"a": 5, "b": 2, "c": 1, "d": 1, "r": 2}
    assert "".join(model.decode(model.encode("abracadabra"))) == "abracadabra"
    assert frequencies_from_text("ba a") == {" ": 1, "a": 2, "b": 1}


def test_codebook_model_round_trip():
    codes = {"a": "0", "b": "10", "c": "11"}
    model = HuffmanModel.from_codebook(codes)
    assert model.codebook == codes
    assert not model.has_frequency_data
    assert model.frequencies is None
    assert model.num_steps == 0
    assert model.root.frequency == 0
    assert model.leaf("b").codeword() == "10"
    assert model.is_complete


def test_codebook_model_has_no_trace():
    model = HuffmanModel.from_codebook({"a": "0", "b": "1"})
    with pytest.raises(TraceUnavailable):
        model.trace_at(0)
    with pytest.raises(TraceUnavailable):
        model.merge_at(0)
    with pytest.raises(TraceUnavailable):
        model.total_bits()


def test_incomplete_codebook_keeps_tree_full():
    model = HuffmanModel.from_codebook({"a": "00", "b": "1"})
    assert model.codebook == {"a": "00", "b": "1"}
    assert model.unused_codewords() == ["01"]
    assert not model.is_complete
    assert all(n.left is not None and n.right is not None for n in internal_nodes(model.root))
    with pytest.raises(ValueError):
        model.decode("01")


def test_rebuilding_codebooks_from_subsets(rng, make_frequencies):
    for _ in range(20):
        full = HuffmanModel.from_frequencies(make_frequencies()).codebook
        items = rng.sample(list(full.items()), rng.randint(1, len(full)))
        codes = dict(items)
        model = HuffmanModel.from_codebook(codes)
        assert model.codebook == codes
        for symbol, code in codes.items():
            assert model.leaf(symbol).codeword() == code


def test_invalid_codebooks_rejected():
    with pytest.raises(AmbiguousCodebook):
        HuffmanModel.from_codebook({"a": "0", "b": "01"})
    with pytest.raises(IllegalCodeword):
        HuffmanModel.from_codebook({"a": "2"})


def test_compare_trees_total_order():
    leaf = HuffmanNode("a", 2)
    other = HuffmanNode("b", 2)
    internal = HuffmanNode(left=HuffmanNode("c", 1), right=HuffmanNode("d", 1))
    assert compare_trees(leaf, other) == -1
    assert compare_trees(other, leaf) == 1
    assert compare_trees(leaf, leaf) == 0
    assert compare_trees(leaf, internal) == -1
    assert compare_trees(internal, leaf) == 1
    assert compare_trees(HuffmanNode("z", 1), leaf) == -1
    assert leaf < internal


def test_decode_rejects_non_binary_digits():
    model = HuffmanModel.from_frequencies(EXAMPLE)
    with pytest.raises(ValueError):
        huffman_decode("0120", model.root)


def test_decode_ignores_trailing_partial_codeword():
    model = HuffmanModel.from_frequencies(EXAMPLE)
    assert model.decode("0111") == ["e", "a"]


def test_depth_of_very_deep_tree():
    model = HuffmanModel.from_codebook({"a": "0" * 1100, "b": "1"})
    assert model.root.depth() == 1100
    assert model.leaf("a").codeword() == "0" * 1100
    assert model.leaf("b").depth() == 0

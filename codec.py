"""
Stepwise encoding/decoding over a plaintext/bitstring pair.

A ``CodecFrame`` is the immutable result of re-scanning the driving text
(plaintext when encoding, bits when decoding) against a codebook. A
``Position`` is the pair (symbol index, bit index). ``transition`` moves a
position one step; ``CodecCursor`` bundles both for a front end and renders
``CursorView`` snapshots for highlighting.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple

from codebook import printable_symbol, validate_codebook

PALETTE: Tuple[str, ...] = ("#1e90ff", "#ff8c00")  # dodger blue, dark orange

OPERATIONS = ("reset", "advance", "retreat", "seek_end")


class Mode(enum.Enum):
    ENCODING = "encode"
    DECODING = "decode"


class Position(NamedTuple):
    symbol_index: int
    bit_index: int


START = Position(0, 0)


@dataclass(frozen=True)
class CodecFrame:
    mode: Mode
    plain_text: str
    encoded_text: str
    ending_bits: Tuple[int, ...]    # ending_bits[i] is the index of the last bit of symbol i
    symbols: Tuple[str, ...]        # one entry per plaintext symbol; a decoded symbol may span several characters
    error_position: Optional[int] = None  # plaintext index (encoding) or bit index (decoding)

    def segment_start(self, symbol_index: int) -> int:
        return 0 if symbol_index == 0 else 1 + self.ending_bits[symbol_index - 1]


@dataclass(frozen=True)
class Segment:
    symbol_index: int
    symbol: Optional[str]
    bit_start: int
    bit_end: int        # exclusive
    color: str
    partial: bool = False


@dataclass
class CursorView:
    consumed_plain: str
    consumed_encoded: str
    symbol_index: int
    bit_index: int
    segments: List[Segment] = field(default_factory=list)
    active_segment: Optional[Segment] = None
    status: str = ""
    error_at: Optional[int] = None
    stop: bool = False

    @property
    def position(self) -> Position:
        return Position(self.symbol_index, self.bit_index)


def color_for(symbol_index: int) -> str:
    return PALETTE[symbol_index % len(PALETTE)]


def frame_from_plain(plain_text: str, codebook: Mapping[str, str]) -> CodecFrame:
    """Encode ``plain_text`` one character at a time, stopping at the first unknown character."""
    bits: List[str] = []
    ending_bits: List[int] = []
    num_bits = 0
    error_position = None
    for j, ch in enumerate(plain_text):
        code = codebook.get(ch)
        if code is None:
            error_position = j
            break
        bits.append(code)
        num_bits += len(code)
        ending_bits.append(num_bits - 1)
    return CodecFrame(
        Mode.ENCODING, plain_text, "".join(bits), tuple(ending_bits), tuple(plain_text), error_position
    )


def _prefixes(codebook: Mapping[str, str]) -> set:
    return {code[:k] for code in codebook.values() for k in range(1, len(code))}


def frame_from_encoded(encoded_text: str, codebook: Mapping[str, str]) -> CodecFrame:
    """
    Decode ``encoded_text`` bit by bit. Scanning stops at the first character
    that is not 0/1, or at the first bit after which the pending bits can no
    longer become a codeword; the text is cut just after that character.
    """
    lookup: Dict[str, str] = {code: symbol for symbol, code in codebook.items()}
    prefixes = _prefixes(codebook)
    symbols: List[str] = []
    ending_bits: List[int] = []
    codeword = ""
    error_position = None
    for j, ch in enumerate(encoded_text):
        if ch not in "01":
            error_position = j
            break
        codeword += ch
        symbol = lookup.get(codeword)
        if symbol is not None:
            symbols.append(symbol)
            ending_bits.append(j)
            codeword = ""
        elif codeword not in prefixes:
            error_position = j
            break
    if error_position is not None:
        encoded_text = encoded_text[:error_position + 1]
    return CodecFrame(
        Mode.DECODING, "".join(symbols), encoded_text, tuple(ending_bits), tuple(symbols), error_position
    )


def transition(frame: CodecFrame, position: Position, op: str) -> Tuple[Position, bool]:
    """
    Apply one cursor operation. Returns the new position and whether an
    ``advance`` reached the end, in which case auto-play must stop.
    """
    c, b = position
    n = len(frame.ending_bits)
    decoding = frame.mode is Mode.DECODING

    if op == "reset":
        return START, False

    if op == "seek_end":
        c = min(1 + n, len(frame.symbols))
        return Position(c, len(frame.encoded_text)), False

    if op == "advance":
        if decoding:
            if b < len(frame.encoded_text):
                if c < n and b == frame.ending_bits[c]:
                    c += 1
                b += 1
            return Position(c, b), b >= len(frame.encoded_text)
        last = min(len(frame.symbols), 1 + n)
        if c < last:
            c += 1
            if c <= n:
                b = 1 + frame.ending_bits[c - 1]
        return Position(c, b), c >= last

    if op == "retreat":
        if decoding:
            if b > 0:
                b -= 1
                if c > 0 and b == frame.ending_bits[c - 1]:
                    c -= 1
        elif c > 0:
            c -= 1
            b = frame.segment_start(c)
        return Position(c, b), False

    raise ValueError(f"unknown cursor operation: {op!r}")


def replay(frame: CodecFrame, steps: int) -> Position:
    """Position reached by ``steps`` advances from the start."""
    position = START
    for _ in range(steps):
        position, stop = transition(frame, position, "advance")
        if stop:
            break
    return position


def render(frame: CodecFrame, position: Position, stop: bool = False) -> CursorView:
    """Describe what is consumed, highlighted and reported at ``position``."""
    c, b = position
    n = len(frame.ending_bits)
    decoding = frame.mode is Mode.DECODING
    view = CursorView(
        consumed_plain="".join(frame.symbols[:c]),
        consumed_encoded=frame.encoded_text[:b],
        symbol_index=c,
        bit_index=b,
        stop=stop,
    )

    bad_last = False
    for j in range(c):
        if j >= n:
            ch = printable_symbol(frame.symbols[j])
            view.status = f"Character '{ch}' does not appear in the alphabet"
            view.error_at = j
            bad_last = True
        else:
            view.segments.append(
                Segment(j, frame.symbols[j], frame.segment_start(j), 1 + frame.ending_bits[j], color_for(j))
            )

    # leftover bits of a partially decoded codeword
    partial = False
    last_char_bit = 0
    if c <= n:
        last_char_bit = frame.segment_start(c)
        if b > last_char_bit:
            partial = True
            if frame.error_position is not None and b - 1 == frame.error_position:
                bad_last = True
                view.error_at = b - 1
                if frame.encoded_text[b - 1] in "01":
                    dead = frame.encoded_text[last_char_bit:b]
                    view.status = f"Code {dead} does not begin any codeword"
                else:
                    view.status = "Encoded text may only contain 0's and 1's"

    suffix = ""
    if partial:
        end = b - 1 if bad_last else b
        suffix = frame.encoded_text[last_char_bit:end]
        if suffix:
            view.active_segment = Segment(c, None, last_char_bit, end, color_for(c), partial=True)
            if not bad_last:
                view.status = f"Partial code {suffix} not yet complete"
    elif 0 < c <= n:
        suffix = frame.encoded_text[frame.segment_start(c - 1):1 + frame.ending_bits[c - 1]]
        view.active_segment = view.segments[-1]
        ch = printable_symbol(frame.symbols[c - 1])
        if decoding:
            view.status = f"Code {suffix} decoded as '{ch}'"
        else:
            view.status = f"Encoding '{ch}' as {suffix}"

    if not suffix and not bad_last:
        if not frame.plain_text and not frame.encoded_text:
            view.status = "Input plaintext or encoded text to begin"
        else:
            view.status = "Ready to decode" if decoding else "Ready to encode"
    return view


class CodecCursor:
    """
    Cursor over a plaintext/encoded pair for a fixed codebook.

    Editing either side (``set_plain_text`` / ``set_encoded_text``) rebuilds
    the whole frame from that side and returns to the start. Not thread safe;
    a timer driving ``advance`` must serialize its calls.
    """

    def __init__(self, codebook: Mapping[str, str], plain_text: str = ""):
        self._codebook = validate_codebook(codebook)
        self.stopped = False
        self._source = plain_text   # raw text of the driving side, before any truncation
        self._frame = frame_from_plain(plain_text, self._codebook)
        self._position = START

    @property
    def codebook(self) -> Dict[str, str]:
        return dict(self._codebook)

    @property
    def frame(self) -> CodecFrame:
        return self._frame

    @property
    def mode(self) -> Mode:
        return self._frame.mode

    @property
    def plain_text(self) -> str:
        return self._frame.plain_text

    @property
    def encoded_text(self) -> str:
        return self._frame.encoded_text

    @property
    def ending_bits(self) -> Tuple[int, ...]:
        return self._frame.ending_bits

    @property
    def error_position(self) -> Optional[int]:
        return self._frame.error_position

    @property
    def position(self) -> Position:
        return self._position

    def set_codebook(self, codebook: Mapping[str, str]) -> CursorView:
        self._codebook = validate_codebook(codebook)
        if self.mode is Mode.DECODING:
            return self.set_encoded_text(self._source)
        return self.set_plain_text(self._source)

    def set_plain_text(self, text: str) -> CursorView:
        self._source = text
        self._frame = frame_from_plain(text, self._codebook)
        return self.reset()

    def set_encoded_text(self, text: str) -> CursorView:
        self._source = text
        self._frame = frame_from_encoded(text, self._codebook)
        return self.reset()

    def _apply(self, op: str) -> CursorView:
        self._position, stop = transition(self._frame, self._position, op)
        self.stopped = stop
        return render(self._frame, self._position, stop)

    def reset(self) -> CursorView:
        return self._apply("reset")

    def advance(self) -> CursorView:
        return self._apply("advance")

    def retreat(self) -> CursorView:
        return self._apply("retreat")

    def seek_end(self) -> CursorView:
        return self._apply("seek_end")

    def view(self) -> CursorView:
        return render(self._frame, self._position, self.stopped)

"""
Parsing and validation of user supplied code data.

Input is given one entry per line, two columns separated by whitespace:

    a 25        (symbol, frequency)
    b 01        (symbol, codeword)

Blank lines are ignored. A line with a single token is read as the value for
the symbol " " (a space cannot be typed as a column of its own). Symbols may
be any distinct strings; the escapes \\s, \\n and \\t stand for space, newline
and tab.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, Mapping, Tuple, Union

_CODEWORD = re.compile(r"[01]+")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_ESCAPES = (("\\s", " "), ("\\n", "\n"), ("\\t", "\t"))


class CodeInputError(ValueError):
    """
    Base class for rejected input. ``message`` is suitable for showing to a
    user; ``tokens`` holds the offending token(s), if any.
    """

    def __init__(self, message: str, tokens: Tuple[str, ...] = ()):
        super().__init__(message)
        self.message = message
        self.tokens = tuple(tokens)


class MalformedEntry(CodeInputError):
    pass


class DuplicateKey(CodeInputError):
    pass


class EmptyInput(CodeInputError):
    pass


class NonPositiveFrequency(CodeInputError):
    pass


class IllegalCodeword(CodeInputError):
    pass


class AmbiguousCodebook(CodeInputError):
    pass


class TooFewSymbols(CodeInputError):
    pass


def printable_symbol(symbol: str) -> str:
    for escaped, raw in _ESCAPES:
        symbol = symbol.replace(raw, escaped)
    return symbol


def raw_symbol(symbol: str) -> str:
    for escaped, raw in _ESCAPES:
        symbol = symbol.replace(escaped, raw)
    return symbol


def parse_two_column(text: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    for line in text.splitlines():
        tokens = line.split()
        if not tokens:
            continue
        if len(tokens) > 2:
            raise MalformedEntry(f"Invalid line: {line}", (line,))

        if len(tokens) == 2:
            key, value = raw_symbol(tokens[0]), tokens[1]
        else:
            key, value = " ", tokens[0]

        if key in pairs:
            raise DuplicateKey(f"Duplicate key: {printable_symbol(key)}", (key,))
        pairs[key] = value

    if not pairs:
        raise EmptyInput("There must be at least one entry")
    return pairs


def parse_nonempty(text: str) -> str:
    if not text:
        raise EmptyInput("You must enter text to submit")
    return text


def _to_frequency(value: Union[str, int]) -> int:
    if isinstance(value, bool) or not _INTEGER.fullmatch(str(value)):
        raise NonPositiveFrequency(f"Illegal Frequency: {value}", (str(value),))
    frequency = int(value)
    if frequency <= 0:
        raise NonPositiveFrequency(f"Illegal Frequency: {value}", (str(value),))
    return frequency


def validate_frequencies(frequencies: Mapping[str, Union[str, int]]) -> Dict[str, int]:
    """Positive integer frequencies for at least two symbols, in the given order."""
    if not frequencies:
        raise EmptyInput("There must be at least one entry")
    result = {symbol: _to_frequency(value) for symbol, value in frequencies.items()}
    if len(result) < 2:
        raise TooFewSymbols("At least two symbols are needed to build a code", tuple(result))
    return result


def validate_codebook(pairs: Union[Mapping[str, str], Iterable[Tuple[str, str]]]) -> Dict[str, str]:
    """
    Check that every codeword is a non-empty 0/1 string and that no codeword
    is a prefix of another. Returns the accepted codebook in input order.
    """
    items = pairs.items() if isinstance(pairs, Mapping) else pairs
    result: Dict[str, str] = {}
    for symbol, code in items:
        if not isinstance(code, str) or not _CODEWORD.fullmatch(code):
            raise IllegalCodeword(f"Illegal Code: {code}", (str(code),))

        for other in result.values():
            if code.startswith(other) or other.startswith(code):
                raise AmbiguousCodebook(f"Ambiguous Codes: {code} {other}", (code, other))

        if symbol in result:
            raise DuplicateKey(f"Duplicate key: {printable_symbol(symbol)}", (symbol,))
        result[symbol] = code

    if not result:
        raise EmptyInput("There must be at least one entry")
    return result


def parse_frequencies(text: str) -> Dict[str, int]:
    return validate_frequencies(parse_two_column(text))


def parse_codebook(text: str) -> Dict[str, str]:
    return validate_codebook(parse_two_column(text))


def format_two_column(mapping: Mapping[str, object]) -> str:
    return "".join(f"{printable_symbol(key)} {value}\n" for key, value in mapping.items())

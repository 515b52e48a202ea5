# huffdemo.py

"""
Huffman coding demonstration: build a prefix code, replay its construction,
and step through encoding or decoding one codeword at a time.

Input (exactly one of):
  --freq FILE       two columns per line: symbol frequency
  --codebook FILE   two columns per line: symbol codeword
  --text FILE       sample text; frequencies are the character counts
  --sample TEXT     same as --text but given inline

Outputs:
  - the code table (symbol, codeword, frequency)
  - with --trace, the frontier before every merge
  - with --encode / --decode, one line per cursor step
  - with --outdir, codebook.csv, trace.csv and codeword_lengths.png

How to run:
  python huffdemo.py --freq freqs.txt --trace
  python huffdemo.py --sample "this is a test" --encode "a test" --outdir results
  python huffdemo.py --codebook code.txt --decode 0110100
"""

from __future__ import annotations

import argparse
import csv
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt

# Our implementations
import codebook as cb
from codec import CodecCursor, CursorView, Mode
from huffman import HuffmanModel


# Utilities

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")

def load_model(args: argparse.Namespace) -> HuffmanModel:
    if args.freq:
        return HuffmanModel.from_frequencies(cb.parse_frequencies(read_text(args.freq)))
    if args.codebook:
        return HuffmanModel.from_codebook(cb.parse_codebook(read_text(args.codebook)))
    if args.text:
        return HuffmanModel.from_text(cb.parse_nonempty(read_text(args.text)))
    return HuffmanModel.from_text(cb.parse_nonempty(args.sample))


# Rows

@dataclass
class CodeRow:
    symbol: str
    codeword: str
    length: int
    frequency: int  # 0 when the model has no frequency data


@dataclass
class TraceRow:
    step: int
    rank: int       # 0 = highest in the frontier
    frequency: int
    symbols: str


def code_rows(model: HuffmanModel) -> List[CodeRow]:
    freqs = model.frequencies or {}
    return [
        CodeRow(
            symbol=cb.printable_symbol(symbol),
            codeword=code,
            length=len(code),
            frequency=freqs.get(symbol, 0),
        )
        for symbol, code in model.codebook.items()
    ]

def trace_rows(model: HuffmanModel) -> List[TraceRow]:
    rows: List[TraceRow] = []
    for step in range(model.num_steps):
        for rank, tree in enumerate(model.trace_at(step)):
            rows.append(TraceRow(
                step=step,
                rank=rank,
                frequency=tree.frequency,
                symbols=" ".join(cb.printable_symbol(s) for s in tree.symbols()),
            ))
    return rows


def write_csv(path: Path, rows: list, row_type) -> None:
    fields = list(row_type.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


# Printing

def print_table(model: HuffmanModel) -> None:
    rows = code_rows(model)
    width = max(6, max(len(r.symbol) for r in rows))
    code_width = max(8, max(r.length for r in rows))
    header = f"{'symbol':<{width}}  {'codeword':<{code_width}}"
    if model.has_frequency_data:
        header += "  frequency"
    print(header)
    for r in rows:
        line = f"{r.symbol:<{width}}  {r.codeword:<{code_width}}"
        if model.has_frequency_data:
            line += f"  {r.frequency}"
        print(line)

    if model.has_frequency_data:
        print(f"Total bits: {model.total_bits()}  (average {model.average_length():.3f} bits/symbol)")
    unused = model.unused_codewords()
    if unused:
        print("Unused codewords:", " ".join(unused))


def print_trace(model: HuffmanModel) -> None:
    for step in range(model.num_steps):
        frontier = model.trace_at(step)
        parts = []
        for tree in frontier:
            label = "".join(cb.printable_symbol(s) for s in tree.symbols())
            parts.append(f"{label}:{tree.frequency}")
        print(f"step {step}: " + "  ".join(parts))
        if step < model.num_steps - 1:
            merged = model.merge_at(step)
            print(f"  merge -> {merged.frequency} (left {merged.left.frequency}, right {merged.right.frequency})")


def print_alignment(cursor: CodecCursor) -> None:
    """Plaintext characters over their codewords, with any leftover bits at the end."""
    frame = cursor.frame
    first = ""
    second = ""
    for j, ch in enumerate(frame.plain_text):
        raw = cb.printable_symbol(ch)
        code = ""
        if j < len(frame.ending_bits):
            code = frame.encoded_text[frame.segment_start(j):1 + frame.ending_bits[j]]
        width = 1 + max(len(raw), len(code))
        first += raw.ljust(width)
        second += code.ljust(width)

    stop = 1 + frame.ending_bits[-1] if frame.ending_bits else 0
    second += frame.encoded_text[stop:]
    print("Plain: " + first)
    print("Coded: " + second)


def describe(view: CursorView) -> str:
    line = f"[{view.symbol_index:>3},{view.bit_index:>4}] {view.consumed_plain!r:<20} {view.consumed_encoded:<24} {view.status}"
    if view.error_at is not None:
        line += f"  (error at {view.error_at})"
    return line


def run_cursor(cursor: CodecCursor, verbose: bool) -> None:
    verb = "Encoding" if cursor.mode is Mode.ENCODING else "Decoding"
    print(f"{verb}: {cursor.plain_text if cursor.mode is Mode.ENCODING else cursor.encoded_text}")
    if verbose:
        print_alignment(cursor)
    print(describe(cursor.view()))
    while True:
        view = cursor.advance()
        print(describe(view))
        if view.stop:
            break


# Plotting

def plot_codeword_lengths(model: HuffmanModel, outdir: Path) -> Optional[Path]:
    if not model.has_frequency_data:
        return None
    rows = code_rows(model)
    x = list(range(len(rows)))

    fig, ax1 = plt.subplots()
    ax1.bar(x, [r.frequency for r in rows], color="#1e90ff", label="frequency")
    ax1.set_ylabel("Frequency")
    ax1.set_xticks(x)
    ax1.set_xticklabels([r.symbol for r in rows], rotation=20, ha="right")

    ax2 = ax1.twinx()
    ax2.plot(x, [r.length for r in rows], color="#ff8c00", marker="o", label="codeword length")
    ax2.set_ylabel("Codeword Length (bits)")

    ax1.set_title("Codeword Length by Symbol Frequency")
    fig.tight_layout()
    path = outdir / "codeword_lengths.png"
    fig.savefig(path, dpi=200)
    plt.close(fig)
    return path


# Main

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Build and step through Huffman codes")
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--freq", type=str, help="File of 'symbol frequency' lines")
    src.add_argument("--codebook", type=str, help="File of 'symbol codeword' lines")
    src.add_argument("--text", type=str, help="Sample text file; builds from its character counts")
    src.add_argument("--sample", type=str, help="Sample text given inline")

    step = ap.add_mutually_exclusive_group()
    step.add_argument("--encode", type=str, help="Plaintext to step through encoding")
    step.add_argument("--decode", type=str, help="Encoded bits to step through decoding")

    ap.add_argument("--trace", action="store_true", help="Print the frontier before every merge")
    ap.add_argument("--outdir", type=str, default=None, help="Output directory for CSV and chart")
    ap.add_argument("--verbose", action="store_true", help="Print plaintext/codeword alignment")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        model = load_model(args)
    except (cb.CodeInputError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    print_table(model)

    if args.trace:
        if model.has_frequency_data:
            print()
            print_trace(model)
        else:
            print("No frequency data; a codebook has no construction trace.")

    if args.encode is not None or args.decode is not None:
        print()
        cursor = CodecCursor(model.codebook)
        if args.encode is not None:
            cursor.set_plain_text(args.encode)
        else:
            cursor.set_encoded_text(args.decode)
        run_cursor(cursor, args.verbose)

    if args.outdir:
        outdir = Path(args.outdir)
        safe_mkdir(outdir)
        codebook_csv = outdir / "codebook.csv"
        write_csv(codebook_csv, code_rows(model), CodeRow)
        print(f"Wrote {len(model)} rows to {codebook_csv}")
        if model.has_frequency_data:
            trace_csv = outdir / "trace.csv"
            write_csv(trace_csv, trace_rows(model), TraceRow)
            print(f"Wrote construction trace to {trace_csv}")
        chart = plot_codeword_lengths(model, outdir)
        if chart is not None:
            print("Chart saved in:", chart.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

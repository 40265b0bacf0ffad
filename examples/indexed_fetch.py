#!/usr/bin/env python3
"""
Example: Streaming and Indexed Access with fastaidx

This example demonstrates:
- Writing FASTA records
- Streaming records back with the parser
- Building a .fai index and fetching ranges across wrapped lines
"""

import io
import sys
sys.path.insert(0, '..')

from fastaidx import Index, IndexedReader, Reader, Writer


WRAPPED = b""">chr1 demo chromosome
ACGTACGTAC
GTTTGGGCCC
AAT
>chr2
NNNNNACGT
"""


def demo_writer_and_reader():
    """Write unwrapped records, then parse them back."""
    print("\n" + "=" * 60)
    print("WRITE AND STREAM")
    print("=" * 60)

    sink = io.BytesIO()
    writer = Writer(sink)
    writer.write("seq1", ["first", "record"], b"ACGTACGT")
    writer.write("seq2", [], b"TTTT")
    writer.flush()

    print("\nWritten:")
    print(sink.getvalue().decode())

    print("Parsed:")
    for record in Reader(io.BytesIO(sink.getvalue())):
        print(f"   {record.id}  desc={record.description}  {len(record)} bp")


def demo_indexed_fetch():
    """Index a wrapped FASTA and fetch ranges by coordinate."""
    print("\n" + "=" * 60)
    print("INDEXED FETCH")
    print("=" * 60)

    index = Index.from_fasta(io.BytesIO(WRAPPED))
    fai = io.BytesIO()
    index.write(fai)
    print("\n.fai contents:")
    print(fai.getvalue().decode())

    reader = IndexedReader(io.BytesIO(WRAPPED), index)
    for name, start, stop in [("chr1", 0, 5), ("chr1", 8, 14), ("chr1", 18, 23), ("chr2", 3, 9)]:
        sequence = reader.read_range(name, start, stop)
        print(f"   {name}:{start}-{stop}  {sequence.decode()}")


def main():
    print("=" * 60)
    print("fastaidx Demo")
    print("=" * 60)

    demo_writer_and_reader()
    demo_indexed_fetch()

    print("\n" + "=" * 60)
    print("Demo Complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()

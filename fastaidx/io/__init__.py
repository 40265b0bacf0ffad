"""
FASTA file I/O.

This module provides:
- Streaming record parsing and unwrapped record writing
- The .fai index model and index-backed random access
"""

from fastaidx.io.fasta import (
    Record,
    Reader,
    Records,
    Writer,
    read_fasta,
    write_fasta,
)

from fastaidx.io.faidx import (
    Index,
    IndexEntry,
    IndexedReader,
    SequenceInfo,
    locate_index_for,
)

__all__ = [
    "Record",
    "Reader",
    "Records",
    "Writer",
    "read_fasta",
    "write_fasta",
    "Index",
    "IndexEntry",
    "IndexedReader",
    "SequenceInfo",
    "locate_index_for",
]

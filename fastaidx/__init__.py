"""
fastaidx: FASTA reading, writing and indexed random access

This package provides tools for:
- Streaming FASTA records from any readable stream
- Writing records back as unwrapped FASTA
- Loading and building samtools-compatible .fai indices
- Fetching arbitrary base ranges by name without scanning the file
"""

__version__ = "0.1.0"
__author__ = "fastaidx Contributors"

from fastaidx.errors import (
    FastaError,
    FastaFormatError,
    UnknownSequenceError,
    RangeOutOfBoundsError,
)

from fastaidx.io import (
    Record,
    Reader,
    Records,
    Writer,
    read_fasta,
    write_fasta,
    Index,
    IndexEntry,
    IndexedReader,
    SequenceInfo,
    locate_index_for,
)

__all__ = [
    # Errors
    "FastaError",
    "FastaFormatError",
    "UnknownSequenceError",
    "RangeOutOfBoundsError",
    # Streaming I/O
    "Record",
    "Reader",
    "Records",
    "Writer",
    "read_fasta",
    "write_fasta",
    # Indexed access
    "Index",
    "IndexEntry",
    "IndexedReader",
    "SequenceInfo",
    "locate_index_for",
]

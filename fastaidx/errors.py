"""
Exceptions raised by fastaidx.

Transport failures are not wrapped: they surface as the built-in
OSError subclasses raised by the underlying stream.
"""


class FastaError(Exception):
    """Base class for all fastaidx errors."""


class FastaFormatError(FastaError, ValueError):
    """Malformed FASTA record, index row or data file layout."""


class UnknownSequenceError(FastaError, KeyError):
    """Sequence name not present in the index."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown sequence name: {self.name}"


class RangeOutOfBoundsError(FastaError, IndexError):
    """Requested range violates 0 <= start <= stop <= length."""

    def __init__(self, name: str, start: int, stop: int, length: int):
        super().__init__(name, start, stop, length)
        self.name = name
        self.start = start
        self.stop = stop
        self.length = length

    def __str__(self) -> str:
        return (
            f"Invalid range {self.name}:{self.start}-{self.stop} "
            f"(sequence length {self.length})"
        )

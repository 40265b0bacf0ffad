"""
FASTA record reader and writer.

A FASTA file is a series of records, each made of a header line
starting with '>' followed by zero or more sequence lines. The reader
accepts any line wrapping; the writer always emits the sequence on a
single line.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, List, Optional, Sequence, Union

import numpy as np

from fastaidx.config import DEFAULTS
from fastaidx.errors import FastaFormatError


@dataclass
class Record:
    """
    Represents a single FASTA record.

    Attributes:
        header: Raw header line, including the leading '>' and the line
            terminator as read from the stream
        sequence: Sequence lines concatenated, terminators stripped

    A record is either empty (both fields empty) or well-formed (the
    header starts with '>' and carries at least an identifier).
    """
    header: str = ""
    sequence: str = ""

    def __len__(self) -> int:
        return len(self.sequence)

    def _tokens(self) -> List[str]:
        return self.header[1:].split()

    @property
    def id(self) -> Optional[str]:
        """First whitespace-delimited token of the header, without '>'."""
        tokens = self._tokens()
        return tokens[0] if tokens else None

    @property
    def description(self) -> List[str]:
        """Header tokens following the identifier."""
        return self._tokens()[1:]

    @property
    def sequence_bytes(self) -> bytes:
        return self.sequence.encode(DEFAULTS.encoding)

    def is_empty(self) -> bool:
        return not self.header and not self.sequence

    def check(self) -> None:
        """
        Validate the record.

        Raises:
            FastaFormatError: If the header has no identifier or the
                sequence contains non-ASCII characters
        """
        if self.id is None:
            raise FastaFormatError("Expecting id for FASTA record.")
        if not self.sequence.isascii():
            raise FastaFormatError("Non-ascii character found in sequence.")

    def to_array(self) -> np.ndarray:
        """
        Return the sequence as an array of byte codes.

        Returns:
            numpy array of dtype uint8, one element per base
        """
        return np.frombuffer(self.sequence_bytes, dtype=np.uint8)


class Reader:
    """
    Streaming FASTA parser.

    Wraps an already-open readable stream (binary or text) and returns
    one record per call to read(). The line following a record's
    sequence, which is the next record's header, is kept between calls.

    Example:
        >>> reader = Reader(io.BytesIO(b">id desc\\nACGT\\n"))
        >>> [record.id for record in reader]
        ['id']
    """

    def __init__(self, stream, encoding: str = DEFAULTS.encoding):
        self._stream = stream
        self._encoding = encoding
        self._line = ""
        self._owned = False

    @classmethod
    def from_file(cls, filepath: Union[str, Path]) -> "Reader":
        """Open a FASTA file for reading; the reader closes it."""
        reader = cls(open(filepath, "rb"))
        reader._owned = True
        return reader

    def _readline(self) -> str:
        line = self._stream.readline()
        if isinstance(line, bytes):
            try:
                line = line.decode(self._encoding)
            except UnicodeDecodeError as exc:
                raise FastaFormatError(f"Undecodable line in FASTA input: {exc}") from exc
        return line

    def read(self) -> Optional[Record]:
        """
        Read the next record.

        Returns:
            The next Record, or None once the stream is exhausted

        Raises:
            FastaFormatError: If a record does not start with a header line
        """
        if not self._line:
            self._line = self._readline()
            # blank lines ahead of the first header
            while self._line and not self._line.strip():
                self._line = self._readline()
            if not self._line:
                return None

        if not self._line.startswith(">"):
            raise FastaFormatError(
                f"Expected header starting with '>' at record start, got {self._line[:40]!r}"
            )

        header = self._line
        chunks: List[str] = []
        while True:
            self._line = self._readline()
            if not self._line or self._line.startswith(">"):
                break
            chunks.append(self._line.rstrip())

        return Record(header=header, sequence="".join(chunks))

    def records(self) -> "Records":
        """Return an iterator over the remaining records of the stream."""
        return Records(self)

    def __iter__(self) -> "Records":
        return self.records()

    def close(self) -> None:
        if self._owned:
            self._stream.close()

    def __enter__(self) -> "Reader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Records:
    """
    Forward-only iterator over the records of a Reader.

    Iteration stops for good once the reader reports end of stream or
    raises; the error itself is raised exactly once.
    """

    def __init__(self, reader: Reader):
        self._reader = reader
        self._done = False

    def __iter__(self) -> "Records":
        return self

    def __next__(self) -> Record:
        if self._done:
            raise StopIteration
        try:
            record = self._reader.read()
        except Exception:
            self._done = True
            raise
        if record is None:
            self._done = True
            raise StopIteration
        return record


class Writer:
    """
    FASTA writer.

    Sequences are written unwrapped, on a single line. Call flush() (or
    close the writer) before relying on the data being written out.
    """

    def __init__(self, sink: BinaryIO, encoding: str = DEFAULTS.encoding):
        self._sink = sink
        self._encoding = encoding
        self._owned = False

    @classmethod
    def from_file(cls, filepath: Union[str, Path]) -> "Writer":
        """Create (or truncate) a FASTA file for writing; the writer closes it."""
        writer = cls(open(filepath, "wb"))
        writer._owned = True
        return writer

    def write(
        self,
        id: str,
        descriptions: Sequence[str] = (),
        sequence: Union[bytes, str] = b""
    ) -> None:
        """
        Write a record from explicit values.

        Args:
            id: Record identifier
            descriptions: Description tokens, joined with single spaces
            sequence: Sequence bytes, written as-is on one line
        """
        header = ">" + id
        for description in descriptions:
            header += " " + description
        if isinstance(sequence, str):
            sequence = sequence.encode(self._encoding)

        terminator = DEFAULTS.line_terminator
        self._sink.write(header.encode(self._encoding) + terminator)
        self._sink.write(sequence + terminator)

    def write_record(self, record: Record) -> None:
        self.write(record.id or "", record.description, record.sequence_bytes)

    def flush(self) -> None:
        self._sink.flush()

    def close(self) -> None:
        try:
            self.flush()
        finally:
            if self._owned:
                self._sink.close()

    def __enter__(self) -> "Writer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def read_fasta(filepath: Union[str, Path]) -> Iterator[Record]:
    """
    Read records from a FASTA file.

    Args:
        filepath: Path to an uncompressed FASTA file

    Yields:
        Record objects, in file order

    Example:
        >>> for record in read_fasta("sequences.fasta"):
        ...     print(f"{record.id}: {len(record)} bp")
    """
    with Reader.from_file(filepath) as reader:
        yield from reader.records()


def write_fasta(
    records: Union[Record, Iterable[Record]],
    filepath: Union[str, Path]
) -> None:
    """
    Write records to a FASTA file, one unwrapped sequence line each.

    Args:
        records: Single record or iterable of Record objects
        filepath: Output file path
    """
    if isinstance(records, Record):
        records = [records]

    with Writer.from_file(filepath) as writer:
        for record in records:
            writer.write_record(record)

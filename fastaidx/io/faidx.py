"""
FASTA index (.fai) and indexed random access.

The index side-file is tab-separated, one row per sequence, no header:

    name    length    offset    line_bases    line_bytes

- length: number of bases in the sequence
- offset: byte offset of the first base in the FASTA file
- line_bases: bases per wrapped line, terminator excluded
- line_bytes: bytes per wrapped line, terminator included

This is the layout written by `samtools faidx`, so index files are
interchangeable with other tools.
"""

import csv
import io
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, List, Mapping, NamedTuple, Optional, Union

import numpy as np

from fastaidx.config import DEFAULTS
from fastaidx.errors import FastaFormatError, RangeOutOfBoundsError, UnknownSequenceError
from fastaidx.logging_utils import get_logger

INDEX_COLUMNS = ("name", "length", "offset", "line_bases", "line_bytes")

logger = get_logger()


@dataclass(frozen=True)
class IndexEntry:
    """Layout of one sequence inside the FASTA file."""
    length: int
    offset: int
    line_bases: int
    line_bytes: int

    def __post_init__(self):
        values = (self.length, self.offset, self.line_bases, self.line_bytes)
        for column, value in zip(INDEX_COLUMNS[1:], values):
            if value < 0:
                raise FastaFormatError(f"{column} must be non-negative, got {value}")
        if self.line_bytes < self.line_bases:
            raise FastaFormatError(
                f"line_bytes ({self.line_bytes}) is smaller than line_bases ({self.line_bases})"
            )
        if self.length > 0 and self.line_bases == 0:
            raise FastaFormatError("line_bases is 0 for a non-empty sequence")

    @property
    def terminator_width(self) -> int:
        return self.line_bytes - self.line_bases


class SequenceInfo(NamedTuple):
    name: str
    length: int


def locate_index_for(fasta_path: Union[str, Path]) -> Path:
    """
    Return the index path for a FASTA file.

    The original extension is kept and '.fai' appended, so 'ref.fa'
    maps to 'ref.fa.fai' and 'ref' to 'ref.fai'.
    """
    fasta_path = Path(fasta_path)
    return fasta_path.with_name(fasta_path.name + DEFAULTS.index_extension)


def _decode_lines(source, encoding: str) -> Iterator[str]:
    for line_number, line in enumerate(source, 1):
        if isinstance(line, bytes):
            try:
                line = line.decode(encoding)
            except UnicodeDecodeError as exc:
                raise FastaFormatError(f"Index line {line_number}: undecodable row: {exc}") from exc
        yield line


def _parse_field(value: str, column: str, line_number: int) -> int:
    if not (value.isascii() and value.isdigit()):
        raise FastaFormatError(
            f"Index line {line_number}: {column} must be a non-negative integer, got {value!r}"
        )
    return int(value)


def _name_key(name: Union[str, bytes]) -> str:
    if isinstance(name, bytes):
        return name.decode(DEFAULTS.encoding)
    return name


class Index:
    """
    Mapping of sequence name to IndexEntry.

    The index owns no file handle; build it once and hand it to as many
    IndexedReader instances as needed.
    """

    def __init__(self, entries: Optional[Dict[str, IndexEntry]] = None):
        self._entries: Dict[str, IndexEntry] = dict(entries or {})

    @classmethod
    def build(cls, source, encoding: str = DEFAULTS.encoding) -> "Index":
        """
        Parse an index side-file.

        Args:
            source: Readable stream (binary or text) or iterable of lines
            encoding: Encoding of the sequence names

        Returns:
            Index holding one entry per row

        Raises:
            FastaFormatError: If any row is malformed; no partial index
                is returned
        """
        entries: Dict[str, IndexEntry] = {}
        reader = csv.reader(
            _decode_lines(source, encoding), delimiter="\t", quoting=csv.QUOTE_NONE
        )
        for row in reader:
            if not row or (len(row) == 1 and not row[0].strip()):
                continue
            if len(row) != len(INDEX_COLUMNS):
                raise FastaFormatError(
                    f"Index line {reader.line_num}: expected {len(INDEX_COLUMNS)} "
                    f"tab-separated columns, got {len(row)}"
                )

            name = row[0]
            if not name.strip():
                raise FastaFormatError(f"Index line {reader.line_num}: empty sequence name")
            if name in entries:
                raise FastaFormatError(f"Index line {reader.line_num}: duplicate sequence name {name}")
            fields = [
                _parse_field(value.strip(), column, reader.line_num)
                for value, column in zip(row[1:], INDEX_COLUMNS[1:])
            ]
            try:
                entries[name] = IndexEntry(*fields)
            except FastaFormatError as exc:
                raise FastaFormatError(f"Index line {reader.line_num}: {exc} ({name})") from exc

        logger.debug("Loaded index with %d sequences", len(entries))
        return cls(entries)

    @classmethod
    def from_file(cls, filepath: Union[str, Path]) -> "Index":
        with open(filepath, "rb") as handle:
            return cls.build(handle)

    @classmethod
    def for_fasta(cls, fasta_path: Union[str, Path]) -> "Index":
        """Load the index stored next to a FASTA file."""
        return cls.from_file(locate_index_for(fasta_path))

    @classmethod
    def from_entries(cls, entries: Mapping[str, IndexEntry]) -> "Index":
        return cls(dict(entries))

    @classmethod
    def from_fasta(cls, stream: BinaryIO, encoding: str = DEFAULTS.encoding) -> "Index":
        """
        Compute the index of a FASTA byte stream.

        Every sequence line but the last must hold the same number of
        bases and use the same terminator, which is what makes the
        offset arithmetic of IndexedReader valid.

        Args:
            stream: Readable binary stream positioned at the file start
            encoding: Encoding of the sequence names

        Returns:
            Index in file order

        Raises:
            FastaFormatError: On sequence lines before the first header,
                headers without a name, duplicate names or inconsistent
                line wrapping
        """
        entries: Dict[str, IndexEntry] = {}
        position = 0
        name: Optional[str] = None
        offset = length = line_bases = line_bytes = 0
        last_line_seen = False

        def finish() -> None:
            if name in entries:
                raise FastaFormatError(f"Duplicate sequence name {name}")
            entries[name] = IndexEntry(length, offset, line_bases, line_bytes)

        for line in stream:
            if line.startswith(b">"):
                if name is not None:
                    finish()
                tokens = line[1:].split()
                if not tokens:
                    raise FastaFormatError(f"Header without a name at byte {position}")
                name = tokens[0].decode(encoding)
                offset = position + len(line)
                length = line_bases = line_bytes = 0
                last_line_seen = False
            else:
                bases = len(line.rstrip(b"\r\n"))
                if name is None:
                    if bases:
                        raise FastaFormatError("Expected header before the first sequence line")
                elif bases == 0:
                    last_line_seen = True
                elif last_line_seen:
                    raise FastaFormatError(f"Different line length in sequence {name}")
                elif line_bases == 0:
                    line_bases = bases
                    line_bytes = len(line)
                    length = bases
                    if line_bytes == line_bases:
                        last_line_seen = True
                else:
                    terminator = len(line) - bases
                    if bases > line_bases or (terminator and terminator != line_bytes - line_bases):
                        raise FastaFormatError(f"Different line length in sequence {name}")
                    if bases < line_bases or not terminator:
                        last_line_seen = True
                    length += bases
            position += len(line)

        if name is not None:
            finish()

        logger.debug("Indexed %d sequences from %d bytes", len(entries), position)
        return cls(entries)

    def write(self, sink: BinaryIO, encoding: str = DEFAULTS.encoding) -> None:
        """Write the index in side-file format, in insertion order."""
        for name, entry in self._entries.items():
            row = "\t".join(
                [name, str(entry.length), str(entry.offset), str(entry.line_bases), str(entry.line_bytes)]
            )
            sink.write(row.encode(encoding) + DEFAULTS.line_terminator)

    def lookup(self, name: Union[str, bytes]) -> Optional[IndexEntry]:
        try:
            key = _name_key(name)
        except UnicodeDecodeError:
            return None
        return self._entries.get(key)

    def sequence_listing(self) -> List[SequenceInfo]:
        """Return (name, length) for every sequence, sorted by name."""
        return [SequenceInfo(name, self._entries[name].length) for name in sorted(self._entries)]

    def __getitem__(self, name: Union[str, bytes]) -> IndexEntry:
        entry = self.lookup(name)
        if entry is None:
            try:
                key = _name_key(name)
            except UnicodeDecodeError:
                key = repr(name)
            raise UnknownSequenceError(key)
        return entry

    def __contains__(self, name) -> bool:
        return self.lookup(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Index({len(self._entries)} sequences)"


class IndexedReader:
    """
    Random access to FASTA sequences through an index.

    Every read seeks to the computed position first, so the stream
    cursor left behind by a previous call is irrelevant. The instance is
    not safe to share between threads.

    Example:
        >>> with IndexedReader.from_file("genome.fa") as reader:
        ...     reader.read_range("chr1", 1000, 1050)
    """

    def __init__(self, stream: BinaryIO, index: Index):
        self._stream = stream
        self.index = index
        self._owned = False

    @classmethod
    def open(cls, stream: BinaryIO, fai_source) -> "IndexedReader":
        """Build the index from fai_source and pair it with stream."""
        return cls(stream, Index.build(fai_source))

    @classmethod
    def from_file(
        cls,
        fasta_path: Union[str, Path],
        index: Optional[Index] = None
    ) -> "IndexedReader":
        """
        Open a FASTA file for random access; the reader closes it.

        Args:
            fasta_path: Path to an uncompressed FASTA file
            index: Prebuilt index; loaded from locate_index_for(fasta_path)
                when omitted
        """
        if index is None:
            index = Index.for_fasta(fasta_path)
        reader = cls(open(fasta_path, "rb"), index)
        reader._owned = True
        return reader

    def _entry(self, name: Union[str, bytes]) -> IndexEntry:
        return self.index[name]

    def read_range(self, name: Union[str, bytes], start: int, stop: int) -> bytes:
        """
        Read bases [start, stop) of a sequence.

        Args:
            name: Sequence name
            start: 0-based first base, inclusive
            stop: 0-based end, exclusive

        Returns:
            Exactly stop - start bytes, without line terminators

        Raises:
            UnknownSequenceError: If name is not indexed
            RangeOutOfBoundsError: If not 0 <= start <= stop <= length
            FastaFormatError: If the file ends before the indexed range
        """
        entry = self._entry(name)
        if start < 0 or start > stop or stop > entry.length:
            raise RangeOutOfBoundsError(_name_key(name), start, stop, entry.length)
        if start == stop:
            return b""

        line, column = divmod(start, entry.line_bases)
        self._stream.seek(entry.offset + line * entry.line_bytes + column)

        chunks = []
        remaining = stop - start
        available = entry.line_bases - column
        while remaining:
            wanted = min(available, remaining)
            chunk = self._stream.read(wanted)
            if len(chunk) != wanted:
                raise FastaFormatError(
                    f"Unexpected end of file reading {_name_key(name)}:{start}-{stop}; "
                    "the index does not match the FASTA file"
                )
            chunks.append(chunk)
            remaining -= wanted
            if remaining:
                self._stream.seek(entry.terminator_width, io.SEEK_CUR)
                available = entry.line_bases

        logger.debug("Read %s:%d-%d", _name_key(name), start, stop)
        return b"".join(chunks)

    def read_all(self, name: Union[str, bytes]) -> bytes:
        """Read a whole sequence."""
        return self.read_range(name, 0, self._entry(name).length)

    def read_array(self, name: Union[str, bytes], start: int, stop: int) -> np.ndarray:
        """Read bases [start, stop) as a uint8 array."""
        return np.frombuffer(self.read_range(name, start, stop), dtype=np.uint8)

    def sequence_listing(self) -> List[SequenceInfo]:
        return self.index.sequence_listing()

    def close(self) -> None:
        if self._owned:
            self._stream.close()

    def __enter__(self) -> "IndexedReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

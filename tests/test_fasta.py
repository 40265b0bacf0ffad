import io
from pathlib import Path

import numpy as np
import pytest

from fastaidx import FastaFormatError, Record, Reader, Writer, read_fasta, write_fasta

FASTA_FILE = b">id desc\nACCGTAGGCTGA\n"


def test_reader_single_record():
    records = list(Reader(io.BytesIO(FASTA_FILE)).records())
    assert len(records) == 1
    record = records[0]
    record.check()
    assert record.id == "id"
    assert record.description == ["desc"]
    assert record.sequence_bytes == b"ACCGTAGGCTGA"
    assert record.header == ">id desc\n"


def test_reader_joins_wrapped_lines_and_splits_records():
    content = b">seq1 first record\nACGT\nTGCA\nGG\n>seq2\nUUUU\n>seq3 third\nCC\n"
    records = list(Reader(io.BytesIO(content)))
    assert [r.id for r in records] == ["seq1", "seq2", "seq3"]
    assert [r.sequence for r in records] == ["ACGTTGCAGG", "UUUU", "CC"]
    assert records[0].description == ["first", "record"]
    assert records[1].description == []


def test_reader_accepts_crlf_and_missing_final_newline():
    content = b">a\r\nAC\r\nGT\r\n>b\r\nTT"
    records = list(Reader(io.BytesIO(content)))
    assert [(r.id, r.sequence) for r in records] == [("a", "ACGT"), ("b", "TT")]


def test_reader_accepts_text_streams():
    records = list(Reader(io.StringIO(">x y\nAC\n")))
    assert records[0].id == "x"
    assert records[0].sequence == "AC"


def test_header_without_sequence_lines():
    records = list(Reader(io.BytesIO(b">empty\n>full\nACGT\n>last\n")))
    assert [(r.id, r.sequence) for r in records] == [("empty", ""), ("full", "ACGT"), ("last", "")]


def test_trailing_blank_lines_do_not_create_records():
    records = list(Reader(io.BytesIO(b">a\nACGT\n\n\n")))
    assert len(records) == 1
    assert records[0].sequence == "ACGT"


def test_leading_blank_lines_are_skipped():
    records = list(Reader(io.BytesIO(b"\n\n>a\nAC\n")))
    assert records[0].id == "a"


def test_empty_stream_yields_nothing():
    reader = Reader(io.BytesIO(b""))
    assert reader.read() is None
    assert list(reader) == []


def test_read_returns_none_after_last_record():
    reader = Reader(io.BytesIO(FASTA_FILE))
    assert reader.read().id == "id"
    assert reader.read() is None
    assert reader.read() is None


def test_missing_header_raises_format_error():
    reader = Reader(io.BytesIO(b"ACGT\n>a\nAC\n"))
    with pytest.raises(FastaFormatError, match="Expected header"):
        reader.read()


def test_records_stop_after_error():
    records = Reader(io.BytesIO(b"ACGT\n>a\nAC\n")).records()
    with pytest.raises(FastaFormatError):
        next(records)
    assert list(records) == []


def test_records_stop_permanently_at_end():
    records = Reader(io.BytesIO(FASTA_FILE)).records()
    assert next(records).id == "id"
    with pytest.raises(StopIteration):
        next(records)
    with pytest.raises(StopIteration):
        next(records)


def test_record_check_rejects_missing_id_and_non_ascii():
    with pytest.raises(FastaFormatError, match="id"):
        Record(header=">\n", sequence="ACGT").check()
    with pytest.raises(FastaFormatError, match="Non-ascii"):
        Record(header=">a\n", sequence="ACGÜ").check()


def test_empty_record():
    record = Record()
    assert record.is_empty()
    assert record.id is None
    assert record.description == []
    assert len(record) == 0
    assert not Record(header=">a\n").is_empty()


def test_record_to_array():
    array = Record(header=">a\n", sequence="ACGT").to_array()
    assert array.dtype == np.uint8
    assert array.tolist() == [65, 67, 71, 84]


def test_writer_output_matches_input_layout():
    sink = io.BytesIO()
    writer = Writer(sink)
    writer.write("id", ["desc"], b"ACCGTAGGCTGA")
    writer.flush()
    assert sink.getvalue() == FASTA_FILE


def test_writer_without_descriptions_and_str_sequence():
    sink = io.BytesIO()
    writer = Writer(sink)
    writer.write("seq", [], "ACGT")
    writer.write("two", ["a", "b"], b"")
    writer.flush()
    assert sink.getvalue() == b">seq\nACGT\n>two a b\n\n"


def test_writer_does_not_wrap_long_sequences():
    sink = io.BytesIO()
    Writer(sink).write("long", [], b"A" * 500)
    lines = sink.getvalue().split(b"\n")
    assert lines[1] == b"A" * 500


def test_writer_then_reader_round_trip():
    sink = io.BytesIO()
    writer = Writer(sink)
    original = Reader(io.BytesIO(b">r1 alpha beta\nAC\nGT\n>r2\nTTTT\n>r3 gamma\n")).records()
    for record in original:
        writer.write_record(record)
    writer.flush()

    records = list(Reader(io.BytesIO(sink.getvalue())))
    assert [(r.id, r.description, r.sequence) for r in records] == [
        ("r1", ["alpha", "beta"], "ACGT"),
        ("r2", [], "TTTT"),
        ("r3", ["gamma"], ""),
    ]


def test_read_and_write_files(tmp_path: Path):
    out_path = tmp_path / "out.fasta"
    records = [Record(header=">a one\n", sequence="ACGT"), Record(header=">b\n", sequence="GG")]
    write_fasta(records, out_path)
    assert out_path.read_bytes() == b">a one\nACGT\n>b\nGG\n"

    read_back = list(read_fasta(out_path))
    assert [(r.id, r.sequence) for r in read_back] == [("a", "ACGT"), ("b", "GG")]


def test_write_fasta_single_record(tmp_path: Path):
    out_path = tmp_path / "single.fa"
    write_fasta(Record(header=">only\n", sequence="NNN"), out_path)
    assert out_path.read_text(encoding="utf-8") == ">only\nNNN\n"


def test_owned_file_closed_on_exit(tmp_path: Path):
    path = tmp_path / "in.fa"
    path.write_bytes(FASTA_FILE)
    with Reader.from_file(path) as reader:
        stream = reader._stream
        assert reader.read().id == "id"
    assert stream.closed


def test_borrowed_stream_left_open():
    stream = io.BytesIO(FASTA_FILE)
    with Reader(stream) as reader:
        list(reader)
    assert not stream.closed


def test_undecodable_input_raises_format_error():
    reader = Reader(io.BytesIO(b">a\nAC\xffGT\n"))
    with pytest.raises(FastaFormatError, match="Undecodable"):
        reader.read()


class _FailingFlushSink(io.BytesIO):
    failing = True

    def flush(self):
        if self.failing:
            self.failing = False
            raise OSError("disk full")
        super().flush()


def test_owned_sink_closed_when_flush_fails():
    sink = _FailingFlushSink()
    writer = Writer(sink)
    writer._owned = True
    writer.write("a", [], b"ACGT")
    with pytest.raises(OSError, match="disk full"):
        writer.close()
    assert sink.closed

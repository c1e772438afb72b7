import io

import numpy as np
import pytest

from lossplot import ProgressParser as pp
from lossplot.Configurations import TransformMode
from lossplot.errors import InputFileError, InvalidLossError, NoProgressDataError


def _lines(text):
    return io.StringIO(text)


def _as_lists(runs):
    return [r.tolist() for r in runs]


def test_classify_iteration_line():
    event = pp.classify_line("0.693147 12 3.2 lr=0.1\n")
    assert event == pp.LineEvent(pp.ITERATION, 0.693147)


def test_classify_summary_line():
    assert pp.classify_line("average loss = 0.25\n") == pp.LineEvent(pp.SUMMARY, 0.25)
    assert pp.classify_line("average loss=0.5") == pp.LineEvent(pp.SUMMARY, 0.5)


@pytest.mark.parametrize("line", [
    "",
    "\n",
    "Start training...\n",
    "  0.5 indented\n",
    "loss 0.4\n",
    "average loss: 0.2\n",
    "...\n",
    "1.2.3\n",
])
def test_classify_unrecognized(line):
    assert pp.classify_line(line).kind == pp.UNRECOGNIZED


def test_summary_lines_split_runs():
    text = "0.5\n0.3\naverage loss = 0.2\n0.9\naverage loss = 0.1\n"
    assert _as_lists(pp.parse(_lines(text))) == [[0.5, 0.3, 0.2], [0.9, 0.1]]


def test_trailing_partial_run_is_kept():
    assert _as_lists(pp.parse(_lines("0.4\n0.2\n"))) == [[0.4, 0.2]]


def test_partial_run_after_complete_run():
    text = "0.5\naverage loss = 0.4\n0.3\n"
    assert _as_lists(pp.parse(_lines(text))) == [[0.5, 0.4], [0.3]]


def test_summary_only_run():
    assert _as_lists(pp.parse(_lines("average loss = 0.7\n"))) == [[0.7]]


def test_other_lines_are_ignored():
    text = (
        "finished run\n"
        "0.8 0 1 2\n"
        "header line\n"
        "0.6\n"
        "average loss = 0.5\n"
        "bye\n"
    )
    assert _as_lists(pp.parse(_lines(text))) == [[0.8, 0.6, 0.5]]


def test_no_data_raises():
    with pytest.raises(NoProgressDataError):
        pp.parse(_lines("nothing\nto see here\n"))


def test_empty_input_raises():
    with pytest.raises(NoProgressDataError):
        pp.parse([])


def test_transform_applied_to_every_value():
    text = "0.25\naverage loss = 0.04\n"
    runs = pp.parse(_lines(text), TransformMode.SQRT_LOSS)
    assert runs[0].tolist() == pytest.approx([0.5, 0.2])


def test_runs_are_read_only():
    runs = pp.parse(_lines("0.5\n0.3\n"))
    assert isinstance(runs[0], np.ndarray)
    with pytest.raises(ValueError):
        runs[0][0] = 1.0


def test_parse_files_concatenates(tmp_path):
    a = tmp_path / "a.log"
    b = tmp_path / "b.log"
    a.write_text("0.5\naverage loss = 0.4\n")
    b.write_text("0.9\n0.8\n")
    runs = pp.parse_files([str(a), str(b)])
    assert _as_lists(runs) == [[0.5, 0.4], [0.9, 0.8]]


def test_parse_files_reads_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("0.3\naverage loss = 0.1\n"))
    assert _as_lists(pp.parse_files([])) == [[0.3, 0.1]]


def test_overflowing_token_is_rejected():
    with pytest.raises(InvalidLossError):
        pp.parse(_lines("9" * 400 + "\naverage loss = 0.2\n"))


def test_parse_files_tolerates_undecodable_bytes(tmp_path):
    log = tmp_path / "mixed.log"
    log.write_bytes(b"0.5\n\xff\xfe garbage\naverage loss = 0.2\n")
    assert _as_lists(pp.parse_files([str(log)])) == [[0.5, 0.2]]


def test_parse_files_missing_file(tmp_path):
    missing = str(tmp_path / "nope.log")
    with pytest.raises(InputFileError) as exc:
        pp.parse_files([missing])
    assert missing in str(exc.value)

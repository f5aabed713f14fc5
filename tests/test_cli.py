import io
import signal
import sys

import pytest

from rotatelogs.cli import build_parser, config_from_args, main, parse_size


@pytest.fixture()
def stdin_bytes(monkeypatch):
    def _set(data: bytes) -> None:
        monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))

    return _set


@pytest.mark.parametrize(
    "raw, expected",
    [("4096", 4096), ("10K", 10 * 1024), ("25m", 25 * 1024**2), ("1G", 1024**3), ("2kb", 2048)],
)
def test_parse_size(raw, expected):
    assert parse_size(raw) == expected


@pytest.mark.parametrize("raw", ["", "k", "1.5M", "-3", "10X"])
def test_parse_size_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_size(raw)


def test_defaults(tmp_path):
    args = build_parser().parse_args(["-f", str(tmp_path / "out.log")])
    config = config_from_args(args)

    assert config.max_size_bytes == 0
    assert config.max_lines is None
    assert config.keep_count == 5
    assert config.rotate_on_start is False


def test_main_rotates_by_size(tmp_path, stdin_bytes, isolated_logging):
    target = tmp_path / "out.log"
    stdin_bytes(b"abcdefghij")

    main(["--file", str(target), "--size", "4", "--count", "1"])

    assert (tmp_path / "out.log.1").read_bytes() == b"efgh"
    assert not (tmp_path / "out.log.2").exists()
    assert target.read_bytes() == b"ij"


def test_main_rotate_flag_and_lines(tmp_path, stdin_bytes, isolated_logging):
    target = tmp_path / "out.log"
    target.write_bytes(b"old\n")
    stdin_bytes(b"a\nb\nc\n")

    main(["-f", str(target), "-l", "2", "-r"])

    assert (tmp_path / "out.log.2").read_bytes() == b"old\n"
    assert (tmp_path / "out.log.1").read_bytes() == b"a\nb\n"
    assert target.read_bytes() == b"c\n"


def test_main_restores_sighup_handler(tmp_path, stdin_bytes, isolated_logging):
    before = signal.getsignal(signal.SIGHUP)
    stdin_bytes(b"")

    main(["-f", str(tmp_path / "out.log")])

    assert signal.getsignal(signal.SIGHUP) == before
    assert (tmp_path / "out.log").read_bytes() == b""


def test_missing_file_argument_exits_nonzero(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2
    assert "--file" in capsys.readouterr().err


def test_directory_target_is_config_error(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["-f", str(tmp_path)])
    assert "is a directory" in str(excinfo.value.code)


def test_io_failure_exits_with_diagnostic(tmp_path, stdin_bytes, isolated_logging):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not dir")
    stdin_bytes(b"data")

    with pytest.raises(SystemExit) as excinfo:
        main(["-f", str(blocker / "out.log")])

    message = str(excinfo.value.code)
    assert message.startswith("rotatelogs: opening")
    assert str(blocker / "out.log") in message

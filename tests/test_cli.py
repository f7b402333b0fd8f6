import pytest

pytest.importorskip("rich")

import qlspectrum

from .conftest import write_tone


def test_cli_prints_summary(tmp_path, capsys):
    path = write_tone(tmp_path / "cli.wav")
    assert qlspectrum.main([path, "--width", "64", "--height", "32",
                            "--start", "0.25", "--fmax", "2000"]) == 0
    out = capsys.readouterr().out
    assert "cli.wav" in out
    assert "00:00.25" in out
    assert "2.0kHz" in out
    assert "64 x 32" in out


def test_cli_reports_empty_selection(tmp_path, capsys):
    path = write_tone(tmp_path / "cli.wav")
    assert qlspectrum.main([path, "--start", "3", "--end", "4"]) == 1
    assert "Could not generate spectrogram" in capsys.readouterr().out


def test_cli_missing_file(tmp_path, capsys):
    assert qlspectrum.main([str(tmp_path / "nope.wav")]) == 1
    assert "Error" in capsys.readouterr().out


def test_cli_rejects_inverted_range(tmp_path):
    path = write_tone(tmp_path / "cli.wav")
    with pytest.raises(SystemExit):
        qlspectrum.parse_arguments([path, "--start", "2", "--end", "1"])

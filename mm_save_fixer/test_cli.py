"""Tests for the command line interface"""

import pytest

from mm_save_fixer.cli import hexdump, main
from mm_save_fixer.drivers import DriverPosition
from mm_save_fixer.save_file import SaveFile


def test_show(save_path, capsys):
    assert main(['--show', str(save_path)]) == 0

    out = capsys.readouterr().out
    assert "Career Save" in out
    assert "1. Lewis Hamilton" in out
    assert "George Russell" in out and "Reserve" in out


def test_show_warns_about_shared_seat(tmp_path, make_save, make_data, capsys):
    path = tmp_path / "broken.sav"
    path.write_bytes(make_save(data=make_data([
        ('Lewis', 'Hamilton', 0),
        ('Valtteri', 'Bottas', 0),
        ('George', 'Russell', -1),
    ])))

    assert main(['--show', str(path)]) == 0
    assert "share a position" in capsys.readouterr().out


def test_show_missing_file(tmp_path, capsys):
    assert main(['--show', str(tmp_path / "missing.sav")]) == 1
    assert "Error: could not find file" in capsys.readouterr().out


def test_inspect(save_path, capsys):
    assert main(['--inspect', str(save_path)]) == 0

    out = capsys.readouterr().out
    assert "Version:           4" in out
    assert "'Career Save'" in out
    assert out.count("data offset") == 3


def test_list(tmp_path, monkeypatch, capsys):
    (tmp_path / "one.sav").write_bytes(b"x")
    (tmp_path / "notes.txt").write_text("x")
    monkeypatch.setattr('mm_save_fixer.cli.default_save_dir', lambda: tmp_path)

    assert main(['--list']) == 0
    out = capsys.readouterr().out
    assert "one.sav" in out
    assert "notes.txt" not in out


def test_fix_default_output(save_path, capsys):
    assert main([str(save_path), '--car1', 'Russell', '--reserve', 'Hamilton']) == 0

    output = save_path.with_name("career(fixed).sav")
    save = SaveFile.open(output)
    assert save.save_name == "career(fixed)"
    assert [d.position for d in save.drivers] == [
        DriverPosition.RESERVE,
        DriverPosition.CAR2,
        DriverPosition.CAR1,
    ]
    assert "FIXED SAVE WRITTEN" in capsys.readouterr().out


def test_fix_by_number_with_name(tmp_path, save_path):
    output = tmp_path / "out.sav"
    assert main([str(save_path), str(output), '--car2', '3', '--name', 'Round 5']) == 0

    save = SaveFile.open(output)
    assert save.save_name == "Round 5"
    assert save.drivers[2].position == DriverPosition.CAR2


def test_swap(tmp_path, save_path):
    output = tmp_path / "out.sav"
    assert main([str(save_path), str(output), '--swap']) == 0

    positions = [d.position for d in SaveFile.open(output).drivers]
    assert positions == [DriverPosition.CAR2, DriverPosition.CAR1, DriverPosition.RESERVE]


def test_no_changes_warns(tmp_path, save_path, capsys):
    assert main([str(save_path), str(tmp_path / "out.sav")]) == 0
    assert "No driver positions were changed" in capsys.readouterr().out


def test_bad_driver(tmp_path, save_path, capsys):
    output = tmp_path / "out.sav"
    assert main([str(save_path), str(output), '--car1', 'Senna']) == 1
    assert "no driver matches" in capsys.readouterr().out
    assert not output.exists()


def test_existing_output_declined(tmp_path, save_path, monkeypatch, capsys):
    output = tmp_path / "out.sav"
    output.write_bytes(b"keep me")
    monkeypatch.setattr('builtins.input', lambda prompt: 'n')

    assert main([str(save_path), str(output), '--swap']) == 0
    assert "Cancelled." in capsys.readouterr().out
    assert output.read_bytes() == b"keep me"


def test_existing_output_accepted(tmp_path, save_path, monkeypatch):
    output = tmp_path / "out.sav"
    output.write_bytes(b"replace me")
    monkeypatch.setattr('builtins.input', lambda prompt: 'y')

    assert main([str(save_path), str(output), '--swap']) == 0
    assert SaveFile.open(output).save_name == "out"


def test_force_overwrites(tmp_path, save_path, monkeypatch):
    output = tmp_path / "out.sav"
    output.write_bytes(b"replace me")

    def fail(prompt):
        raise AssertionError("should not ask")
    monkeypatch.setattr('builtins.input', fail)

    assert main(['-f', str(save_path), str(output), '--swap']) == 0
    assert SaveFile.open(output).drivers[0].position == DriverPosition.CAR2


def test_output_is_directory(tmp_path, save_path, capsys):
    assert main([str(save_path), str(tmp_path)]) == 1
    assert "is a directory" in capsys.readouterr().out


def test_too_many_files(capsys):
    assert main(['a.sav', 'b.sav', 'c.sav']) == 1
    assert "expected <input> [output]" in capsys.readouterr().out


def test_no_arguments_prints_help(capsys):
    assert main([]) == 0
    assert "usage:" in capsys.readouterr().out


@pytest.mark.parametrize("start, length, expected_lines", [(0, 64, 4), (0, 10, 1), (10, 30, 2)])
def test_hexdump(start, length, expected_lines):
    data = bytes(range(64))
    dump = hexdump(data, start, length)
    lines = dump.splitlines()

    assert len(lines) == expected_lines
    assert lines[0].startswith(f"{start:08X}  ")


def test_hexdump_ascii_column():
    assert hexdump(b'"mCarID":0,\x00').endswith('"mCarID":0,.')

import json
from pathlib import Path
from cachevis.cli.main import build_parser, main


def test_run_explicit_addresses(capsys):
    code = main(["run", "--addresses", "0", "0", "0x100", "--trace"])
    assert code == 0
    out = capsys.readouterr().out
    assert "0x00000000 MISS set=0 way=0" in out
    assert "0x00000000 HIT  set=0 way=0" in out
    assert "0x00000100 MISS set=0 way=1" in out
    assert "Hit rate: 33.33%" in out


def test_run_pattern_with_report(tmp_path: Path, capsys):
    code = main(["run", "--pattern", "random", "--seed", "1", "--length", "20",
                 "--report", str(tmp_path), "--ascii"])
    assert code == 0
    data = json.loads((tmp_path / "report.json").read_text())
    assert data["stats"]["accesses"] == 20
    assert (tmp_path / "report.html").exists()
    assert "Cache Contents" in capsys.readouterr().out


def test_run_invalid_geometry_exits_with_error(caplog):
    code = main(["run", "--assoc", "3"])
    assert code == 2
    assert "does not divide" in caplog.text


def test_decode(capsys):
    main(["decode", "--assoc", "fully", "0x47"])
    out = capsys.readouterr().out
    assert "fully associative" in out
    assert "offset=7" in out


def test_options(capsys):
    main(["options", "128", "64"])
    out = capsys.readouterr().out
    assert "Direct Mapped" in out
    assert "8-way" not in out


def test_parser_requires_command():
    parser = build_parser()
    args = parser.parse_args(["run", "--cache-size", "512", "--block-size", "16"])
    assert args.cache_size_bytes == 512
    assert args.block_size_bytes == 16


def test_run_negative_length_exits_with_error(caplog):
    assert main(["run", "--length", "-1"]) == 2
    assert "non-negative" in caplog.text


def test_run_bad_pattern_in_yaml_exits_with_error(tmp_path: Path, caplog):
    config_file = tmp_path / "run.yaml"
    config_file.write_text("pattern: zigzag\n")
    assert main(["run", "-c", str(config_file)]) == 2
    assert "Unknown access pattern" in caplog.text


def test_run_report_dir_from_yaml(tmp_path: Path, capsys):
    report_dir = tmp_path / "reports"
    config_file = tmp_path / "run.yaml"
    config_file.write_text(f"report_dir: {report_dir}\nlength: 16\n")

    assert main(["run", "-c", str(config_file)]) == 0
    data = json.loads((report_dir / "report.json").read_text())
    assert data["stats"]["accesses"] == 16


def test_run_without_report_dir_writes_nothing(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["run", "--length", "8"]) == 0
    assert list(tmp_path.iterdir()) == []
    assert "Hit rate" in capsys.readouterr().out

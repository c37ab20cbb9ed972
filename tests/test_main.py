import io
import json
from pathlib import Path

import pytest

from cosmic import __version__
from cosmic.main import _load_configuration, _translate_legacy_args, main, redshift_distance_main

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "default_config.yaml"


def test_single_redshift_report(capsys):
    status = main(["--quiet", "--no-prompt", "--H0", "70", "--omega-m", "0.3", "--omega-lambda", "0.7", "-z", "1"])

    out = capsys.readouterr().out
    assert status == 0
    assert out.startswith("H_0 = 70, Omega_m = 0.3, Omega_L = 0.7")
    assert "At z = 1\n" in out
    assert "comoving radial distance d_C  = 3303" in out


def test_banner_is_printed_unless_quiet(capsys):
    main(["--no-prompt", "-z", "0.5"])

    assert capsys.readouterr().out.startswith(f"cosmic version {__version__}\n")


def test_legacy_key_value_arguments(capsys):
    status = main(["quiet=yes", "prompt=no", "h=70", "m=0.3", "l=0", "z=2", "html=yes"])

    out = capsys.readouterr().out
    assert status == 0
    assert out.startswith("<p>H<sub>0</sub> = 70")
    assert "&#x03A9;<sub>k</sub> = 0.7" in out


@pytest.mark.parametrize(
    "argv, translated, problems",
    [
        (["h=70", "z=1.5"], ["--H0=70", "--redshift=1.5"], []),
        (["batch='z.txt'"], ["--batch=z.txt"], []),
        (["-quiet", "-noprompt", "-nohtml"], ["--quiet", "--no-prompt", "--no-html"], []),
        (["quiet=no", "version=yes"], ["--no-quiet", "--version"], []),
        (["--H0", "70", "-z", "1"], ["--H0", "70", "-z", "1"], []),
        (["foo=1"], [], ["unknown argument: foo=1"]),
        (["h="], [], ["incomplete argument: h="]),
        (["m=abc", "quiet=maybe"], [], ["invalid value for argument 'm'", "invalid value for argument 'quiet'"]),
    ],
)
def test_translate_legacy_args(argv, translated, problems):
    assert _translate_legacy_args(argv) == (translated, problems)


def test_legacy_problems_exit_with_usage_status(capsys):
    assert main(["h=fast", "prompt=no"]) == 2
    assert "invalid value for argument 'h'" in capsys.readouterr().err


def test_batch_mode_writes_results_table(tmp_path, capsys):
    batch_file = tmp_path / "z.txt"
    batch_file.write_text("0\n0.5\n\n1\n", encoding="utf-8")
    outfile = tmp_path / "results.out"

    status = main([
        "--no-prompt", "h=70", "m=0.3", "l=0.7",
        f"batch={batch_file}", f"outfile={outfile}",
    ])

    assert status == 0
    assert f"Running in batch mode. Output will be in {outfile}" in capsys.readouterr().err
    lines = outfile.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "# H_0 = 70, Omega_m = 0.3, Omega_L = 0.7  (q_0 = -0.55)"
    assert lines[1] == "# z\td_A\td_L\td_C\tscale\t1/scale\ttL"
    assert [line.split("\t")[0] for line in lines[2:]] == ["0", "0.5", "1"]
    assert float(lines[4].split("\t")[3]) == pytest.approx(3303.8, rel=1e-3)


def test_batch_mode_with_comma_separator(tmp_path):
    batch_file = tmp_path / "z.txt"
    batch_file.write_text("1\n", encoding="utf-8")
    outfile = tmp_path / "results.csv"

    status = main([
        "--quiet", "--no-prompt", "--batch", str(batch_file),
        "--outfile", str(outfile), "--separator", "comma",
    ])

    assert status == 0
    assert outfile.read_text(encoding="utf-8").splitlines()[1] == "# z,d_A,d_L,d_C,scale,1/scale,tL"


def test_bad_batch_file_exits_without_output(tmp_path, capsys):
    batch_file = tmp_path / "z.txt"
    batch_file.write_text("0.5\nfar away\n", encoding="utf-8")
    outfile = tmp_path / "results.out"

    status = main(["--quiet", "--no-prompt", "--batch", str(batch_file), "--outfile", str(outfile)])

    assert status == 1
    assert not outfile.exists()
    err = capsys.readouterr().err
    assert "Error reading batch file" in err
    assert "line 2" in err


def test_log_dir_keeps_run_artifacts(tmp_path):
    batch_file = tmp_path / "z.txt"
    batch_file.write_text("0.5\n1\n", encoding="utf-8")
    config_file = tmp_path / "config.yaml"
    config_file.write_text("run:\n  run_id: test-run\n  quiet: true\n  prompt: false\n", encoding="utf-8")
    log_dir = tmp_path / "logs"

    status = main([
        "--config", str(config_file), "--batch", str(batch_file),
        "--outfile", str(tmp_path / "out.txt"), "--log-dir", str(log_dir),
    ])

    run_dir = log_dir / "test-run"
    assert status == 0
    assert (run_dir / "batch_results.csv").exists()
    events = [json.loads(line)["event"] for line in (run_dir / "events.jsonl").read_text(encoding="utf-8").splitlines()]
    assert events[0] == "run_start"
    assert "batch.complete" in events
    assert events[-1] == "run_complete"
    metadata = json.loads((run_dir / "run_metadata.json").read_text(encoding="utf-8"))
    assert metadata["mode"] == "batch"
    assert metadata["status"] == 0
    assert metadata["parameters"]["H0"] == pytest.approx(67.04)
    assert set(metadata["checksums"]) == {"batch", "config"}


def test_interactive_mode_reads_redshifts_until_eof(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("abc\n-1\n\n1\n"))

    status = main(["--quiet", "--no-prompt", "h=70", "m=0.3", "l=0.7"])

    captured = capsys.readouterr()
    assert status == 0
    assert "Redshift must be numeric" in captured.err
    assert "  The redshift must be a number >= 0." in captured.err
    assert captured.out.count("At z = ") == 1
    assert "redshift (ctrl-D to quit): " in captured.out
    assert captured.out.endswith("\n")


def test_prompting_for_parameters(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("-5\n70\n0.3\n0.7\n"))

    status = main(["--quiet", "-z", "1"])

    captured = capsys.readouterr()
    assert status == 0
    assert "  The Hubble constant must be > 0" in captured.err
    assert "H_0 = 70, Omega_m = 0.3, Omega_L = 0.7" in captured.out


def test_default_configuration_file_matches_builtin_defaults():
    config = _load_configuration(str(DEFAULT_CONFIG_PATH))

    assert config["cosmology"] == {"H0": 67.04, "Omega_m": 0.3183, "Omega_lambda": 0.6817}
    assert config["run"]["separator"] == "tab"
    assert config["config_path"] == str(DEFAULT_CONFIG_PATH)


def test_configuration_supplies_parameters(tmp_path, capsys):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "cosmology:\n  H0: 70\n  Omega_m: 1.0\n  Omega_lambda: 0.0\nrun:\n  quiet: true\n  prompt: false\n",
        encoding="utf-8",
    )

    assert main(["--config", str(config_file), "z=1"]) == 0
    assert "H_0 = 70, Omega_m = 1, Omega_L = 0  (q_0 = 0.5)" in capsys.readouterr().out


@pytest.mark.parametrize(
    "contents, message",
    [
        ("plotting:\n  dpi: 100\n", "Unknown section 'plotting'"),
        ("cosmology:\n  H_0: 70\n", "Unknown keys in section 'cosmology'"),
        ("cosmology:\n  H0: fast\n", "cosmology.H0"),
        ("run:\n  separator: pipe\n", "run.separator"),
        ("- 1\n- 2\n", "must contain a mapping"),
    ],
)
def test_invalid_configuration_is_rejected(tmp_path, capsys, contents, message):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(contents, encoding="utf-8")

    assert main(["--config", str(config_file), "-z", "1"]) == 2
    assert message in capsys.readouterr().err


def test_invalid_hubble_constant_is_rejected(capsys):
    assert main(["--quiet", "--no-prompt", "--H0", "0", "-z", "1"]) == 2
    assert "The Hubble constant must be > 0" in capsys.readouterr().err


def test_negative_redshift_is_a_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        main(["--quiet", "--no-prompt", "-z", "-1"])

    assert excinfo.value.code == 2


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])

    assert excinfo.value.code == 0
    assert capsys.readouterr().out.strip() == f"cosmic version {__version__}"


def test_redshift_distance_writes_csv(tmp_path):
    source = tmp_path / "redshifts.txt"
    source.write_text("70 0.3 0.7\n2\n0.5\n1\n", encoding="utf-8")
    output = tmp_path / "results.csv"

    assert redshift_distance_main([str(source), "-o", str(output), "--quiet"]) == 0

    lines = output.read_text(encoding="utf-8").splitlines()
    assert lines[0] == (
        "Angular Diameter Distance (Mpc),Luminosity Distance (Mpc),"
        "Comoving Radial Distance (Mpc),Comoving Transverse Distance (Mpc)"
    )
    assert len(lines) == 3
    d_A, d_L, d_C, d_M = (float(value) for value in lines[2].split(","))
    assert d_C == pytest.approx(3303.8, rel=1e-3)
    assert d_M == d_C
    assert d_L == pytest.approx(4.0 * d_A)


def test_redshift_distance_reports_count_mismatch(tmp_path, capsys):
    source = tmp_path / "redshifts.txt"
    source.write_text("70 0.3 0.7\n3\n0.5\n1\n", encoding="utf-8")

    assert redshift_distance_main([str(source), "-o", str(tmp_path / "results.csv")]) == 1
    assert "header announces 3 redshifts but 2 were found" in capsys.readouterr().err


def test_interactive_mode_evaluates_every_redshift_on_a_line(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("0.5 1\n2 x -3\n"))

    status = main(["--quiet", "--no-prompt", "h=70", "m=0.3", "l=0.7"])

    captured = capsys.readouterr()
    assert status == 0
    assert [line for line in captured.out.splitlines() if "At z = " in line] == [
        "At z = 0.5", "At z = 1", "At z = 2",
    ]
    assert captured.err.count("Redshift must be numeric") == 1
    assert captured.err.count("The redshift must be a number >= 0.") == 1


def test_non_numeric_option_value_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--quiet", "--no-prompt", "--H0", "1e2", "-z", "1"])

    assert excinfo.value.code == 2
    assert "'1e2' is not a valid number" in capsys.readouterr().err

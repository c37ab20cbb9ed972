import json
import logging

import pandas as pd

from cosmic.utils.constants import COSMO_CONSTANTS_VERSION
from cosmic.utils.logging_config import StructuredLogger, build_run_metadata, compute_sha256


def test_logger_without_base_dir_keeps_nothing_on_disk(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    run_logger = StructuredLogger(run_id="console-only")

    run_logger.log_event("single_result", {"z": 1.0}, message="hello")

    assert not run_logger.persistent
    assert run_logger.events_path is None
    assert run_logger.save_json("meta.json", {"a": 1}) is None
    assert list(tmp_path.iterdir()) == []
    assert "hello" in capsys.readouterr().err


def test_logger_writes_events_and_artifacts(tmp_path):
    run_logger = StructuredLogger(run_id="run-1", base_dir=tmp_path, console_level=logging.WARNING)

    run_logger.log_event("batch_loaded", {"count": 3, "values": [0.1, 0.2]}, level=logging.DEBUG)
    table_path = run_logger.save_dataframe("results.csv", pd.DataFrame({"z": [0.1, 0.2]}))

    events = [json.loads(line) for line in run_logger.events_path.read_text(encoding="utf-8").splitlines()]
    assert events[0]["event"] == "batch_loaded"
    assert events[0]["level"] == "DEBUG"
    assert events[0]["payload"] == {"count": 3, "values": [0.1, 0.2]}
    assert table_path == tmp_path / "run-1" / "results.csv"
    assert pd.read_csv(table_path)["z"].tolist() == [0.1, 0.2]


def test_run_metadata_records_constants_version_and_checksums(tmp_path):
    run_logger = StructuredLogger(run_id="run-2", base_dir=tmp_path)
    data_file = tmp_path / "z.txt"
    data_file.write_text("0.5\n", encoding="utf-8")

    metadata = build_run_metadata(
        run_logger,
        arguments={"batch": str(data_file)},
        config_snapshot={},
        parameters={"H0": 70.0},
        results_path=None,
        checksums={"batch": compute_sha256(data_file), "missing": compute_sha256(tmp_path / "nope")},
    )

    assert metadata["run_id"] == "run-2"
    assert metadata["constants_version"] == COSMO_CONSTANTS_VERSION
    assert list(metadata["checksums"]) == ["batch"]
    assert len(metadata["checksums"]["batch"]) == 64
    assert metadata["results_path"] is None

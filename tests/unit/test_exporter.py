"""Unit tests for src.application.services.exporter module."""

import json
import os

import pytest

from src.application.services.exporter import (
    ResultExporter,
    comparison_to_dataframe,
    to_dataframe,
)
from src.core.exceptions import DataLoadError


class TestResultExporter:
    """Save and load runs."""

    def test_creates_output_dir(self, tmp_path):
        target = tmp_path / "out"
        ResultExporter(str(target))
        assert target.is_dir()

    def test_save_payload(self, tmp_path, results):
        path = ResultExporter(str(tmp_path)).save_results(results, prefix="run", metadata={"preset": "moderate"})
        assert os.path.basename(path).startswith("run_")
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
        assert payload["metadata"]["preset"] == "moderate"
        assert payload["metadata"]["horizon_years"] == 15
        assert len(payload["results"]["financed"]) == 15
        assert payload["results"]["input_params"]["passthrough_llc"] == "yes"

    def test_reload(self, tmp_path, results):
        exporter = ResultExporter(str(tmp_path))
        loaded = exporter.load_results(exporter.save_results(results))
        assert loaded.financed[-1].net_worth == pytest.approx(results.financed[-1].net_worth)
        assert loaded.input_params == results.input_params
        assert loaded.summary_metrics == results.summary_metrics

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataLoadError):
            ResultExporter(str(tmp_path)).load_results(str(tmp_path / "missing.json"))

    def test_not_a_saved_run(self, tmp_path):
        path = tmp_path / "other.json"
        path.write_text(json.dumps({"strategies": []}), encoding="utf-8")
        with pytest.raises(DataLoadError):
            ResultExporter(str(tmp_path)).load_results(str(path))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DataLoadError):
            ResultExporter(str(tmp_path)).load_results(str(path))


class TestDataFrames:
    """pandas views of a run."""

    def test_strategy_frame(self, results):
        df = to_dataframe(results, "financed")
        assert list(df.index) == list(range(1, 16))
        assert df.loc[1, "new_units"] == 2
        assert "net_worth" in df.columns

    def test_comparison_frame(self, results):
        df = comparison_to_dataframe(results)
        assert len(df) == 15
        assert {"net_worth_diff", "self_available_cash"} <= set(df.columns)

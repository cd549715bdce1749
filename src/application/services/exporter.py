"""Export services for simulation results.

Handles saving runs to JSON files for persistence, reloading them, and
flattening them into pandas frames for analysis.
"""

import json
import os
from datetime import datetime
from typing import Any, Dict, Optional

import pandas as pd
from pydantic import ValidationError

from src.core.exceptions import DataLoadError
from src.core.logging import get_logger
from src.core.settings import get_settings
from src.domain.models.results import CalculationResults, StrategyKind

log = get_logger(__name__)


class ResultExporter:
    """Handles exporting of simulation results."""

    def __init__(self, output_dir: Optional[str] = None):
        """Initialize exporter.

        Args:
            output_dir: Directory where results will be saved. Defaults to
                the configured ``RENTSIM_OUTPUT_DIR``.
        """
        self.output_dir = output_dir or get_settings().output_dir
        self._ensure_dir()

    def _ensure_dir(self):
        """Ensure output directory exists."""
        if not os.path.exists(self.output_dir):
            os.makedirs(self.output_dir)
            log.info("created_output_directory", path=self.output_dir)

    def save_results(
        self,
        results: CalculationResults,
        prefix: str = "simulation",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        """Save a run to a JSON file.

        Args:
            results: Completed run.
            prefix: Filename prefix.
            metadata: Optional metadata to include in the file (e.g. preset used).

        Returns:
            Path to the saved file, or None when export is disabled.
        """
        if not get_settings().enable_export:
            log.info("results_export_disabled")
            return None

        now = datetime.now()
        filename = f"{prefix}_{now.strftime('%Y%m%d_%H%M%S_%f')}.json"
        filepath = os.path.join(self.output_dir, filename)

        payload = {
            "metadata": {
                "timestamp": now.isoformat(),
                "horizon_years": results.horizon_years,
                **(metadata or {}),
            },
            "results": results.model_dump(mode="json"),
        }

        try:
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
        except OSError as e:
            log.error("results_save_failed", path=filepath, error=str(e))
            raise

        log.info("results_saved", path=filepath, years=results.horizon_years)
        return filepath

    def load_results(self, path: str) -> CalculationResults:
        """Load a run previously written by ``save_results``.

        Raises:
            DataLoadError: If the file is missing, not JSON, or not a saved run.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
            results = CalculationResults.model_validate(payload["results"])
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            log.error("results_load_failed", path=path, error=str(e))
            raise DataLoadError(f"Cannot load results from {path}: {e}") from e

        log.info("results_loaded", path=path, years=results.horizon_years)
        return results


def to_dataframe(results: CalculationResults, strategy: StrategyKind | str) -> pd.DataFrame:
    """Per-year metrics of one strategy, indexed by year."""
    rows = [r.model_dump() for r in results.records(strategy)]
    return pd.DataFrame(rows).set_index("year")


def comparison_to_dataframe(results: CalculationResults) -> pd.DataFrame:
    """Side-by-side comparison rows merged with the cash detail, indexed by year."""
    comparison = pd.DataFrame([r.model_dump() for r in results.comparison]).set_index("year")
    detail = pd.DataFrame([r.model_dump() for r in results.detailed_data]).set_index("year")
    return comparison.join(detail)

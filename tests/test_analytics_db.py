import sys
import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.analytics import db as analytics_db  # noqa: E402


class AiRunLedgerTests(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        settings = SimpleNamespace(
            analytics_enabled=True,
            analytics_db_path=str(Path(self.tmp_dir.name) / "analytics.db"),
            analytics_retention_days=180,
        )
        self.patcher = patch.object(analytics_db, "settings", settings)
        self.patcher.start()
        analytics_db.init_db()

    def tearDown(self):
        self.patcher.stop()
        self.tmp_dir.cleanup()

    def test_summary_groups_runs_by_status_and_error(self):
        analytics_db.log_ai_analysis_run(
            run_id="r1", tool_slug="generate-bullets", model="m", schema_valid=True, status="success", latency_ms=12
        )
        analytics_db.log_ai_analysis_run(
            run_id="r2",
            tool_slug="generate-bullets",
            model="m",
            schema_valid=False,
            status="invalid_schema",
            error_code="MalformedJson",
            latency_ms=30,
        )
        summary = analytics_db.get_ai_run_summary()
        self.assertTrue(summary["enabled"])
        self.assertEqual(summary["total"], 2)
        self.assertEqual(summary["by_error"], [{"error_code": "MalformedJson", "count": 1}])
        statuses = {row["status"]: row["count"] for row in summary["by_status"]}
        self.assertEqual(statuses, {"invalid_schema": 1, "success": 1})

    def test_purge_keeps_recent_runs(self):
        analytics_db.log_ai_analysis_run(
            run_id="r1", tool_slug="compare-portfolio", model="m", schema_valid=True, status="success"
        )
        self.assertEqual(analytics_db.purge_old_records(), {"ai_analysis_runs": 0})
        self.assertEqual(analytics_db.get_ai_run_summary()["total"], 1)


if __name__ == "__main__":
    unittest.main()

"""Deploy report generation service."""

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class DeployReportService:
    """Collects pipeline transitions and writes them as a JSON report.

    The report is only written when ``report_file`` is set; it is still
    collected in memory otherwise so the deployer can inspect it.
    """

    def __init__(self, report_file: Optional[str], logger):
        self.report_file = report_file
        self.logger = logger
        self.report: Dict[str, Any] = {
            "deploy_id": None,
            "status": "running",
            "started_at": None,
            "finished_at": None,
            "duration_seconds": None,
            "target": {},
            "container": None,
            "states": [],
            "error": None,
        }

    def start(self, deploy_id: str, target: Dict[str, Any]):
        self.report["deploy_id"] = deploy_id
        self.report["status"] = "running"
        self.report["started_at"] = self._now()
        self.report["target"] = target
        self.write()

    def state_entered(self, state: str):
        self.report["states"].append(
            {
                "name": state,
                "status": "running",
                "started_at": self._now(),
                "finished_at": None,
                "duration_seconds": None,
                "error": None,
            }
        )
        self.write()

    def state_finished(self, state: str, status: str, error: Optional[str] = None):
        for entry in reversed(self.report["states"]):
            if entry["name"] == state and entry["status"] == "running":
                entry["status"] = status
                entry["finished_at"] = self._now()
                entry["error"] = error
                started_at = datetime.fromisoformat(entry["started_at"])
                finished_at = datetime.fromisoformat(entry["finished_at"])
                entry["duration_seconds"] = (finished_at - started_at).total_seconds()
                break
        self.write()

    def set_container(self, container: Dict[str, Any]):
        self.report["container"] = container
        self.write()

    def state_names(self):
        return [entry["name"] for entry in self.report["states"]]

    def finalize(self, status: str, error: Optional[str] = None):
        self.report["status"] = status
        self.report["finished_at"] = self._now()
        if self.report.get("started_at"):
            started_at = datetime.fromisoformat(self.report["started_at"])
            finished_at = datetime.fromisoformat(self.report["finished_at"])
            self.report["duration_seconds"] = (finished_at - started_at).total_seconds()
        self.report["error"] = error
        self.write()

    def write(self):
        if not self.report_file:
            return

        directory = os.path.dirname(self.report_file) or "."
        try:
            os.makedirs(directory, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(prefix="deploy-report-", suffix=".json", dir=directory)
        except OSError as exc:
            self.logger.warning("Could not write deploy report '%s': %s", self.report_file, exc)
            return

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(self.report, file_obj, indent=2, sort_keys=True)
                file_obj.write("\n")
            os.replace(temp_path, self.report_file)
        except OSError as exc:
            self.logger.warning("Could not write deploy report '%s': %s", self.report_file, exc)
            try:
                os.remove(temp_path)
            except OSError:
                pass

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

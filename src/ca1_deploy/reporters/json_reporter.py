"""
JSON Reporter — export a provision or teardown result to JSON.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ca1_deploy.__version__ import __version__

logger = logging.getLogger("ca1-deploy.reporters.json")


class JSONReporter:
    """Writes run results as JSON documents."""

    def __init__(self, output_dir: str = ".") -> None:
        self.output_dir = Path(output_dir)

    def generate(self, result: Any, operation: str, filename: Optional[str] = None) -> str:
        """
        Generate a JSON report file.

        Args:
            result: ProvisionResult or TeardownResult.
            operation: "provision" or "teardown".
            filename: Optional file name or path, relative to output_dir.

        Returns:
            Path to the generated report file.
        """
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        filename = filename or f"ca1_{operation}_{timestamp}.json"
        filepath = self.output_dir / filename
        filepath.parent.mkdir(parents=True, exist_ok=True)

        report = {
            "metadata": {
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "tool": "ca1-deploy",
                "version": __version__,
                "operation": operation,
            },
            "result": result.to_dict(),
        }

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, default=str)

        logger.info(f"JSON report saved to {filepath}")
        return str(filepath)

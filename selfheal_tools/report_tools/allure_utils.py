"""
================================================================================
Allure Report Utilities
================================================================================

This module provides helpers for enriching Allure test reports with
self-healing telemetry and for building the HTML report after a run.

Features:
- JSON / text attachment helpers
- Healing report attachment (text summary + JSON records)
- Allure HTML report generation

================================================================================
"""

import json
import subprocess
from pathlib import Path
from typing import Any, Optional

import allure
from loguru import logger


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to Allure report.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text"):
    """
    Attach text content to Allure report.

    Args:
        text: Text to attach
        name: Attachment name
    """
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


def attach_healing_report(reporter: Any, name: str = "Self-Healing Report") -> bool:
    """
    Attach a healing reporter's text report and JSON records.

    Nothing is attached when the reporter holds no records.

    Args:
        reporter: Object exposing report(), to_dict() and __len__ (HealingReporter)
        name: Attachment name prefix

    Returns:
        True if anything was attached
    """
    if len(reporter) == 0:
        return False
    attach_text(reporter.report(), name=name)
    attach_json(reporter.to_dict(), name=f"{name} (JSON)")
    return True


# ================================================================================
# Report Generation
# ================================================================================

def generate_allure_report(
    results_dir: str,
    output_dir: Optional[str] = None,
) -> bool:
    """
    Generate Allure HTML report from results.

    Args:
        results_dir: Path to allure-results directory
        output_dir: Optional output directory (default: sibling allure-report)

    Returns:
        True if successful
    """
    results_path = Path(results_dir)
    report_path = Path(output_dir) if output_dir else results_path.parent / "allure-report"

    cmd = [
        "allure", "generate",
        str(results_path),
        "-o", str(report_path),
        "--clean"
    ]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError:
        logger.error("Allure command not found. Install allure-commandline.")
        return False

    if result.returncode != 0:
        logger.error(f"Report generation failed: {result.stderr}")
        return False

    logger.info(f"Report generated at {report_path}")
    return True

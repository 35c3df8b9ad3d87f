"""
Repository-level pytest configuration (showcase-safe).

Why this exists:
  - Provide safe defaults for demo environments (no secrets embedded)
  - Keep AI healing off unless the user/CI opts in explicitly
  - Keep behavior explicit and discoverable

Important:
  Values below are placeholders. Real projects should load secrets
  (e.g. ANTHROPIC_API_KEY) from a secure secret manager in CI/CD.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _demo_safe_env_defaults() -> Generator[None, None, None]:
    """
    Set demo-safe environment defaults if not already provided by the user/CI.

    AI healing costs money per call, so it stays disabled unless
    AI_HEALING_ENABLED=true is set together with ANTHROPIC_API_KEY.
    """
    defaults = {
        # UI
        "UI_BASE_URL": "http://localhost:3000",
        "UI_USERNAME": "demo_user",
        "UI_PASSWORD": "demo_password",
        # Healing
        "AI_HEALING_ENABLED": "false",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield

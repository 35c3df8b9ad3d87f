"""
Test suites package.

This repository intentionally keeps `healing_suites` importable to support:
  - IDE navigation
  - programmatic runners (e.g., `run_tests.py`)
  - page objects and the healing framework being imported by test modules

All content is demo-safe and does not include production secrets.
"""

"""
Session management for SAS Copilot.

- engine: Interactive read-eval-print loop and session state
- transcript: Per-run transcript log files
- retention: Age-based pruning of old transcript logs
"""

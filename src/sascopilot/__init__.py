"""
SAS Copilot: a terminal assistant for SAS, SQL and related questions.
"""

__version__ = "0.1.0"

"""Cloud Function Entry Point - Root Module.

This is the root-level entry point for Google Cloud Functions.
It imports from the petsearch package.
"""

from petsearch.main import escalate_case

__all__ = [
    "escalate_case",
]

"""
Infrastructure module exports.

Bootstrap for the memo repository backend.
"""

from .bootstrap import InfraBootstrap, bootstrap_infrastructure, create_memo_repository

__all__ = [
    "InfraBootstrap",
    "bootstrap_infrastructure",
    "create_memo_repository",
]

# ragindex_sdk/database/__init__.py
# SPDX-License-Identifier: Apache-2.0

"""
Database facade - Public API
"""

from ragindex_sdk.database.service import DatabaseService, DatabaseStats
from ragindex_sdk.database.operations import DatabaseOperations, database_session

__all__ = [
    "DatabaseService",
    "DatabaseStats",
    "DatabaseOperations",
    "database_session",
]

"""
Repository pattern: generic data access over MongoDB with audit timestamps and soft delete.
"""

from .base import IRepository, MongoRepository, Pipeline
from .filters import ASCENDING, DESCENDING, Filter, merge_filter

__all__ = ["IRepository", "MongoRepository", "Pipeline", "Filter", "merge_filter", "ASCENDING", "DESCENDING"]

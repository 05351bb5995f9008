"""
docstore: generic MongoDB data-access layer with audit timestamps and soft delete.
"""

from docstore.models import Document, Model
from docstore.repository import Filter, MongoRepository, merge_filter

__all__ = ["Document", "Model", "Filter", "MongoRepository", "merge_filter"]

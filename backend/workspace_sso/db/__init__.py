"""Database package"""

from workspace_sso.db.session import AsyncSessionLocal, engine, get_db, transaction
from workspace_sso.models.base import Base

__all__ = ["Base", "AsyncSessionLocal", "engine", "get_db", "transaction"]

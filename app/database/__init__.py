"""Database configuration, models, and session management."""

from app.database.config import engine, Base, AsyncSessionLocal
from app.database import models

__all__ = ["engine", "Base", "AsyncSessionLocal", "models"]

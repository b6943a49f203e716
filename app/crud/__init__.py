"""
CRUD operations (Create, Read, Update, Delete) for database models.

This layer provides a clean separation between API routes and database operations,
following the Repository pattern.
"""

from app.crud import job_seeker
from app.crud.base import CRUDBase

__all__ = ["CRUDBase", "job_seeker"]

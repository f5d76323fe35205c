from fastapi import Depends
from sqlalchemy.orm import Session

from .database import get_db
from .services.hierarchy import HierarchyManager


def get_hierarchy(db: Session = Depends(get_db)) -> HierarchyManager:
    """HierarchyManager bound to the request's session."""
    return HierarchyManager(db)

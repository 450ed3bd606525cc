"""ORM model registry for metadata discovery."""

from restwell.db.models.user import Base
from restwell.db.models.user import User

__all__ = ["Base", "User"]

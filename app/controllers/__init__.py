"""FastAPI routers acting as controllers in the MVC architecture."""

from . import conversation, issues, sentiment

__all__ = ["conversation", "issues", "sentiment"]

"""Database models."""

from db import Base

# Import all models so Alembic can detect them
from models.user import User
from models.client import Client
from models.project import Project
from models.links import ClientUser, ProjectClient, ProjectUser
from models.invoice import Invoice, Payment
from models.project_file import ProjectFile
from models.recycle_bin_item import RecycleBinItem

__all__ = [
    "Base",
    "User",
    "Client",
    "ClientUser",
    "Project",
    "ProjectUser",
    "ProjectClient",
    "Invoice",
    "Payment",
    "ProjectFile",
    "RecycleBinItem",
]

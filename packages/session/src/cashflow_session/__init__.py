"""Cash Flow Foundation Session - per-user load, edit and debounced save."""

__version__ = "0.1.0"

from .config import CashflowConfig, PersistenceConfig, configure_logging
from .documents import dump_state, load_state
from .interfaces import AuthEvent, DocumentStore, IdentityProvider, UserSession
from .memory import InMemoryDocumentStore, InMemoryIdentityProvider
from .session import DashboardSession, SaveStatus

__all__ = [
    # Session
    "DashboardSession",
    "SaveStatus",
    # Collaborators
    "IdentityProvider",
    "DocumentStore",
    "UserSession",
    "AuthEvent",
    "InMemoryIdentityProvider",
    "InMemoryDocumentStore",
    # Documents
    "dump_state",
    "load_state",
    # Configuration
    "CashflowConfig",
    "PersistenceConfig",
    "configure_logging",
]

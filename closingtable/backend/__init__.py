"""Backend package for the Closing Table blind negotiation."""

from .config import BackendSettings, ConfigurationError, load_settings
from .mechanism import InvalidInput, MechanismConfig, compute_outcome
from .offers import OfferStore
from .reaper import Reaper, is_live
from .results import ResultStore
from .security import generate_id, generate_token, hash_token
from .service import NegotiationService, create_in_memory_service, create_service
from .store import EntryStore, InMemoryEntryStore, PostgresEntryStore, create_entry_store

__all__ = [
    "BackendSettings",
    "compute_outcome",
    "ConfigurationError",
    "create_entry_store",
    "create_in_memory_service",
    "create_service",
    "EntryStore",
    "generate_id",
    "generate_token",
    "hash_token",
    "InMemoryEntryStore",
    "InvalidInput",
    "is_live",
    "load_settings",
    "MechanismConfig",
    "NegotiationService",
    "OfferStore",
    "PostgresEntryStore",
    "Reaper",
    "ResultStore",
]

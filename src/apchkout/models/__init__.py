"""Data models for apchkout."""

from .base import ApchkoutBaseModel
from .settings import DatabaseSettings, DEFAULT_DB_HOST, DEFAULT_DB_PORT
from .workspace import (
    BranchAction,
    BranchDatabase,
    CheckoutResult,
    CheckoutState,
    DropCandidate,
)

__all__ = [
    "ApchkoutBaseModel",
    "DatabaseSettings",
    "DEFAULT_DB_HOST",
    "DEFAULT_DB_PORT",
    "BranchAction",
    "BranchDatabase",
    "CheckoutResult",
    "CheckoutState",
    "DropCandidate",
]

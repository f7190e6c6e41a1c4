"""Records produced by workspace operations."""

from enum import Enum
from typing import List, Optional
from pydantic import Field

from .base import ApchkoutBaseModel


class BranchAction(str, Enum):
    """How the requested branch was reached."""

    CHECKED_OUT = "checked_out"
    CHECKED_OUT_REMOTE = "checked_out_remote"
    CREATED = "created"


class CheckoutState(str, Enum):
    """Terminal state of a checkout."""

    SWITCHED = "switched"
    PROVISIONED_FRESH = "provisioned-fresh"
    PROVISIONED_EXISTING = "provisioned-existing"
    UNCHANGED = "unchanged"
    REVERTED = "reverted"


class BranchDatabase(ApchkoutBaseModel):
    """A database belonging to the base database family."""

    name: str = Field(description="Database name")
    branch_guess: str = Field(description="Best-effort branch name")
    is_active: bool = Field(default=False, description="Referenced by DB_NAME")


class DropCandidate(BranchDatabase):
    """A database considered for a bulk drop, with its warning flags."""

    has_branch: bool = Field(
        default=False, description="Guessed branch exists in git"
    )

    @property
    def reasons(self) -> List[str]:
        reasons = []
        if self.has_branch:
            reasons.append("has matching branch")
        if self.is_active:
            reasons.append("currently active database")
        return reasons

    @property
    def flagged(self) -> bool:
        return bool(self.reasons)


class CheckoutResult(ApchkoutBaseModel):
    """Outcome of a branch checkout."""

    branch: str = Field(description="Branch that is now checked out")
    branch_action: BranchAction = Field(description="How the branch was reached")
    state: CheckoutState = Field(description="Resulting database state")
    database: Optional[str] = Field(
        default=None, description="DB_NAME after the checkout"
    )
    migrated: bool = Field(default=False, description="Migrations and seed data ran")

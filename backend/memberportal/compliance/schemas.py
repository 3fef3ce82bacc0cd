"""Pydantic schemas for compliance reporting."""

from pydantic import Field

from ..schemas import CamelModel


class RetentionStatsResponse(CamelModel):
    """Point-in-time member counts for the compliance dashboard.

    These are live aggregates, not the statistics of a retention run.
    """
    active: int = Field(..., ge=0, description="Members not deleted")
    active_memberships: int = Field(..., ge=0, description="Members not deleted with status 'active'")
    soft_deleted: int = Field(..., ge=0, description="Deleted members not yet anonymized")
    anonymized: int = Field(..., ge=0, description="Anonymized members")
    upcoming_purge: int = Field(..., ge=0, description="Members the next run would soft-delete")


class ConsentStatsResponse(CamelModel):
    """Marketing consent distribution among members that are not deleted."""
    opted_in: int = Field(..., ge=0)
    opted_out: int = Field(..., ge=0)

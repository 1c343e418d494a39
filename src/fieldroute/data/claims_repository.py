"""Data access helpers for loading claim locations."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Sequence

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import ClaimRecord

logger = logging.getLogger(__name__)

CLAIM_COLUMNS = "id, claim_number, loss_location, property_address"
ACTIVE_CLAIM_STATUSES = ("open", "in_progress")
ACTIVE_CLAIM_LIMIT = 50


def _coerce_property_address(value: Any) -> Optional[dict[str, Any]]:
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            # plain text column
            return {"address": value}
        return parsed if isinstance(parsed, dict) else None
    return None


def claim_from_row(row: dict[str, Any]) -> ClaimRecord:
    loss_location = row.get("loss_location")
    return ClaimRecord(
        claim_id=str(row["id"]),
        claim_number=row.get("claim_number"),
        loss_location=loss_location.strip() if isinstance(loss_location, str) and loss_location.strip() else None,
        property_address=_coerce_property_address(row.get("property_address")),
        raw=row,
    )


def resolve_claim_address(claim: ClaimRecord, fallback: str | None = None) -> str:
    """Pick the address used for geocoding and display.

    Loss location wins, then the nested property address, then the fallback literal.
    """
    if claim.loss_location:
        return claim.loss_location
    nested = (claim.property_address or {}).get("address")
    if isinstance(nested, str) and nested.strip():
        return nested.strip()
    return fallback if fallback is not None else settings.unknown_address


class ClaimRepository:
    """Read-only access to claim rows in Supabase."""

    def __init__(self, table: str | None = None) -> None:
        self.table = table or settings.claims_table

    def get_claim(self, claim_id: str) -> ClaimRecord | None:
        supabase = get_supabase_client()
        if not supabase:
            logger.warning("Database not configured - cannot fetch claim %s", claim_id)
            return None

        try:
            response = supabase.table(self.table).select(CLAIM_COLUMNS).eq("id", claim_id).limit(1).execute()
        except Exception as e:
            logger.warning(f"Failed to retrieve claim '{claim_id}' from database: {e}")
            return None

        if not response.data:
            logger.info(f"Claim '{claim_id}' not found in database")
            return None
        return claim_from_row(response.data[0])

    def list_claims(
        self,
        status: str | Sequence[str] | None = None,
        limit: int = 100,
        *,
        with_location: bool = False,
    ) -> list[ClaimRecord]:
        """Newest claims first, optionally restricted to one or more statuses.

        ``with_location`` keeps only rows whose loss location is set.
        """
        supabase = get_supabase_client()
        if not supabase:
            logger.warning("Database not configured - cannot list claims")
            return []

        try:
            query = supabase.table(self.table).select(CLAIM_COLUMNS)
            if isinstance(status, str):
                query = query.eq("status", status)
            elif status:
                query = query.in_("status", list(status))
            if with_location:
                query = query.not_.is_("loss_location", "null")
            response = query.order("created_at", desc=True).limit(limit).execute()
        except Exception as e:
            logger.warning(f"Failed to list claims from database: {e}")
            return []

        return [claim_from_row(row) for row in (response.data or [])]

    def list_active_claims(self, limit: int = ACTIVE_CLAIM_LIMIT) -> list[ClaimRecord]:
        """Open and in-progress claims that have a loss location to visit."""
        claims = self.list_claims(status=ACTIVE_CLAIM_STATUSES, limit=limit, with_location=True)
        logger.info(f"Loaded {len(claims)} active claims for routing")
        return claims

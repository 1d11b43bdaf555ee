"""Client-side assignment of leads to BOEs: single, bulk and even distribution."""

import logging
import math
from typing import Iterable, List, Sequence

from backend.app.core.errors import RemoteError
from backend.app.schemas.assignment import BulkAssignResult, DistributionChunk, DistributionResult
from backend.app.services.leads_api_client import LeadsApiClient

logger = logging.getLogger(__name__)


def chunk_lead_ids(lead_ids: Sequence[int], agent_count: int) -> List[List[int]]:
    """Split into ``ceil(N / K)``-sized contiguous chunks, in input order.

    Fewer than ``agent_count`` chunks come back when there are not enough leads.
    """
    if agent_count <= 0:
        raise ValueError("At least one BOE is required")
    if not lead_ids:
        return []
    size = math.ceil(len(lead_ids) / agent_count)
    return [list(lead_ids[i : i + size]) for i in range(0, len(lead_ids), size)]


def order_unassigned_first(leads: Iterable) -> list:
    return sorted(leads, key=lambda lead: lead.assigned_boe_id is not None)


def unassigned_lead_ids(leads: Iterable) -> List[int]:
    return [lead.id for lead in order_unassigned_first(leads) if lead.assigned_boe_id is None]


class AssignmentDistributor:
    """No call is atomic across leads; partial success is reported, never rolled back."""

    def __init__(self, client: LeadsApiClient):
        self.client = client

    def assign(self, lead_id: int, boe_id: int) -> bool:
        try:
            self.client.assign(lead_id, boe_id)
        except RemoteError as exc:
            logger.warning("Assign lead %s to BOE %s failed: %s", lead_id, boe_id, exc)
            return False
        return True

    def bulk_assign(self, lead_ids: Sequence[int], boe_id: int) -> BulkAssignResult:
        if not lead_ids:
            return BulkAssignResult(assigned=0, failed=0, total=0)
        result = self.client.bulk_assign(list(lead_ids), boe_id)
        if result.failed:
            logger.warning(
                "Bulk assign to BOE %s: %s of %s leads failed", boe_id, result.failed, result.total
            )
        return result

    def distribute(self, lead_ids: Sequence[int], boe_ids: Sequence[int]) -> DistributionResult:
        """Bulk-assign chunk *i* to BOE *i*; BOEs past the last chunk get a zero row and no request."""
        lead_chunks = chunk_lead_ids(lead_ids, len(boe_ids))
        chunks: List[DistributionChunk] = []
        for index, boe_id in enumerate(boe_ids):
            if index >= len(lead_chunks):
                chunks.append(DistributionChunk(boe_id=boe_id, lead_ids=[]))
                continue
            chunk = lead_chunks[index]
            row = DistributionChunk(boe_id=boe_id, lead_ids=chunk)
            try:
                result = self.client.bulk_assign(chunk, boe_id)
            except RemoteError as exc:
                logger.error("Distribute chunk of %s leads to BOE %s failed: %s", len(chunk), boe_id, exc)
                row.failed = len(chunk)
                row.error = str(exc)
            else:
                row.assigned = result.assigned
                row.failed = result.failed
            chunks.append(row)

        assigned = sum(row.assigned for row in chunks)
        failed = sum(row.failed for row in chunks)
        if failed:
            logger.warning("Distributed %s of %s leads, %s failed", assigned, len(lead_ids), failed)
        else:
            logger.info("Distributed %s leads across %s BOEs", assigned, len(lead_chunks))
        return DistributionResult(chunks=chunks, assigned=assigned, failed=failed, total=len(lead_ids))

    def assign_all_unassigned(self, leads: Iterable, boe_id: int) -> BulkAssignResult:
        return self.bulk_assign(unassigned_lead_ids(leads), boe_id)

    def distribute_unassigned(self, leads: Iterable, boe_ids: Sequence[int]) -> DistributionResult:
        return self.distribute(unassigned_lead_ids(leads), boe_ids)

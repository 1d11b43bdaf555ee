"""Assignment request and result schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from backend.app.core.errors import PartialBatchFailure


class AssignRequest(BaseModel):
    boe_id: Optional[int] = None


class BulkAssignRequest(BaseModel):
    lead_ids: List[int] = Field(default_factory=list)
    boe_id: Optional[int] = None


class BulkAssignResult(BaseModel):
    assigned: int
    failed: int
    total: int

    def raise_for_failures(self) -> None:
        if self.failed:
            raise PartialBatchFailure(self.assigned, self.failed, self.total)


class DistributionChunk(BaseModel):
    boe_id: int
    lead_ids: List[int]
    assigned: int = 0
    failed: int = 0
    error: Optional[str] = None


class DistributionResult(BaseModel):
    chunks: List[DistributionChunk]
    assigned: int
    failed: int
    total: int

    @property
    def per_agent_assigned(self) -> dict[int, int]:
        return {chunk.boe_id: chunk.assigned for chunk in self.chunks}

    def raise_for_failures(self) -> None:
        if self.failed:
            raise PartialBatchFailure(self.assigned, self.failed, self.total)

"""
Admin trigger for the delivery assignment sweep.
"""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rest_api.routers._common import ok
from rest_api.services.domain import AssignmentService
from shared.config.constants import AssignmentOutcome
from shared.infrastructure.db import get_db
from shared.utils.schemas import AssignmentResultOutput, Envelope, SweepSummaryOutput

from ._base import require_admin


router = APIRouter(prefix="/api/admin", tags=["admin-assignments"])


@router.post("/assignments/sweep", response_model=Envelope[SweepSummaryOutput])
def run_assignment_sweep(
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(require_admin),
) -> Envelope[SweepSummaryOutput]:
    """
    Try to assign every unassigned Out for Delivery order now,
    without waiting for the background sweeper.
    """
    summary = AssignmentService(db).sweep()
    result = SweepSummaryOutput(
        scanned=summary.scanned,
        assigned=summary.count(AssignmentOutcome.ASSIGNED),
        results=[AssignmentResultOutput.model_validate(r, from_attributes=True) for r in summary.results],
    )
    return ok(result, message=f"Assigned {result.assigned} of {result.scanned} orders")

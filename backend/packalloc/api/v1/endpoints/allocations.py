"""
Allocation Engine API Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from packalloc.schemas.allocation import AllocationComputeRequest, ReconcileRequest
from packalloc.schemas.common import APIResponse
from packalloc.services.allocation_engine import AllocationEngine, get_allocation_engine
from packalloc.services.allocation_report import allocation_csv
from packalloc.services.reconciliation import reconcile

router = APIRouter(prefix="/allocations", tags=["Allocation Engine"])


# ============================================================================
# Configuration
# ============================================================================

@router.get("/config", response_model=APIResponse)
async def get_allocation_config(engine: AllocationEngine = Depends(get_allocation_engine)):
    """Sizes, locations with roles, pack sequence and pack compositions."""
    return APIResponse(data=engine.describe())


# ============================================================================
# Compute Allocation
# ============================================================================

@router.post("/compute", response_model=APIResponse)
async def compute_allocation(
    body: AllocationComputeRequest,
    engine: AllocationEngine = Depends(get_allocation_engine),
):
    """
    Compute the allocation matrix for one product line.

    Stages:
    1. avail = min(buy, ship), overage = ship - buy
    2. Pack composition (with or without XXS)
    3. Pack counts from the pack sequence
    4. Office sample, then stores in sequence order
    5. Leftover + overage to the sink
    6. Hard cap at ship per size
    """
    try:
        result = engine.allocate(
            buy=body.buy,
            ship=body.ship,
            locations=body.locations,
            ignore_teaneck=body.ignore_teaneck,
            ignored_stores=body.ignored_stores,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    checks = reconcile(body.ship, result["allocation"], result["locations"], result["sizes"])
    result["allocation_matches_ship"] = checks["allocation_matches_ship"]
    return APIResponse(data=result, message="Allocation computed")


@router.post("/export")
async def export_allocation(
    body: AllocationComputeRequest,
    engine: AllocationEngine = Depends(get_allocation_engine),
):
    """Compute the allocation and return it as a CSV sheet."""
    try:
        result = engine.allocate(
            buy=body.buy,
            ship=body.ship,
            locations=body.locations,
            ignore_teaneck=body.ignore_teaneck,
            ignored_stores=body.ignored_stores,
        )
        csv_text = allocation_csv(result["allocation"], result["locations"], result["sizes"])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="allocation.csv"'},
    )


# ============================================================================
# Reconcile (closeout gate)
# ============================================================================

@router.post("/reconcile", response_model=APIResponse)
async def reconcile_allocation(
    body: ReconcileRequest,
    engine: AllocationEngine = Depends(get_allocation_engine),
):
    """Compare allocation totals with ship units, and scan totals with the allocation."""
    locations = body.locations or engine.default_locations
    result = reconcile(
        ship=body.ship,
        allocation=body.allocation,
        locations=locations,
        sizes=engine.sizes,
        scanned=body.scanned,
    )
    message = "Ready for closeout" if result["ready_for_closeout"] else "Totals do not match"
    return APIResponse(data=result, message=message)

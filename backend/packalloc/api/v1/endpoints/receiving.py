"""
Receiving (Scan Entry) API Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException

from packalloc.schemas.allocation import ScanRequest
from packalloc.schemas.common import APIResponse
from packalloc.services.allocation_engine import AllocationEngine, get_allocation_engine
from packalloc.services.receiving import ReceivingSession

router = APIRouter(prefix="/receiving", tags=["Receiving"])


@router.post("/scan", response_model=APIResponse)
async def scan_unit(
    body: ScanRequest,
    engine: AllocationEngine = Depends(get_allocation_engine),
):
    """
    Apply one scan to the supplied scan matrix.

    Stateless: the client sends the allocation and its current scan matrix
    and gets back the outcome plus the updated matrix.
    """
    session = ReceivingSession(
        allocation=body.allocation,
        locations=body.locations or engine.default_locations,
        sizes=engine.sizes,
        scanned=body.scanned,
    )
    try:
        outcome = session.scan(body.location, body.size, override=body.override)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if outcome["accepted"]:
        message = f"Scanned 1 → {outcome['location']} {outcome['size']}"
    else:
        message = f"Over allocation blocked: {outcome['location']} {outcome['size']} (alloc {outcome['allocated']})"

    return APIResponse(
        message=message,
        data={
            "outcome": outcome,
            "scanned": session.to_dict(),
            "totals": session.totals(),
        },
    )

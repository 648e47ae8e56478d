"""
api/routes/v1/liabilities.py -- Liability routes (debts, loans, balances owed).

Routes:
  GET    /liabilities                  -- list, newest first
  POST   /liabilities                  -- create (201)
  PUT    /liabilities/{liability_id}   -- replace fields
  DELETE /liabilities/{liability_id}   -- delete
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from api.limiter import limiter
from api.models import ErrorDetail, LiabilityIn, LiabilityOut, MessageResponse
from auth.dependencies import require_user_id
from ledger.models import Liability
from ledger.store import LedgerStore

router = APIRouter()


def _not_found(liability_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(code="not_found", message=f"Liability {liability_id} not found").model_dump(),
    )


@limiter.limit("60/minute")
@router.get("/liabilities", response_model=list[LiabilityOut])
def list_liabilities(request: Request, user_id: int = Depends(require_user_id)) -> list[LiabilityOut]:
    ledger: LedgerStore = request.app.state.ledger
    return [LiabilityOut.from_liability(li) for li in ledger.list_liabilities(user_id)]


@limiter.limit("30/minute")
@router.post("/liabilities", response_model=LiabilityOut, status_code=201)
def create_liability(request: Request, body: LiabilityIn, user_id: int = Depends(require_user_id)) -> LiabilityOut:
    ledger: LedgerStore = request.app.state.ledger
    liability_id = ledger.create_liability(
        Liability(user_id=user_id, name=body.name, amount=body.amount, description=body.description)
    )
    return LiabilityOut.from_liability(ledger.get_liability(user_id, liability_id))


@limiter.limit("30/minute")
@router.put("/liabilities/{liability_id}", response_model=LiabilityOut)
def update_liability(
    request: Request,
    liability_id: int,
    body: LiabilityIn,
    user_id: int = Depends(require_user_id),
) -> LiabilityOut:
    ledger: LedgerStore = request.app.state.ledger
    updated = ledger.update_liability(
        Liability(id=liability_id, user_id=user_id, name=body.name, amount=body.amount, description=body.description)
    )
    if not updated:
        raise _not_found(liability_id)
    return LiabilityOut.from_liability(ledger.get_liability(user_id, liability_id))


@limiter.limit("30/minute")
@router.delete("/liabilities/{liability_id}", response_model=MessageResponse)
def delete_liability(
    request: Request,
    liability_id: int,
    user_id: int = Depends(require_user_id),
) -> MessageResponse:
    ledger: LedgerStore = request.app.state.ledger
    if not ledger.delete_liability(user_id, liability_id):
        raise _not_found(liability_id)
    return MessageResponse(message="Liability deleted successfully")

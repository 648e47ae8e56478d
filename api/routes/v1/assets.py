"""
api/routes/v1/assets.py -- Asset routes (things the user owns).

Routes:
  GET    /assets              -- list the caller's assets, newest first
  POST   /assets              -- create asset (201)
  PUT    /assets/{asset_id}   -- replace asset fields
  DELETE /assets/{asset_id}   -- delete asset

Every handler takes user_id from require_user_id and hands it to the store,
which filters on it. Another user's asset id behaves like a missing one (404).
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from api.limiter import limiter
from api.models import AssetIn, AssetOut, ErrorDetail, MessageResponse
from auth.dependencies import require_user_id
from ledger.models import Asset
from ledger.store import LedgerStore

router = APIRouter()


def _not_found(asset_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(code="not_found", message=f"Asset {asset_id} not found").model_dump(),
    )


@limiter.limit("60/minute")
@router.get("/assets", response_model=list[AssetOut])
def list_assets(request: Request, user_id: int = Depends(require_user_id)) -> list[AssetOut]:
    ledger: LedgerStore = request.app.state.ledger
    return [AssetOut.from_asset(a) for a in ledger.list_assets(user_id)]


@limiter.limit("30/minute")
@router.post("/assets", response_model=AssetOut, status_code=201)
def create_asset(request: Request, body: AssetIn, user_id: int = Depends(require_user_id)) -> AssetOut:
    """Record a new asset for the caller."""
    ledger: LedgerStore = request.app.state.ledger
    asset_id = ledger.create_asset(
        Asset(user_id=user_id, name=body.name, type=body.type, amount=body.amount, description=body.description)
    )
    return AssetOut.from_asset(ledger.get_asset(user_id, asset_id))


@limiter.limit("30/minute")
@router.put("/assets/{asset_id}", response_model=AssetOut)
def update_asset(
    request: Request,
    asset_id: int,
    body: AssetIn,
    user_id: int = Depends(require_user_id),
) -> AssetOut:
    ledger: LedgerStore = request.app.state.ledger
    updated = ledger.update_asset(
        Asset(
            id=asset_id,
            user_id=user_id,
            name=body.name,
            type=body.type,
            amount=body.amount,
            description=body.description,
        )
    )
    if not updated:
        raise _not_found(asset_id)
    return AssetOut.from_asset(ledger.get_asset(user_id, asset_id))


@limiter.limit("30/minute")
@router.delete("/assets/{asset_id}", response_model=MessageResponse)
def delete_asset(request: Request, asset_id: int, user_id: int = Depends(require_user_id)) -> MessageResponse:
    ledger: LedgerStore = request.app.state.ledger
    if not ledger.delete_asset(user_id, asset_id):
        raise _not_found(asset_id)
    return MessageResponse(message="Asset deleted successfully")

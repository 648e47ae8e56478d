"""
api/routes/v1/categories.py -- Spending category routes.

Routes:
  GET    /categories                  -- saved + used-on-expenses + defaults, by name
  POST   /categories                  -- create (201); 409 on duplicate name
  PUT    /categories/{category_id}    -- rename / re-budget; 409 on clash
  DELETE /categories/{category_id}    -- 400 while any expense uses it

Names are title-cased by the store, so duplicates are detected after
normalisation ("food & dining" clashes with "Food & Dining").
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter
from api.models import CategoryIn, CategoryOut, ErrorDetail, MessageResponse
from auth.dependencies import require_user_id
from ledger.models import Category
from ledger.store import LedgerStore

logger = logging.getLogger("fintrack.api.categories")

router = APIRouter()


def _not_found(category_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(code="not_found", message=f"Category {category_id} not found").model_dump(),
    )


def _conflict() -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=ErrorDetail(code="conflict", message="Category already exists").model_dump(),
    )


@limiter.limit("60/minute")
@router.get("/categories", response_model=list[CategoryOut])
def list_categories(request: Request, user_id: int = Depends(require_user_id)) -> list[CategoryOut]:
    """Return every category the caller can file an expense under."""
    ledger: LedgerStore = request.app.state.ledger
    return [CategoryOut.from_category(c) for c in ledger.list_categories(user_id)]


@limiter.limit("30/minute")
@router.post("/categories", response_model=CategoryOut, status_code=201)
def create_category(request: Request, body: CategoryIn, user_id: int = Depends(require_user_id)) -> CategoryOut:
    ledger: LedgerStore = request.app.state.ledger
    try:
        category_id = ledger.create_category(Category(user_id=user_id, name=body.name, budget=body.budget))
    except IntegrityError as exc:
        raise _conflict() from exc
    return CategoryOut.from_category(ledger.get_category(user_id, category_id))


@limiter.limit("30/minute")
@router.put("/categories/{category_id}", response_model=CategoryOut)
def update_category(
    request: Request,
    category_id: int,
    body: CategoryIn,
    user_id: int = Depends(require_user_id),
) -> CategoryOut:
    ledger: LedgerStore = request.app.state.ledger
    try:
        updated = ledger.update_category(Category(id=category_id, user_id=user_id, name=body.name, budget=body.budget))
    except IntegrityError as exc:
        raise _conflict() from exc
    if not updated:
        raise _not_found(category_id)
    return CategoryOut.from_category(ledger.get_category(user_id, category_id))


@limiter.limit("30/minute")
@router.delete("/categories/{category_id}", response_model=MessageResponse)
def delete_category(
    request: Request,
    category_id: int,
    user_id: int = Depends(require_user_id),
) -> MessageResponse:
    """Delete a saved category unless an expense still refers to it by name."""
    ledger: LedgerStore = request.app.state.ledger
    if ledger.category_in_use(user_id, category_id):
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(
                code="category_in_use",
                message="Cannot delete category that is being used in expenses",
            ).model_dump(),
        )
    if not ledger.delete_category(user_id, category_id):
        raise _not_found(category_id)
    logger.info("User %d deleted category %d", user_id, category_id)
    return MessageResponse(message="Category deleted successfully")

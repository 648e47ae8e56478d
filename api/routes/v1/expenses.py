"""
api/routes/v1/expenses.py -- Expense routes.

Routes:
  GET    /expenses                -- list the caller's expenses, latest date first
  POST   /expenses                -- create expense (201)
  PUT    /expenses/{expense_id}   -- replace expense fields
  DELETE /expenses/{expense_id}   -- delete expense

The category is free text. It does not have to match a saved category;
GET /categories folds names seen here into its list.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from api.limiter import limiter
from api.models import ErrorDetail, ExpenseIn, ExpenseOut, MessageResponse
from auth.dependencies import require_user_id
from ledger.models import Expense
from ledger.store import LedgerStore

router = APIRouter()


def _not_found(expense_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(code="not_found", message=f"Expense {expense_id} not found").model_dump(),
    )


def _to_expense(body: ExpenseIn, user_id: int, expense_id: int | None = None) -> Expense:
    return Expense(
        id=expense_id,
        user_id=user_id,
        amount=body.amount,
        category=body.category,
        description=body.description,
        date=body.date.isoformat(),
    )


@limiter.limit("60/minute")
@router.get("/expenses", response_model=list[ExpenseOut])
def list_expenses(request: Request, user_id: int = Depends(require_user_id)) -> list[ExpenseOut]:
    ledger: LedgerStore = request.app.state.ledger
    return [ExpenseOut.from_expense(e) for e in ledger.list_expenses(user_id)]


@limiter.limit("30/minute")
@router.post("/expenses", response_model=ExpenseOut, status_code=201)
def create_expense(request: Request, body: ExpenseIn, user_id: int = Depends(require_user_id)) -> ExpenseOut:
    ledger: LedgerStore = request.app.state.ledger
    expense_id = ledger.create_expense(_to_expense(body, user_id))
    return ExpenseOut.from_expense(ledger.get_expense(user_id, expense_id))


@limiter.limit("30/minute")
@router.put("/expenses/{expense_id}", response_model=ExpenseOut)
def update_expense(
    request: Request,
    expense_id: int,
    body: ExpenseIn,
    user_id: int = Depends(require_user_id),
) -> ExpenseOut:
    ledger: LedgerStore = request.app.state.ledger
    if not ledger.update_expense(_to_expense(body, user_id, expense_id)):
        raise _not_found(expense_id)
    return ExpenseOut.from_expense(ledger.get_expense(user_id, expense_id))


@limiter.limit("30/minute")
@router.delete("/expenses/{expense_id}", response_model=MessageResponse)
def delete_expense(request: Request, expense_id: int, user_id: int = Depends(require_user_id)) -> MessageResponse:
    ledger: LedgerStore = request.app.state.ledger
    if not ledger.delete_expense(user_id, expense_id):
        raise _not_found(expense_id)
    return MessageResponse(message="Expense deleted successfully")

"""
ledger/models.py -- Domain dataclasses for a user's financial records.

These are pure data containers with zero logic. Persistence and the
category-merge rules live in ledger/store.py.

Every record carries user_id. It is the row-scoping key: the store filters
every read, update and delete by it.

id is None before the record is written to the database.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Expense:
    user_id: int
    amount: float
    category: str
    date: str  # YYYY-MM-DD
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class Asset:
    """Something the user owns. type is free text ("Savings", "Stocks", ...)."""

    user_id: int
    name: str
    type: str
    amount: float
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""


@dataclass
class Liability:
    user_id: int
    name: str
    amount: float
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""


@dataclass
class Category:
    """A spending category with an optional monthly budget.

    Categories listed by the API but never saved (derived from expenses or
    from the built-in defaults) have id None and created_at None.
    """

    user_id: int
    name: str
    budget: Optional[float] = None
    id: Optional[int] = None
    created_at: Optional[str] = None

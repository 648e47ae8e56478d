"""
ledger/store.py -- SQLAlchemy-backed persistence for expenses, assets,
liabilities and categories.

Uses SQLAlchemy Core (not ORM) so the dataclasses in ledger/models.py remain
the authoritative domain representation. The same code runs on SQLite (local)
and Postgres (production); the engine decides.

Pattern: Repository + Data Mapper. LedgerStore is the repository (one clean
interface per entity). The _row_to_* functions are the mappers.

Row-scoping: every method takes user_id first and every statement filters on
it. An update or delete aimed at another user's row matches nothing and is
reported exactly like a missing row.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = LedgerStore(engine)
    expense_id = store.create_expense(Expense(user_id=1, amount=12.5, category="Food & Dining", date="2024-05-01"))
    store.list_expenses(user_id=1)
"""

import re
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Column,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
    select,
)
from sqlalchemy.engine import Engine

from ledger.models import Asset, Category, Expense, Liability

# Offered to every user until they save categories of their own with the same names.
DEFAULT_CATEGORIES: tuple[str, ...] = (
    "Food & Dining",
    "Transportation",
    "Healthcare",
    "Entertainment",
    "Shopping",
    "Bills & Utilities",
    "Other",
)

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_expenses = Table(
    "expenses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("amount", Float, nullable=False),
    Column("category", String(100), nullable=False),
    Column("description", Text),
    Column("date", String(10), nullable=False),  # YYYY-MM-DD
    Column("created_at", String(32), nullable=False),
)

_assets = Table(
    "assets",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("type", String(100), nullable=False),
    Column("amount", Float, nullable=False),
    Column("description", Text),
    Column("created_at", String(32), nullable=False),
)

_liabilities = Table(
    "liabilities",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("amount", Float, nullable=False),
    Column("description", Text),
    Column("created_at", String(32), nullable=False),
)

_categories = Table(
    "categories",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("name", String(100), nullable=False),
    Column("budget", Float),
    Column("created_at", String(32), nullable=False),
    UniqueConstraint("user_id", "name", name="uq_user_category"),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


_WORD_RE = re.compile(r"\w\S*")


def title_case(name: str) -> str:
    """Capitalise the first character of each word and lower-case the rest.

    A "word" starts at a word character and runs to the next whitespace, so
    "bills & utilities" -> "Bills & Utilities" and "o'neil's" -> "O'neil's".
    """
    return _WORD_RE.sub(lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), name)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class LedgerStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Shared row-scoped update/delete
    # ------------------------------------------------------------------

    def _update(self, table: Table, user_id: int, row_id: int, **values) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(
                table.update().where((table.c.id == row_id) & (table.c.user_id == user_id)).values(**values)
            )
            conn.commit()
        return result.rowcount > 0

    def _delete(self, table: Table, user_id: int, row_id: int) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(table.delete().where((table.c.id == row_id) & (table.c.user_id == user_id)))
            conn.commit()
        return result.rowcount > 0

    def _get(self, table: Table, user_id: int, row_id: int):
        with self.engine.connect() as conn:
            return conn.execute(
                table.select().where((table.c.id == row_id) & (table.c.user_id == user_id))
            ).fetchone()

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    def create_expense(self, expense: Expense) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(
                _expenses.insert().values(
                    user_id=expense.user_id,
                    amount=expense.amount,
                    category=expense.category,
                    description=expense.description,
                    date=expense.date,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_expense(self, user_id: int, expense_id: int) -> Optional[Expense]:
        row = self._get(_expenses, user_id, expense_id)
        return _row_to_expense(row) if row is not None else None

    def list_expenses(self, user_id: int) -> list[Expense]:
        """Return the user's expenses, most recent date first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _expenses.select()
                .where(_expenses.c.user_id == user_id)
                .order_by(_expenses.c.date.desc(), _expenses.c.id.desc())
            ).fetchall()
        return [_row_to_expense(r) for r in rows]

    def update_expense(self, expense: Expense) -> bool:
        """Overwrite an expense's fields. False if it does not exist for this user."""
        return self._update(
            _expenses,
            expense.user_id,
            expense.id,
            amount=expense.amount,
            category=expense.category,
            description=expense.description,
            date=expense.date,
        )

    def delete_expense(self, user_id: int, expense_id: int) -> bool:
        return self._delete(_expenses, user_id, expense_id)

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def create_asset(self, asset: Asset) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(
                _assets.insert().values(
                    user_id=asset.user_id,
                    name=asset.name,
                    type=asset.type,
                    amount=asset.amount,
                    description=asset.description,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_asset(self, user_id: int, asset_id: int) -> Optional[Asset]:
        row = self._get(_assets, user_id, asset_id)
        return _row_to_asset(row) if row is not None else None

    def list_assets(self, user_id: int) -> list[Asset]:
        """Return the user's assets, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _assets.select()
                .where(_assets.c.user_id == user_id)
                .order_by(_assets.c.created_at.desc(), _assets.c.id.desc())
            ).fetchall()
        return [_row_to_asset(r) for r in rows]

    def update_asset(self, asset: Asset) -> bool:
        return self._update(
            _assets,
            asset.user_id,
            asset.id,
            name=asset.name,
            type=asset.type,
            amount=asset.amount,
            description=asset.description,
        )

    def delete_asset(self, user_id: int, asset_id: int) -> bool:
        return self._delete(_assets, user_id, asset_id)

    # ------------------------------------------------------------------
    # Liabilities
    # ------------------------------------------------------------------

    def create_liability(self, liability: Liability) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(
                _liabilities.insert().values(
                    user_id=liability.user_id,
                    name=liability.name,
                    amount=liability.amount,
                    description=liability.description,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_liability(self, user_id: int, liability_id: int) -> Optional[Liability]:
        row = self._get(_liabilities, user_id, liability_id)
        return _row_to_liability(row) if row is not None else None

    def list_liabilities(self, user_id: int) -> list[Liability]:
        """Return the user's liabilities, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _liabilities.select()
                .where(_liabilities.c.user_id == user_id)
                .order_by(_liabilities.c.created_at.desc(), _liabilities.c.id.desc())
            ).fetchall()
        return [_row_to_liability(r) for r in rows]

    def update_liability(self, liability: Liability) -> bool:
        return self._update(
            _liabilities,
            liability.user_id,
            liability.id,
            name=liability.name,
            amount=liability.amount,
            description=liability.description,
        )

    def delete_liability(self, user_id: int, liability_id: int) -> bool:
        return self._delete(_liabilities, user_id, liability_id)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def create_category(self, category: Category) -> int:
        """Insert a category with a title-cased name.

        Raises sqlalchemy.exc.IntegrityError if the user already has a
        category with that name.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _categories.insert().values(
                    user_id=category.user_id,
                    name=title_case(category.name.strip()),
                    budget=category.budget,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_category(self, user_id: int, category_id: int) -> Optional[Category]:
        row = self._get(_categories, user_id, category_id)
        return _row_to_category(row) if row is not None else None

    def list_saved_categories(self, user_id: int) -> list[Category]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                _categories.select().where(_categories.c.user_id == user_id).order_by(_categories.c.name)
            ).fetchall()
        return [_row_to_category(r) for r in rows]

    def list_categories(self, user_id: int) -> list[Category]:
        """Return every category the user can pick from, sorted by name.

        Sources, in precedence order (first occurrence of a name wins):
          1. categories the user saved (with id and budget)
          2. distinct category names used on the user's expenses
          3. DEFAULT_CATEGORIES
        Entries from 2 and 3 are unsaved: id None, created_at None. Saved
        defaults keep their id. Budget is 0 for unsaved defaults and None for
        names seen only on expenses.
        """
        with self.engine.connect() as conn:
            used = conn.execute(
                select(_expenses.c.category)
                .where(_expenses.c.user_id == user_id)
                .distinct()
                .order_by(_expenses.c.category)
            ).fetchall()

        merged: dict[str, Category] = {}
        for cat in self.list_saved_categories(user_id):
            merged.setdefault(cat.name, cat)
        for (name,) in used:
            if name:
                merged.setdefault(name, Category(user_id=user_id, name=name))
        for name in DEFAULT_CATEGORIES:
            merged.setdefault(name, Category(user_id=user_id, name=name, budget=0.0))
        return sorted(merged.values(), key=lambda c: c.name)

    def update_category(self, category: Category) -> bool:
        """Rename and/or re-budget a category.

        Raises sqlalchemy.exc.IntegrityError if the new name clashes with
        another of the user's categories.
        """
        return self._update(
            _categories,
            category.user_id,
            category.id,
            name=title_case(category.name.strip()),
            budget=category.budget,
        )

    def category_in_use(self, user_id: int, category_id: int) -> bool:
        """True if any of the user's expenses is filed under this category's name."""
        name_subq = (
            select(_categories.c.name)
            .where((_categories.c.id == category_id) & (_categories.c.user_id == user_id))
            .scalar_subquery()
        )
        with self.engine.connect() as conn:
            count = conn.execute(
                select(func.count())
                .select_from(_expenses)
                .where((_expenses.c.user_id == user_id) & (_expenses.c.category == name_subq))
            ).scalar()
        return (count or 0) > 0

    def delete_category(self, user_id: int, category_id: int) -> bool:
        return self._delete(_categories, user_id, category_id)


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_expense(row) -> Expense:
    return Expense(
        id=row.id,
        user_id=row.user_id,
        amount=row.amount,
        category=row.category,
        description=row.description,
        date=row.date,
        created_at=row.created_at,
    )


def _row_to_asset(row) -> Asset:
    return Asset(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        type=row.type,
        amount=row.amount,
        description=row.description,
        created_at=row.created_at,
    )


def _row_to_liability(row) -> Liability:
    return Liability(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        amount=row.amount,
        description=row.description,
        created_at=row.created_at,
    )


def _row_to_category(row) -> Category:
    return Category(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        budget=row.budget,
        created_at=row.created_at,
    )

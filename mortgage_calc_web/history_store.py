"""Persistence layer for the calculator's search history.

The calculator page lists the most recent searches of each visitor so they
can be reopened with one click. This module keeps that history in a database
instead of the browser. It defaults to SQLite for local development, but
accepts any SQLAlchemy-compatible URL (e.g. PostgreSQL/MySQL).

The calculation engine never touches this store; it belongs to the web front
end only.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from sqlalchemy import Column, DateTime, Integer, Numeric, String, create_engine, select
from sqlalchemy.orm import declarative_base, sessionmaker

from mortgage_calc.data_models import CalculatorInputs

logger = logging.getLogger(__name__)

Base = declarative_base()


class SearchHistoryModel(Base):
    __tablename__ = "search_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_token = Column(String(64), index=True, nullable=False)
    property_price = Column(Numeric(14, 2), nullable=False)
    deposit = Column(Numeric(14, 2), nullable=False)
    interest_rate = Column(Numeric(8, 4), nullable=False)
    loan_term = Column(Integer, nullable=False)
    extra_payment = Column(Numeric(14, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class SearchHistoryStore:
    """Database-backed search history, newest first, capped per visitor."""

    def __init__(self, url: str, *, max_per_user: int = 5) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)
        self._max_per_user = max_per_user

    def list_searches(self, user_token: str) -> List[Dict[str, Any]]:
        if not user_token:
            return []
        with self._session_factory() as session:
            rows: Iterable[SearchHistoryModel] = session.execute(
                select(SearchHistoryModel)
                .where(SearchHistoryModel.user_token == user_token)
                .order_by(SearchHistoryModel.created_at.desc(), SearchHistoryModel.id.desc())
            ).scalars()
            return [self._to_dict(row) for row in rows]

    def add_search(self, user_token: str, inputs: CalculatorInputs) -> None:
        if not user_token:
            return
        payload = SearchHistoryModel(
            user_token=user_token,
            property_price=inputs.property_price,
            deposit=inputs.deposit,
            interest_rate=inputs.interest_rate,
            loan_term=inputs.loan_term,
            extra_payment=inputs.extra_payment,
        )
        with self._session_factory() as session:
            session.add(payload)
            session.commit()
        self._trim_user(user_token)

    def clear_searches(self, user_token: str) -> None:
        if not user_token:
            return
        with self._session_factory() as session:
            session.execute(
                SearchHistoryModel.__table__.delete().where(
                    SearchHistoryModel.user_token == user_token
                )
            )
            session.commit()

    def _trim_user(self, user_token: str) -> None:
        if not self._max_per_user or self._max_per_user < 0:
            return
        with self._session_factory() as session:
            rows = session.execute(
                select(SearchHistoryModel)
                .where(SearchHistoryModel.user_token == user_token)
                .order_by(SearchHistoryModel.created_at.desc(), SearchHistoryModel.id.desc())
            ).scalars().all()
            if len(rows) <= self._max_per_user:
                return
            for row in rows[self._max_per_user :]:
                session.delete(row)
            session.commit()
            logger.debug("Trimmed %d old searches", len(rows) - self._max_per_user)

    @staticmethod
    def _to_dict(row: SearchHistoryModel) -> Dict[str, Any]:
        return {
            "id": row.id,
            "property_price": float(row.property_price),
            "deposit": float(row.deposit),
            "interest_rate": float(row.interest_rate),
            "loan_term": row.loan_term,
            "extra_payment": float(row.extra_payment or Decimal("0")),
            "created_at": row.created_at.isoformat(),
        }


def create_store_from_env(url: str | None, max_per_user: int = 5) -> SearchHistoryStore:
    return SearchHistoryStore(url or "sqlite:///search_history.sqlite3", max_per_user=max_per_user)

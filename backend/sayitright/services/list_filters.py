"""Shared list filters for archives and templates"""

from datetime import date, datetime, time
from typing import List, Optional

from fastapi import Query
from pydantic import BaseModel, Field
from sqlalchemy import or_

from sayitright.core.errors import BadRequestError
from sayitright.core.filter_options import (
    OTHER_OPTION,
    PREDEFINED_PURPOSES,
    PREDEFINED_RELATIONSHIPS,
    PREDEFINED_TONES,
)


class ListFilterParams(BaseModel):
    """Pagination, search and filter parameters of a list query"""
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)
    q: Optional[str] = None
    tone: Optional[str] = None
    relationship: Optional[str] = None
    purpose: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_list_filters(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    q: Optional[str] = Query(None, max_length=200),
    tone: Optional[str] = Query(None),
    relationship: Optional[str] = Query(None),
    purpose: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
) -> ListFilterParams:
    """FastAPI dependency reading list parameters from the query string"""
    return ListFilterParams(
        page=page,
        limit=limit,
        q=q,
        tone=tone,
        relationship=relationship,
        purpose=purpose,
        date_from=date_from,
        date_to=date_to,
    )


def _option_condition(column, value: str, predefined):
    # __other__ selects everything outside the predefined list
    if value == OTHER_OPTION:
        return column.notin_(predefined)
    return column == value


def build_filter_conditions(model, user_id: str, params: ListFilterParams) -> List:
    """
    Build WHERE conditions for an Archive-like model.

    Args:
        model: Archive or Template
        user_id: Owner
        params: Query parameters

    Returns:
        List of SQLAlchemy conditions

    Raises:
        BadRequestError: ``from`` is after ``to``
    """
    if params.date_from and params.date_to and params.date_from > params.date_to:
        raise BadRequestError("시작 날짜는 종료 날짜보다 이를 수 없습니다.")

    conditions = [model.user_id == user_id]

    if params.q:
        term = params.q.strip()
        if term:
            conditions.append(
                or_(
                    model.content.icontains(term, autoescape=True),
                    model.title.icontains(term, autoescape=True),
                )
            )

    if params.tone:
        conditions.append(_option_condition(model.tone, params.tone, PREDEFINED_TONES))
    if params.relationship:
        conditions.append(
            _option_condition(model.relationship, params.relationship, PREDEFINED_RELATIONSHIPS)
        )
    if params.purpose:
        conditions.append(_option_condition(model.purpose, params.purpose, PREDEFINED_PURPOSES))

    if params.date_from:
        conditions.append(model.created_at >= datetime.combine(params.date_from, time.min))
    if params.date_to:
        # Inclusive through 23:59:59.999999
        conditions.append(model.created_at <= datetime.combine(params.date_to, time.max))

    return conditions

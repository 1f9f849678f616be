"""Template service

CRUD for reusable email templates with the per-tier save quota.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import Field
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.errors import ConflictError, ForbiddenError, NotFoundError
from sayitright.core.schemas import CamelModel
from sayitright.models.archive import Template, make_preview
from sayitright.models.user import User
from sayitright.services.credit_service import charge_credits
from sayitright.services.list_filters import ListFilterParams, build_filter_conditions
from sayitright.services.template_policy import can_create_template
from sayitright.services.tier_calculator import (
    SUBSCRIPTION,
    calculate_user_tier,
    has_active_subscription,
)

logger = logging.getLogger(__name__)

ALREADY_CONVERTED_MESSAGE = "이미 템플릿으로 전환된 아카이브입니다. 템플릿 페이지에서 확인하세요."


class CreateTemplateRequest(CamelModel):
    title: Optional[str] = Field(None, max_length=255)
    content: str = Field(..., min_length=1)
    tone: str = Field(..., max_length=50)
    relationship: Optional[str] = Field(None, max_length=50)
    purpose: Optional[str] = Field(None, max_length=50)
    rationale: Optional[str] = None
    source_archive_id: Optional[str] = Field(None, max_length=36)


class UpdateTemplateRequest(CamelModel):
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    tone: Optional[str] = Field(None, max_length=50)
    relationship: Optional[str] = Field(None, max_length=50)
    purpose: Optional[str] = Field(None, max_length=50)
    rationale: Optional[str] = None


def template_to_dict(template: Template) -> Dict[str, Any]:
    return {
        "id": template.id,
        "title": template.title,
        "content": template.content,
        "tone": template.tone,
        "purpose": template.purpose,
        "relationship": template.relationship,
        "rationale": template.rationale,
        "sourceArchiveId": template.source_archive_id,
        "createdAt": template.created_at.isoformat(),
        "updatedAt": template.updated_at.isoformat(),
    }


def template_to_list_item(template: Template) -> Dict[str, Any]:
    return {
        "id": template.id,
        "title": template.title,
        "preview": template.preview or make_preview(template.content or "") or "(내용 없음)",
        "tone": template.tone,
        "purpose": template.purpose,
        "relationship": template.relationship,
        "createdAt": template.created_at.isoformat(),
        "updatedAt": template.updated_at.isoformat(),
    }


def resolve_template_tier(user: User) -> str:
    """``subscription`` while a subscription is active, else the computed tier"""
    if has_active_subscription(user.subscriptions):
        return SUBSCRIPTION
    return calculate_user_tier(user.credit_balance, user.subscriptions)


class TemplateService:
    """Per-user template operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_templates(self, user_id: str, params: ListFilterParams) -> Dict[str, Any]:
        conditions = build_filter_conditions(Template, user_id, params)

        total = await self.db.scalar(
            select(func.count()).select_from(Template).where(*conditions)
        )
        result = await self.db.execute(
            select(Template)
            .where(*conditions)
            .order_by(Template.created_at.desc())
            .offset(params.offset)
            .limit(params.limit)
        )
        items = [template_to_list_item(t) for t in result.scalars().all()]

        logger.info(f"Listed {len(items)} templates for user {user_id} (total {total})")

        return {
            "items": items,
            "total": total or 0,
            "page": params.page,
            "limit": params.limit,
        }

    async def get_template(self, template_id: str, user_id: str) -> Template:
        """
        Raises:
            NotFoundError: no such template
            ForbiddenError: owned by someone else
        """
        template = await self.db.get(Template, template_id)

        if template is None:
            logger.warning(f"Template {template_id} not found")
            raise NotFoundError("Template를 찾을 수 없습니다.")

        if template.user_id != user_id:
            logger.warning(
                f"User {user_id} tried to access template {template_id} (owner: {template.user_id})"
            )
            raise ForbiddenError("이 Template에 접근할 권한이 없습니다.")

        return template

    async def create_template(self, user: User, body: CreateTemplateRequest) -> Dict[str, Any]:
        """
        Save a template, charging a credit past the free quota.

        The credit charge, its ledger row and the template insert commit
        together. The unique ``source_archive_id`` column is the final guard
        against converting the same archive twice.

        Returns:
            ``{id, message, creditCharged}``

        Raises:
            ConflictError: the source archive was already converted
            ForbiddenError: quota exhausted / not enough credit
        """
        if body.source_archive_id:
            existing = await self.db.scalar(
                select(Template.id).where(Template.source_archive_id == body.source_archive_id)
            )
            if existing:
                logger.warning(
                    f"Archive {body.source_archive_id} already converted to template {existing}"
                )
                raise ConflictError(ALREADY_CONVERTED_MESSAGE)

        current_count = await self.db.scalar(
            select(func.count()).select_from(Template).where(Template.user_id == user.id)
        )

        tier = resolve_template_tier(user)
        decision = can_create_template(tier, current_count, user.credit_balance)

        if not decision.allowed:
            logger.warning(
                f"Template creation denied for user {user.id} "
                f"(tier: {tier}, count: {current_count}): {decision.message}"
            )
            raise ForbiddenError(decision.message)

        credit_charged = 0
        try:
            if decision.requires_credit and decision.cost > 0:
                await charge_credits(
                    self.db,
                    user,
                    decision.cost,
                    reason="템플릿 저장",
                    insufficient_message="크레딧이 부족합니다. 크레딧을 충전하거나 구독하세요.",
                )
                credit_charged = decision.cost

            template = Template(
                user_id=user.id,
                source_archive_id=body.source_archive_id or None,
                title=body.title or None,
                content=body.content,
                preview=make_preview(body.content),
                tone=body.tone,
                relationship=body.relationship or None,
                purpose=body.purpose or None,
                rationale=body.rationale or None,
            )
            self.db.add(template)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            await self.db.refresh(user)
            if "source_archive_id" in str(e.orig):
                logger.warning(
                    f"Concurrent conversion of archive {body.source_archive_id} rejected by the database"
                )
                raise ConflictError(ALREADY_CONVERTED_MESSAGE)
            raise
        except ForbiddenError:
            await self.db.rollback()
            # rollback expires the caller's user
            await self.db.refresh(user)
            raise

        logger.info(
            f"User {user.id} (tier: {tier}) created template {template.id} "
            f"(count: {current_count + 1}, credit: {credit_charged}, "
            f"source: {body.source_archive_id or 'direct'})"
        )

        return {
            "id": template.id,
            "message": decision.message,
            "creditCharged": credit_charged,
        }

    async def update_template(
        self,
        template_id: str,
        user_id: str,
        body: UpdateTemplateRequest,
    ) -> Template:
        """Partial update; empty optional strings clear the field"""
        template = await self.get_template(template_id, user_id)
        changes = body.model_dump(exclude_unset=True)

        for field in ("title", "purpose", "relationship", "rationale"):
            if field in changes:
                setattr(template, field, changes[field] or None)

        if changes.get("tone") is not None:
            template.tone = changes["tone"]

        if changes.get("content") is not None:
            template.content = changes["content"]
            template.preview = make_preview(changes["content"])

        await self.db.commit()
        await self.db.refresh(template)

        logger.info(f"Template {template_id} updated")
        return template

    async def delete_template(self, template_id: str, user_id: str) -> None:
        template = await self.get_template(template_id, user_id)
        await self.db.delete(template)
        await self.db.commit()
        logger.info(f"Template {template_id} deleted")


def create_template_service(db: AsyncSession) -> TemplateService:
    return TemplateService(db)

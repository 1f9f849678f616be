"""Template API"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.auth_deps import get_current_user
from sayitright.core.database import get_db
from sayitright.core.responses import ok
from sayitright.models.user import User
from sayitright.services.list_filters import ListFilterParams, get_list_filters
from sayitright.services.template_service import (
    CreateTemplateRequest,
    TemplateService,
    UpdateTemplateRequest,
    create_template_service,
    template_to_dict,
)

router = APIRouter(prefix="/v1/templates", tags=["templates"])


def get_template_service(db: AsyncSession = Depends(get_db)) -> TemplateService:
    return create_template_service(db)


@router.get("")
async def list_templates(
    params: ListFilterParams = Depends(get_list_filters),
    user: User = Depends(get_current_user),
    service: TemplateService = Depends(get_template_service),
):
    return ok(await service.list_templates(user.id, params))


@router.get("/{template_id}")
async def get_template(
    template_id: str,
    user: User = Depends(get_current_user),
    service: TemplateService = Depends(get_template_service),
):
    template = await service.get_template(template_id, user.id)
    return ok(template_to_dict(template))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_template(
    body: CreateTemplateRequest,
    user: User = Depends(get_current_user),
    service: TemplateService = Depends(get_template_service),
):
    """Save a template (free quota per tier, then 1 credit each)"""
    return ok(await service.create_template(user, body))


@router.put("/{template_id}")
async def update_template(
    template_id: str,
    body: UpdateTemplateRequest,
    user: User = Depends(get_current_user),
    service: TemplateService = Depends(get_template_service),
):
    template = await service.update_template(template_id, user.id, body)
    return ok(template_to_dict(template))


@router.delete("/{template_id}")
async def delete_template(
    template_id: str,
    user: User = Depends(get_current_user),
    service: TemplateService = Depends(get_template_service),
):
    await service.delete_template(template_id, user.id)
    return ok()

"""AI email generation API"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.auth_deps import get_current_user_optional
from sayitright.core.database import get_db
from sayitright.core.responses import ok
from sayitright.middleware.rate_limit import guest_rate_limiter
from sayitright.models.user import User
from sayitright.services.ai_service import AIService, GenerateEmailRequest, create_ai_service
from sayitright.services.llm_client import LLMClient, get_llm_client

router = APIRouter(prefix="/v1/ai", tags=["ai"])


def get_ai_service(
    db: AsyncSession = Depends(get_db),
    llm_client: LLMClient = Depends(get_llm_client),
) -> AIService:
    return create_ai_service(db, llm_client)


@router.post("/generate-email", status_code=status.HTTP_201_CREATED)
async def generate_email(
    request: Request,
    body: GenerateEmailRequest,
    user: Optional[User] = Depends(get_current_user_optional),
    service: AIService = Depends(get_ai_service),
):
    """
    Refine a draft into an email

    Guests are allowed (3 per IP per day); signed-in users are limited by tier.
    """
    # Counted here so a body that fails validation costs no guest hit
    await guest_rate_limiter.check(request, user)
    return ok(await service.generate_email(body, user))

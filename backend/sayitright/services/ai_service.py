"""Email generation service

Resolves the caller's tier, enforces usage and credit policy, calls the
LLM, then charges credit, archives the result and records usage.
"""

import logging
from typing import Any, Dict, Literal, Optional

from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.ai_config import (
    GUEST,
    LENGTH_INPUT_LIMITS,
    MODEL_MAX_OUTPUT_TOKENS,
    USER_TIERS,
    get_max_tokens,
)
from sayitright.core.errors import AppError, BadRequestError, ForbiddenError
from sayitright.core.schemas import CamelModel
from sayitright.models.user import User
from sayitright.services.archive_service import ArchiveService
from sayitright.services.credit_service import charge_credits
from sayitright.services.email_prompt import EmailGenerationRequest, parse_response, prompt_builder
from sayitright.services.input_sanitizer import input_sanitizer
from sayitright.services.llm_client import LLMClient
from sayitright.services.tier_calculator import (
    check_advanced_feature_access,
    get_input_limit_by_tier,
    resolve_tier,
)
from sayitright.services.usage_tracker import usage_tracker

logger = logging.getLogger(__name__)


class GenerateEmailRequest(CamelModel):
    draft: str = Field(..., min_length=10, max_length=600)
    language: Literal["ko", "en"]
    relationship: Optional[str] = Field(None, max_length=50)
    purpose: Optional[str] = Field(None, max_length=50)
    tone: Optional[str] = Field(None, max_length=50)
    length: Optional[Literal["short", "medium", "long"]] = None
    include_rationale: Optional[bool] = None
    save_as_archive: bool = True


class AIService:
    """Email generation orchestrator"""

    def __init__(self, db: AsyncSession, llm_client: LLMClient):
        self.db = db
        self.llm = llm_client

    async def generate_email(
        self,
        body: GenerateEmailRequest,
        user: Optional[User] = None,
    ) -> Dict[str, Any]:
        """
        Generate a refined email.

        Args:
            body: Generation request
            user: Authenticated user, or None for guests

        Returns:
            ``{email, rationale?, appliedFilters, metadata}``

        Raises:
            AppError: policy denials and LLM errors pass through unchanged;
                anything else becomes a generic BadRequestError
        """
        try:
            return await self._generate(body, user)
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error during email generation: {e}", exc_info=True)
            raise BadRequestError("이메일 생성 중 오류가 발생했습니다.")

    async def _generate(self, body: GenerateEmailRequest, user: Optional[User]) -> Dict[str, Any]:
        user_id = user.id if user else None
        tier = resolve_tier(user)

        # A length option overrides the tier's input limit, even when smaller
        max_input_length = get_input_limit_by_tier(tier)
        if body.length:
            max_input_length = LENGTH_INPUT_LIMITS[body.length]

        logger.info(
            f"Generate email: user={user_id or 'guest'}, tier={tier}, "
            f"length={body.length or 'none'}, max_length={max_input_length}"
        )

        draft = input_sanitizer.sanitize_draft(body.draft, max_input_length)
        custom = input_sanitizer.sanitize_custom_inputs(
            relationship=body.relationship,
            purpose=body.purpose,
            tone=body.tone,
        )

        uses_advanced = bool(body.tone or body.length or body.include_rationale)

        if user and tier != GUEST:
            usage = await usage_tracker.check_usage_limit(self.db, user.id, tier, uses_advanced)
            if not usage.allowed:
                logger.warning(f"Usage limit reached: user={user.id}, tier={tier}")
                raise ForbiddenError(usage.reason or "오늘의 사용 횟수를 모두 사용했습니다.")

            if uses_advanced:
                access = check_advanced_feature_access(user.credit_balance, user.subscriptions)
                # free never passes; premium fails only when out of credit
                if not access.allowed:
                    logger.warning(f"Advanced features denied: user={user.id}, tier={tier}")
                    raise ForbiddenError(access.reason or "크레딧이 부족합니다.")

        applied_filters = {
            "language": body.language,
            "relationship": custom["relationship"],
            "purpose": custom["purpose"],
            "tone": custom["tone"],
            "length": body.length,
        }

        include_rationale = uses_advanced and bool(body.include_rationale)

        prompts = prompt_builder.build(EmailGenerationRequest(
            content=draft,
            language=body.language,
            relationship=applied_filters["relationship"],
            purpose=applied_filters["purpose"],
            tone=applied_filters["tone"],
            length=applied_filters["length"],
            include_rationale=include_rationale,
        ))

        max_tokens = min(
            get_max_tokens(tier, body.length or "medium", include_rationale),
            MODEL_MAX_OUTPUT_TOKENS,
        )
        completion = await self.llm.complete(prompts["system"], prompts["user"], max_tokens)
        email, rationale = parse_response(completion.content)

        credit_charged = 0
        remaining_credits = None

        if user:
            try:
                if uses_advanced:
                    access = check_advanced_feature_access(user.credit_balance, user.subscriptions)
                    if access.requires_credit and access.allowed:
                        cost = USER_TIERS[tier].credit_cost_per_advanced or 1
                        remaining_credits = await charge_credits(
                            self.db, user, cost, reason="고급 이메일 생성"
                        )
                        credit_charged = cost
                    elif not access.requires_credit:
                        remaining_credits = user.credit_balance

                if body.save_as_archive:
                    ArchiveService(self.db).build_archive(
                        user_id=user.id,
                        content=email,
                        tone=applied_filters["tone"],
                        purpose=applied_filters["purpose"],
                        relationship=applied_filters["relationship"],
                        rationale=rationale if include_rationale and rationale else None,
                    )
                # Charge and archive land together
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                # rollback expires the caller's user
                await self.db.refresh(user)
                raise

            await usage_tracker.increment_usage(
                self.db, user.id, uses_advanced, completion.tokens_used
            )

        metadata = {
            "charactersUsed": len(draft),
            "tokensUsed": completion.tokens_used,
            "creditCharged": credit_charged,
        }
        if remaining_credits is not None:
            metadata["remainingCredits"] = remaining_credits

        result = {
            "email": email,
            "appliedFilters": {k: v for k, v in applied_filters.items() if v is not None},
            "metadata": metadata,
        }
        if include_rationale and rationale:
            result["rationale"] = rationale

        return result


def create_ai_service(db: AsyncSession, llm_client: LLMClient) -> AIService:
    return AIService(db, llm_client)

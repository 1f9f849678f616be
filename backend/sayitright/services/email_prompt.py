"""Prompt construction and response parsing for email generation"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

RATIONALE_SEPARATOR = "---RATIONALE---"

# Accepts ---RATIONALE---, === 피드백 ===, ---feedback--- etc.
SEPARATOR_PATTERN = re.compile(
    r"[-=]{3,}\s*(?:RATIONALE|피드백|FEEDBACK)\s*[-=]{3,}",
    re.IGNORECASE,
)

RELATIONSHIP_LABELS = {
    "professor": "교수님",
    "supervisor": "상사",
    "colleague": "동료",
    "client": "고객",
    "friend": "친구",
    "custom": "직접 입력",
}

PURPOSE_LABELS = {
    "request": "요청",
    "apology": "사과",
    "thank": "감사",
    "inquiry": "문의",
    "report": "보고",
    "custom": "직접 입력",
}

TONE_LABELS = {
    "formal": "격식있는",
    "polite": "공손한",
    "casual": "캐주얼",
    "friendly": "친근한",
    "custom": "직접 입력",
}

LENGTH_LABELS = {
    "short": "짧고 간결하게",
    "medium": "적당한 길이로",
    "long": "상세하게",
}


@dataclass
class EmailGenerationRequest:
    content: str
    language: str  # ko / en
    relationship: Optional[str] = None
    purpose: Optional[str] = None
    tone: Optional[str] = None
    length: Optional[str] = None
    include_rationale: bool = False


class EmailPromptBuilder:
    """Builds the system / user prompt pair"""

    def build_system_prompt(self, language: str) -> str:
        language_name = "Korean" if language == "ko" else "English"
        return (
            "You are an expert email writing assistant specializing in professional "
            "and personal correspondence. Your goal is to refine user input into "
            "well-structured, appropriate emails while maintaining the user's core "
            f"message. Always respond in {language_name}."
        )

    def build_user_prompt(self, request: EmailGenerationRequest) -> str:
        is_korean = request.language == "ko"
        parts = []

        if is_korean:
            parts.append(f'다음 내용을 바탕으로 이메일을 작성해주세요:\n"{request.content}"\n')
        else:
            parts.append(f'Please write an email based on the following content:\n"{request.content}"\n')

        constraints = []
        if request.relationship:
            constraints.append(f"- 수신자와의 관계: {RELATIONSHIP_LABELS.get(request.relationship, request.relationship)}")
        if request.purpose:
            constraints.append(f"- 이메일 목적: {PURPOSE_LABELS.get(request.purpose, request.purpose)}")
        if request.tone:
            constraints.append(f"- 톤: {TONE_LABELS.get(request.tone, request.tone)}")
        if request.length:
            constraints.append(f"- 길이: {LENGTH_LABELS.get(request.length, request.length)}")

        if constraints:
            header = "\n다음 조건을 고려해주세요:" if is_korean else "\nPlease consider the following conditions:"
            parts.append(header + "\n" + "\n".join(constraints))
        elif is_korean:
            parts.append("\n상황에 가장 적절한 형식으로 작성해주세요.")
        else:
            parts.append("\nPlease write in the most appropriate format for the situation.")

        if request.include_rationale:
            if is_korean:
                parts.append(
                    "\n\n응답 형식:\n"
                    "1. 먼저 완성된 이메일을 작성하고\n"
                    f'2. "{RATIONALE_SEPARATOR}" 구분자 다음에\n'
                    "3. 왜 이렇게 작성했는지 개선 근거를 상세히 설명해주세요.\n"
                    "   (어떤 표현을 선택했는지, 왜 그 톤을 사용했는지, 구조는 왜 이렇게 했는지 등)"
                )
            else:
                parts.append(
                    "\n\nResponse format:\n"
                    "1. First, write the complete email\n"
                    f'2. After the "{RATIONALE_SEPARATOR}" separator\n'
                    "3. Explain in detail why you wrote it this way.\n"
                    "4. Write only the explanation in Korean.\n"
                    "   (Which expressions you chose, why you used that tone, why you structured it this way, etc.)"
                )
        elif is_korean:
            parts.append("\n\n완성된 이메일만 작성해주세요.")
        else:
            parts.append("\n\nPlease write only the completed email.")

        return "".join(parts)

    def build(self, request: EmailGenerationRequest) -> Dict[str, str]:
        return {
            "system": self.build_system_prompt(request.language),
            "user": self.build_user_prompt(request),
        }


def parse_response(text: str) -> Tuple[str, Optional[str]]:
    """
    Split a model reply into email and rationale.

    Returns:
        (email, rationale); rationale is None when no separator is present
    """
    parts = SEPARATOR_PATTERN.split(text)
    if len(parts) == 1:
        return text.strip(), None
    return parts[0].strip(), parts[-1].strip()


prompt_builder = EmailPromptBuilder()

"""Input sanitizer guarding the generation prompt

Two validators share one forbidden-pattern list:
- short custom fields (relationship / purpose / tone) fail closed
- the draft degrades gracefully: injection markers are redacted in place
"""

import re
import logging
from typing import Dict, Optional

from sayitright.core.errors import BadRequestError

logger = logging.getLogger(__name__)


class InputSanitizer:
    """
    Prompt injection guard for user supplied text
    """

    # Prompt injection markers
    FORBIDDEN_PATTERNS = [
        r"---[A-Z\s]+---",
        r"\[SYSTEM\]",
        r"\[ASSISTANT\]",
        r"ignore\s+(previous|all|above)",
        r"forget\s+(everything|instructions)",
        r"new\s+(role|instruction|system)",
    ]

    COMPILED_PATTERNS = [re.compile(pattern, re.IGNORECASE) for pattern in FORBIDDEN_PATTERNS]

    # Punctuation allowed in custom fields besides letters, digits and whitespace
    ALLOWED_PUNCTUATION = frozenset(".,!?'\"()-:/")

    MAX_CUSTOM_INPUT_LENGTH = 50
    MIN_DRAFT_LENGTH = 10

    REDACTED = "[removed]"

    _CUSTOM_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F]")
    # Keeps \t (0x09) and \n (0x0A)
    _DRAFT_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B-\x1F\x7F]")

    def __init__(self):
        self.rejected_count = 0
        self.redacted_count = 0

    def _has_forbidden_pattern(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self.COMPILED_PATTERNS)

    def _is_allowed_char(self, ch: str) -> bool:
        return ch.isalpha() or ch.isnumeric() or ch.isspace() or ch in self.ALLOWED_PUNCTUATION

    def sanitize_custom_input(self, value: str) -> str:
        """
        Validate a short custom option value.

        Args:
            value: Raw relationship / purpose / tone text

        Returns:
            Trimmed text with control characters removed and whitespace collapsed

        Raises:
            BadRequestError: empty, too long, injection marker or disallowed character
        """
        if not value or not value.strip():
            raise BadRequestError("입력이 비어있습니다.")

        sanitized = value.strip()

        if len(sanitized) > self.MAX_CUSTOM_INPUT_LENGTH:
            raise BadRequestError(
                f"입력은 {self.MAX_CUSTOM_INPUT_LENGTH}자 이내로 제한됩니다."
            )

        sanitized = self._CUSTOM_CONTROL_CHARS.sub("", sanitized)
        sanitized = re.sub(r"\s+", " ", sanitized)

        if self._has_forbidden_pattern(sanitized):
            self.rejected_count += 1
            logger.warning(f"Forbidden pattern in custom input: {sanitized[:50]!r}")
            raise BadRequestError("허용되지 않는 패턴이 포함되어 있습니다.")

        if not all(self._is_allowed_char(ch) for ch in sanitized):
            self.rejected_count += 1
            raise BadRequestError("허용되지 않는 특수 문자가 포함되어 있습니다.")

        return sanitized

    def sanitize_custom_inputs(
        self,
        relationship: Optional[str] = None,
        purpose: Optional[str] = None,
        tone: Optional[str] = None,
    ) -> Dict[str, Optional[str]]:
        """Sanitize whichever of the three option fields are present"""
        return {
            "relationship": self.sanitize_custom_input(relationship) if relationship else None,
            "purpose": self.sanitize_custom_input(purpose) if purpose else None,
            "tone": self.sanitize_custom_input(tone) if tone else None,
        }

    def sanitize_draft(self, draft: str, max_length: int) -> str:
        """
        Clean the email draft.

        Args:
            draft: Raw draft text
            max_length: Character budget for the caller's tier / length option

        Returns:
            Draft with control characters stripped, blank lines and spaces
            collapsed, and forbidden patterns replaced by ``[removed]``

        Raises:
            BadRequestError: empty, longer than ``max_length`` or shorter than 10
        """
        if not draft or not draft.strip():
            raise BadRequestError("이메일 내용이 비어있습니다.")

        sanitized = draft.strip()

        if len(sanitized) > max_length:
            raise BadRequestError(f"이메일은 {max_length}자 이내로 제한됩니다.")

        if len(sanitized) < self.MIN_DRAFT_LENGTH:
            raise BadRequestError(
                f"이메일은 최소 {self.MIN_DRAFT_LENGTH}자 이상이어야 합니다."
            )

        sanitized = self._DRAFT_CONTROL_CHARS.sub("", sanitized)
        sanitized = re.sub(r"\n{3,}", "\n\n", sanitized)
        sanitized = re.sub(r" {2,}", " ", sanitized)

        for pattern in self.COMPILED_PATTERNS:
            if pattern.search(sanitized):
                self.redacted_count += 1
                logger.warning(f"Forbidden pattern redacted from draft: {pattern.pattern}")
                sanitized = pattern.sub(self.REDACTED, sanitized)

        return sanitized

    def get_stats(self) -> Dict[str, int]:
        return {
            "rejected": self.rejected_count,
            "redacted": self.redacted_count,
        }


# Shared instance
input_sanitizer = InputSanitizer()

"""Prompt construction and response parsing"""

import pytest

from sayitright.services.email_prompt import (
    RATIONALE_SEPARATOR,
    EmailGenerationRequest,
    parse_response,
    prompt_builder,
)


def test_system_prompt_language():
    assert "Korean" in prompt_builder.build_system_prompt("ko")
    assert "English" in prompt_builder.build_system_prompt("en")


def test_korean_prompt_with_labels():
    prompt = prompt_builder.build_user_prompt(EmailGenerationRequest(
        content="과제 제출 기한 연장 부탁",
        language="ko",
        relationship="professor",
        purpose="request",
        tone="polite",
        length="short",
    ))
    assert '"과제 제출 기한 연장 부탁"' in prompt
    assert "- 수신자와의 관계: 교수님" in prompt
    assert "- 이메일 목적: 요청" in prompt
    assert "- 톤: 공손한" in prompt
    assert "- 길이: 짧고 간결하게" in prompt
    assert prompt.endswith("완성된 이메일만 작성해주세요.")


def test_custom_option_passed_through():
    prompt = prompt_builder.build_user_prompt(EmailGenerationRequest(
        content="meeting notes follow-up",
        language="en",
        relationship="동아리 선배",
    ))
    assert "- 수신자와의 관계: 동아리 선배" in prompt
    assert "Please consider the following conditions:" in prompt


def test_no_options_default_format():
    prompt = prompt_builder.build_user_prompt(EmailGenerationRequest(content="hello there", language="en"))
    assert "most appropriate format" in prompt


def test_rationale_instructions():
    prompt = prompt_builder.build_user_prompt(EmailGenerationRequest(
        content="hello there", language="en", include_rationale=True,
    ))
    assert RATIONALE_SEPARATOR in prompt
    assert "only the explanation in Korean" in prompt


def test_build_returns_pair():
    prompts = prompt_builder.build(EmailGenerationRequest(content="hello there", language="ko"))
    assert set(prompts) == {"system", "user"}


@pytest.mark.parametrize(
    "separator",
    ["---RATIONALE---", "=== 피드백 ===", "---feedback---", "===RATIONALE==="],
)
def test_parse_response_separators(separator):
    email, rationale = parse_response(f"Dear Professor,\nThanks.\n{separator}\n공손한 표현을 사용했습니다.")
    assert email == "Dear Professor,\nThanks."
    assert rationale == "공손한 표현을 사용했습니다."


def test_parse_response_without_rationale():
    assert parse_response("  Just the email.  ") == ("Just the email.", None)

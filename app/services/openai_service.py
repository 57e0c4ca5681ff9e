# app/services/openai_service.py
import logging
from typing import Optional
from flask import Flask
import openai
from openai import OpenAI

SYSTEM_PROMPT_TEMPLATE = """You are {clinic}'s AI veterinary assistant. You provide helpful, accurate information about pet care, health, and veterinary services.

Guidelines:
- Only answer pet and animal-related questions
- Provide helpful, educational information about pet care
- For serious medical concerns, always recommend consulting with a veterinarian
- Be friendly and supportive
- If asked non-pet related questions, politely redirect to pet topics
- Include relevant information about {clinic} when appropriate
- Emergency contact: {emergency_phone}

Keep responses concise but informative."""

FALLBACK_REPLY = "I apologize, but I couldn't generate a response. Please try again."


class AssistantError(RuntimeError):
    """AI 상담 API 호출 실패 (일반)"""


class AssistantAuthError(AssistantError):
    """API 키가 유효하지 않음 (401)"""


class AssistantRateLimitError(AssistantError):
    """요청 한도 초과 (429)"""


class OpenAIService:
    """
    AI 수의 상담 챗봇을 위한 OpenAI Chat Completions 연동 서비스.
    API 키는 요청마다 최종 사용자가 전달하며 서버에 저장하지 않습니다.
    """

    def __init__(self):
        self.default_api_key: Optional[str] = None
        self.model = "gpt-3.5-turbo"
        self.system_prompt = SYSTEM_PROMPT_TEMPLATE.format(clinic="PetCare Clinic", emergency_phone="(123) 456-7890")

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 모델과 시스템 프롬프트를 설정합니다.
        OPENAI_API_KEY는 선택 사항이며, 로그인 사용자가 키 없이 요청할 때만 사용됩니다.
        """
        self.default_api_key = app.config.get('OPENAI_API_KEY')
        self.model = app.config.get('OPENAI_MODEL') or self.model
        self.system_prompt = SYSTEM_PROMPT_TEMPLATE.format(
            clinic=app.config.get('CLINIC_NAME') or "PetCare Clinic",
            emergency_phone=app.config.get('CLINIC_EMERGENCY_PHONE') or "(123) 456-7890",
        )
        logging.info(f"OpenAIService: 상담 모델 '{self.model}'로 초기화되었습니다.")

    def _client(self, api_key: str) -> OpenAI:
        # 자동 재시도 없이 실패를 그대로 사용자에게 알린다
        return OpenAI(api_key=api_key, max_retries=0)

    def ask(self, user_message: str, api_key: Optional[str] = None, allow_default_key: bool = False) -> str:
        """
        고정 시스템 프롬프트와 사용자 메시지를 전달하고 답변 텍스트를 반환합니다.

        :param user_message: 사용자가 입력한 질문
        :param api_key: 최종 사용자가 제공한 OpenAI API 키
        :param allow_default_key: 사용자 키가 없을 때 서버 설정 키를 써도 되는지 (인증된 요청만)
        :return: 답변 텍스트
        """
        key = api_key or (self.default_api_key if allow_default_key else None)
        if not key:
            raise AssistantAuthError("OpenAI API key is required")

        try:
            response = self._client(key).chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": user_message},
                ],
                max_tokens=500,
                temperature=0.7,
            )
        except openai.AuthenticationError as e:
            logging.warning(f"OpenAI 인증 실패: {e}")
            raise AssistantAuthError("Invalid API key. Please check your OpenAI API key.") from e
        except openai.RateLimitError as e:
            logging.warning(f"OpenAI 요청 한도 초과: {e}")
            raise AssistantRateLimitError("Rate limit exceeded. Please try again later.") from e
        except openai.APIStatusError as e:
            logging.error(f"OpenAI API 오류 (status {e.status_code}): {e}", exc_info=True)
            reason = getattr(e.response, 'reason_phrase', None) or str(e.status_code)
            raise AssistantError(f"OpenAI API error: {reason}") from e
        except openai.APIConnectionError as e:
            logging.error(f"OpenAI 연결 실패: {e}", exc_info=True)
            raise AssistantError(
                "Failed to connect to OpenAI. Please check your internet connection and try again.") from e

        if not response.choices:
            return FALLBACK_REPLY
        return response.choices[0].message.content or FALLBACK_REPLY

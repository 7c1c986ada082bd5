"""
NegotiateAI Backend - Google Gemini Gateway Implementation
===========================================================

What:  Concrete ModelGateway using the Google Gemini API.
How:   Translates the provider-neutral ChatMessage list into Gemini's
       system instruction + role/parts contents, sends one request with an
       explicit deadline, and returns the response text.
Who:   Instantiated once at import; used by the analysis and suggestion
       pipelines for every model call.

Message mapping:
    ChatMessage(role="system")     → GenerativeModel(system_instruction=...)
    ChatMessage(role="user")       → {"role": "user",  "parts": [...]}
    ChatMessage(role="assistant")  → {"role": "model", "parts": [...]}

    Consecutive turns with the same role are merged into one content entry
    with several parts, so chat histories where the user sent two messages
    in a row still form a valid alternating conversation.

Failure handling:
    A single attempt per call. Any SDK exception, a deadline overrun, or a
    response without text becomes GatewayError; the calling pipeline then
    substitutes its fallback value.
"""

import asyncio
import logging
import time
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

import google.generativeai as genai

from negotiateai.config import settings
from negotiateai.exceptions import GatewayError
from negotiateai.services.llm_base import (
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ChatMessage,
    ModelGateway,
)

logger = logging.getLogger(__name__)

_GEMINI_ROLES = {ROLE_ASSISTANT: "model"}

# Gemini conversations must open with a user turn
LEADING_TURNS_HEADER = "Earlier in this conversation, the other party wrote:"


class GeminiGateway(ModelGateway):
    """
    Google Gemini implementation of the model gateway.

    Architecture:
        - Singleton instance created at import time
        - Configures the SDK with the API key once
        - Builds a GenerativeModel per call, carrying that prompt's
          system instruction
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        # The SDK keeps the API key in module-level state
        if settings.gemini_api_key and settings.gemini_api_key != "your_gemini_api_key_here":
            genai.configure(api_key=settings.gemini_api_key)

        self.model_name = model_name or settings.gemini_model
        self.timeout_seconds = timeout_seconds or settings.gateway_timeout_seconds

        logger.info(
            "GeminiGateway initialized with model=%s, timeout=%.0fs",
            self.model_name,
            self.timeout_seconds,
        )

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """
        Send one chat completion to Gemini and return the response text.

        Flow:
            1. Split messages into system instruction and conversation contents
            2. Build the model and generation config
            3. Await the call under an explicit deadline
            4. Extract text; empty text is a failure

        Raises:
            GatewayError: On any provider failure, timeout or empty response.
        """
        call_id = str(uuid.uuid4())[:8]
        system_instruction, contents = self._to_gemini_contents(messages)
        if not contents:
            raise GatewayError(
                message="Prompt has no conversation turns to send",
                context={"call_id": call_id},
            )

        model = genai.GenerativeModel(
            self.model_name,
            system_instruction=system_instruction,
        )
        generation_config = genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
        )

        logger.info(
            "[%s] Gemini call: model=%s turns=%d temperature=%.1f max_tokens=%d",
            call_id,
            self.model_name,
            len(contents),
            temperature,
            max_tokens,
        )
        start_time = time.perf_counter()

        try:
            # request_options bounds the HTTP call inside the SDK; wait_for
            # bounds everything else (auth refresh, DNS, SDK retries)
            response = await asyncio.wait_for(
                model.generate_content_async(
                    contents,
                    generation_config=generation_config,
                    request_options={"timeout": self.timeout_seconds},
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.warning("[%s] Gemini call exceeded deadline after %.0fms", call_id, duration_ms)
            raise GatewayError(
                message="The AI service did not respond in time",
                context={"call_id": call_id, "timeout_seconds": self.timeout_seconds},
            )
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "[%s] Gemini call failed after %.0fms: %s",
                call_id,
                duration_ms,
                str(e),
            )
            raise GatewayError(
                message="The AI service request failed",
                context={"call_id": call_id, "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        text = self._response_text(response)
        if not text:
            logger.warning("[%s] Gemini returned no content after %.0fms", call_id, duration_ms)
            raise GatewayError(
                message="The AI service returned an empty response",
                context={"call_id": call_id},
            )

        logger.info(
            "[%s] Gemini call completed in %.0fms, received %d chars",
            call_id,
            duration_ms,
            len(text),
        )
        return text

    @staticmethod
    def _to_gemini_contents(
        messages: Sequence[ChatMessage],
    ) -> Tuple[Optional[str], List[Dict[str, Any]]]:
        """
        Split system text from turns and merge same-role neighbours.

        Model turns before the first user turn are moved into the system
        instruction under LEADING_TURNS_HEADER.
        """
        system_parts: List[str] = []
        contents: List[Dict[str, Any]] = []

        for message in messages:
            if message.role == ROLE_SYSTEM:
                system_parts.append(message.content)
                continue
            role = _GEMINI_ROLES.get(message.role, message.role)
            if contents and contents[-1]["role"] == role:
                contents[-1]["parts"].append(message.content)
            else:
                contents.append({"role": role, "parts": [message.content]})

        if contents and contents[0]["role"] == "model":
            leading = contents.pop(0)
            system_parts.append("\n".join([LEADING_TURNS_HEADER, *leading["parts"]]))

        system_instruction = "\n\n".join(system_parts) if system_parts else None
        return system_instruction, contents

    @staticmethod
    def _response_text(response: Any) -> str:
        # .text raises ValueError when the candidate was blocked or has no parts
        try:
            text = response.text
        except ValueError:
            return ""
        return text.strip() if text else ""

    async def health_check(self) -> bool:
        """
        Check if the Gemini API is reachable.

        How:     Lists available models (no token cost). The SDK call is
                 blocking, so it runs in a worker thread.
        Returns: True if reachable and authenticated, False otherwise.
        """
        try:
            model_names = await asyncio.to_thread(
                lambda: [m.name for m in genai.list_models()]
            )
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False

        target = f"models/{self.model_name}"
        if target not in model_names:
            logger.warning("Configured model %s not found in available models", target)
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
gemini_gateway = GeminiGateway()

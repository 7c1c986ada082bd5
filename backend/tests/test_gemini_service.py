"""
NegotiateAI Backend - Gemini Gateway Unit Tests (Mocked)
=========================================================

What:  Tests for GeminiGateway with the Google Generative AI SDK patched out.
How:   Patches the genai module so no network calls are made.

What we test:
    ✅ Successful completion returns trimmed text
    ✅ System messages become the system instruction; assistant → model
    ✅ Consecutive same-role turns are merged
    ✅ Contents always open with a user turn
    ✅ SDK errors, deadline overruns and empty responses raise GatewayError
    ✅ Exactly one SDK call per completion (no retries)
    ✅ Health check returns a bool and never raises
    ❌ Real API calls
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

from negotiateai.exceptions import GatewayError
from negotiateai.services.gemini_service import LEADING_TURNS_HEADER, GeminiGateway
from negotiateai.services.llm_base import ChatMessage


def _response(text):
    response = MagicMock()
    response.text = text
    return response


class TestChatMessage:

    def test_rejects_unknown_role(self):
        with pytest.raises(ValueError):
            ChatMessage(role="tool", content="x")


class TestGeminiGatewayMocked:

    @pytest.mark.asyncio
    async def test_complete_success(self):
        with patch("negotiateai.services.gemini_service.genai") as mock_genai:
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(return_value=_response("  Hello there  "))
            mock_genai.GenerativeModel.return_value = mock_model

            gateway = GeminiGateway(model_name="gemini-test", timeout_seconds=5)
            result = await gateway.complete(
                [ChatMessage("system", "Be brief."), ChatMessage("user", "Hi")],
                temperature=0.3,
                max_tokens=1500,
            )

            assert result == "Hello there"
            mock_genai.GenerativeModel.assert_called_once_with("gemini-test", system_instruction="Be brief.")
            mock_genai.GenerationConfig.assert_called_once_with(temperature=0.3, max_output_tokens=1500)
            args, kwargs = mock_model.generate_content_async.call_args
            assert args[0] == [{"role": "user", "parts": ["Hi"]}]
            assert kwargs["request_options"] == {"timeout": 5}

    @pytest.mark.asyncio
    async def test_role_mapping_and_merging(self):
        with patch("negotiateai.services.gemini_service.genai") as mock_genai:
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(return_value=_response("ok"))
            mock_genai.GenerativeModel.return_value = mock_model

            gateway = GeminiGateway(model_name="gemini-test", timeout_seconds=5)
            await gateway.complete(
                [
                    ChatMessage("system", "coach"),
                    ChatMessage("user", "first"),
                    ChatMessage("assistant", "reply"),
                    ChatMessage("user", "second"),
                    ChatMessage("user", "third"),
                ],
                temperature=0.7,
                max_tokens=1000,
            )

            contents = mock_model.generate_content_async.call_args.args[0]
            assert contents == [
                {"role": "user", "parts": ["first"]},
                {"role": "model", "parts": ["reply"]},
                {"role": "user", "parts": ["second", "third"]},
            ]

    @pytest.mark.asyncio
    async def test_leading_model_turns_move_to_system_instruction(self):
        with patch("negotiateai.services.gemini_service.genai") as mock_genai:
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(return_value=_response("ok"))
            mock_genai.GenerativeModel.return_value = mock_model

            gateway = GeminiGateway(model_name="gemini-test", timeout_seconds=5)
            await gateway.complete(
                [
                    ChatMessage("system", "coach"),
                    ChatMessage("assistant", "Our price is firm."),
                    ChatMessage("user", "Can we talk volume?"),
                    ChatMessage("assistant", "Maybe."),
                    ChatMessage("user", 'I\'m drafting this message: "Lower it?"'),
                ],
                temperature=0.7,
                max_tokens=1000,
            )

            mock_genai.GenerativeModel.assert_called_once_with(
                "gemini-test",
                system_instruction=f"coach\n\n{LEADING_TURNS_HEADER}\nOur price is firm.",
            )
            contents = mock_model.generate_content_async.call_args.args[0]
            assert contents[0] == {"role": "user", "parts": ["Can we talk volume?"]}
            assert [c["role"] for c in contents] == ["user", "model", "user"]

    @pytest.mark.asyncio
    async def test_sdk_error_raises_gateway_error_once(self):
        with patch("negotiateai.services.gemini_service.genai") as mock_genai:
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(side_effect=RuntimeError("503 overloaded"))
            mock_genai.GenerativeModel.return_value = mock_model

            gateway = GeminiGateway(model_name="gemini-test", timeout_seconds=5)
            with pytest.raises(GatewayError):
                await gateway.complete([ChatMessage("user", "Hi")], temperature=0.3, max_tokens=10)

            assert mock_model.generate_content_async.await_count == 1

    @pytest.mark.asyncio
    async def test_deadline_raises_gateway_error(self):
        async def slow(*args, **kwargs):
            await asyncio.sleep(5)

        with patch("negotiateai.services.gemini_service.genai") as mock_genai:
            mock_model = MagicMock()
            mock_model.generate_content_async = slow
            mock_genai.GenerativeModel.return_value = mock_model

            gateway = GeminiGateway(model_name="gemini-test", timeout_seconds=0.05)
            with pytest.raises(GatewayError) as exc_info:
                await gateway.complete([ChatMessage("user", "Hi")], temperature=0.3, max_tokens=10)

            assert "in time" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_empty_text_raises_gateway_error(self):
        with patch("negotiateai.services.gemini_service.genai") as mock_genai:
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(return_value=_response("   "))
            mock_genai.GenerativeModel.return_value = mock_model

            gateway = GeminiGateway(model_name="gemini-test", timeout_seconds=5)
            with pytest.raises(GatewayError):
                await gateway.complete([ChatMessage("user", "Hi")], temperature=0.3, max_tokens=10)

    @pytest.mark.asyncio
    async def test_blocked_response_raises_gateway_error(self):
        """The SDK's .text raises ValueError when the candidate was blocked."""
        with patch("negotiateai.services.gemini_service.genai") as mock_genai:
            response = MagicMock()
            type(response).text = PropertyMock(side_effect=ValueError("blocked"))
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(return_value=response)
            mock_genai.GenerativeModel.return_value = mock_model

            gateway = GeminiGateway(model_name="gemini-test", timeout_seconds=5)
            with pytest.raises(GatewayError):
                await gateway.complete([ChatMessage("user", "Hi")], temperature=0.3, max_tokens=10)

    @pytest.mark.asyncio
    async def test_system_only_prompt_rejected(self):
        with patch("negotiateai.services.gemini_service.genai"):
            gateway = GeminiGateway(model_name="gemini-test", timeout_seconds=5)
            with pytest.raises(GatewayError):
                await gateway.complete([ChatMessage("system", "coach")], temperature=0.3, max_tokens=10)

    @pytest.mark.asyncio
    async def test_health_check_available(self):
        with patch("negotiateai.services.gemini_service.genai") as mock_genai:
            model = MagicMock()
            model.name = "models/gemini-test"
            mock_genai.list_models.return_value = [model]

            gateway = GeminiGateway(model_name="gemini-test", timeout_seconds=5)
            assert await gateway.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_failure_returns_false(self):
        with patch("negotiateai.services.gemini_service.genai") as mock_genai:
            mock_genai.list_models.side_effect = RuntimeError("invalid API key")

            gateway = GeminiGateway(model_name="gemini-test", timeout_seconds=5)
            assert await gateway.health_check() is False

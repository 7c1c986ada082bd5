"""
NegotiateAI Backend - Prompt Construction Tests
================================================
"""

from negotiateai.schemas.analysis import ChatTurn
from negotiateai.services.prompts import (
    CHAT_HISTORY_LIMIT,
    build_analysis_messages,
    build_chat_suggestion_messages,
    build_email_suggestion_messages,
    build_improvement_messages,
    resolve_industry_context,
)


class TestIndustryContext:

    def test_known_ids(self):
        assert resolve_industry_context("sales") == "sales and pricing negotiations"
        assert resolve_industry_context("recruitment") == "job offer and salary negotiations"

    def test_unknown_and_missing_ids_use_general(self):
        assert resolve_industry_context("aerospace") == "general business negotiations"
        assert resolve_industry_context(None) == "general business negotiations"
        assert resolve_industry_context("") == "general business negotiations"


class TestAnalysisPrompt:

    def test_structure(self):
        messages = build_analysis_messages("Deal by Friday.", "sales and pricing negotiations", "abc123")

        assert [m.role for m in messages] == ["system", "user"]
        system = messages[0].content
        assert "sales and pricing negotiations" in system
        assert "Clear call to action and next steps (10 points)" in system
        assert system.count("(15 points)") == 6
        assert "11. Negotiation phase identification" in system
        assert "This is analysis session abc123" in system
        assert '"persuasiveStrength": number' in system
        assert messages[1].content == "Deal by Friday."

    def test_improvement_prompt_has_ten_guidelines(self):
        messages = build_improvement_messages("Deal by Friday.", "general business negotiations")
        system = messages[0].content
        assert "10. Maintain authenticity" in system
        assert "Provide ONLY the improved text" in system


class TestSuggestionPrompts:

    def test_email_prompt(self):
        messages = build_email_suggestion_messages("Dear vendor, we would like a discount.")
        assert "3-5 specific suggestions" in messages[0].content
        assert messages[1].content == "Dear vendor, we would like a discount."

    def test_chat_prompt_keeps_last_five_turns(self):
        turns = [ChatTurn(text=f"turn {i}", is_user=(i % 2 == 0)) for i in range(6)]

        messages = build_chat_suggestion_messages("Can we lower the price?", turns)

        assert CHAT_HISTORY_LIMIT == 5
        assert len(messages) == 1 + 5 + 1
        assert "2-3 specific suggestions" in messages[0].content
        history = messages[1:-1]
        assert [m.content for m in history] == [f"turn {i}" for i in range(1, 6)]
        assert [m.role for m in history] == ["assistant", "user", "assistant", "user", "assistant"]
        assert messages[-1].role == "user"
        assert messages[-1].content == 'I\'m drafting this message: "Can we lower the price?"'

    def test_chat_prompt_without_history(self):
        messages = build_chat_suggestion_messages("Can we lower the price?", None)
        assert [m.role for m in messages] == ["system", "user"]

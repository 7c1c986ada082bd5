"""
NegotiateAI Backend - Prompt Construction
==========================================

What:  The industry context table and the builders that turn user input into
       ordered ChatMessage lists for the model gateway.
How:   Pure functions; no I/O, no randomness except the analysis session
       token, which callers pass in.
Who:   AnalysisPipeline and SuggestionPipeline.
"""

from typing import Dict, List, Optional, Sequence

from negotiateai.schemas.analysis import ChatTurn
from negotiateai.services.llm_base import (
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ROLE_USER,
    ChatMessage,
)

DEFAULT_INDUSTRY = "general"

INDUSTRY_CONTEXTS: Dict[str, str] = {
    "general": "general business negotiations",
    "legal": "legal contract negotiations",
    "sales": "sales and pricing negotiations",
    "procurement": "procurement and vendor negotiations",
    "recruitment": "job offer and salary negotiations",
}

# Number of prior chat turns sent along with the current draft
CHAT_HISTORY_LIMIT = 5


def resolve_industry_context(model_id: Optional[str]) -> str:
    """Unknown or missing ids resolve to the general context."""
    return INDUSTRY_CONTEXTS.get(model_id or DEFAULT_INDUSTRY, INDUSTRY_CONTEXTS[DEFAULT_INDUSTRY])


def _expert_preamble(industry_context: str) -> str:
    return (
        "You are the world's foremost expert on negotiation techniques, with decades "
        f"of experience in {industry_context} and deep knowledge of negotiation "
        "psychology, game theory, and persuasion tactics."
    )


# ══════════════════════════════════════════════════════════════════════════
# Analysis & Improvement
# ══════════════════════════════════════════════════════════════════════════

_ANALYSIS_INSTRUCTIONS = """Your task is to analyze the negotiation text with the precision and insight of a master negotiator, providing comprehensive and actionable feedback.

Your analysis must include:

1. An overall effectiveness score from 0-100 based on these criteria:
   - Clarity and conciseness (15 points)
   - Persuasive language and rhetoric (15 points)
   - Professional tone and relationship building (15 points)
   - Strategic positioning and framing (15 points)
   - Addressing counterparty concerns and objections (15 points)
   - Effective use of negotiation techniques (15 points)
   - Clear call to action and next steps (10 points)

2. Tone analysis (assertive, passive, collaborative, etc.)
3. Sentiment analysis (positive, negative, neutral)
4. Persuasive strength as a percentage from 0-100
5. Key strengths (3-5 specific points about what works well)
6. Areas for improvement (3-5 specific points about what could be better)
7. Specific tactical suggestions to make the text more effective (3-5 actionable points)
8. Negotiation frameworks identified in the text (BATNA, ZOPA, etc.)
9. Expert techniques used or missing (mirroring, labeling, etc.)
10. Power dynamics assessment (who appears to have leverage)
11. Negotiation phase identification (preparation, information exchange, bargaining, closing)

Apply the following expert negotiation principles in your analysis:
- Harvard Principled Negotiation Method (separate people from the problem, focus on interests not positions, invent options for mutual gain, insist on objective criteria)
- Chris Voss's tactical empathy and calibrated questions
- Robert Cialdini's principles of influence (reciprocity, commitment/consistency, social proof, authority, liking, scarcity)
- Game theory concepts of information asymmetry and credible commitments
- Cultural sensitivity and awareness in international negotiations"""

_ANALYSIS_JSON_SHAPE = """Format your response as a JSON object with the following structure:
{
  "score": number,
  "tone": string,
  "sentiment": string,
  "persuasiveStrength": number,
  "strengths": string[],
  "weaknesses": string[],
  "suggestions": string[],
  "frameworksUsed": string[],
  "techniquesIdentified": string[],
  "powerDynamics": string,
  "negotiationPhase": string
}

ONLY return the JSON object, nothing else."""

_IMPROVEMENT_INSTRUCTIONS = """Your task is to improve the negotiation text provided by the user, making it more effective, persuasive, and professional.

Follow these guidelines:
1. Maintain the original intent and key points
2. Improve clarity, conciseness, and structure
3. Enhance persuasive language and rhetoric
4. Ensure a professional and appropriate tone
5. Strengthen strategic positioning and framing
6. Better address potential counterparty concerns
7. Incorporate effective negotiation techniques
8. Add clear calls to action where appropriate
9. Apply principles from Harvard Negotiation Method, Chris Voss, and Robert Cialdini as relevant
10. Maintain authenticity and avoid overly formal or artificial language

Provide ONLY the improved text, with no explanations, comments, or additional information."""


def build_analysis_messages(text: str, industry_context: str, session_id: str) -> List[ChatMessage]:
    """
    System prompt with the scoring rubric and JSON shape, then the text.

    session_id is a fresh random token per call so identical texts are
    scored independently.
    """
    system_prompt = "\n\n".join([
        _expert_preamble(industry_context),
        _ANALYSIS_INSTRUCTIONS,
        f"This is analysis session {session_id} - evaluate this text independently and objectively.",
        _ANALYSIS_JSON_SHAPE,
    ])
    return [
        ChatMessage(role=ROLE_SYSTEM, content=system_prompt),
        ChatMessage(role=ROLE_USER, content=text),
    ]


def build_improvement_messages(text: str, industry_context: str) -> List[ChatMessage]:
    system_prompt = "\n\n".join([
        _expert_preamble(industry_context),
        _IMPROVEMENT_INSTRUCTIONS,
    ])
    return [
        ChatMessage(role=ROLE_SYSTEM, content=system_prompt),
        ChatMessage(role=ROLE_USER, content=text),
    ]


# ══════════════════════════════════════════════════════════════════════════
# Suggestions
# ══════════════════════════════════════════════════════════════════════════

_SUGGESTION_FOCUS = """Focus on:
1. Strengthening the negotiating position
2. Adding persuasive elements
3. Removing weak language
4. Improving clarity and directness
5. Adding specific negotiation techniques"""

_SUGGESTION_FORMAT = (
    "Return your analysis as a JSON array of suggestion objects with "
    "'title' and 'text' properties."
)

_EMAIL_SYSTEM_PROMPT = "\n\n".join([
    "You are an expert negotiation coach specializing in helping people write effective negotiation emails.\n"
    "Analyze the following email draft and provide 3-5 specific suggestions to improve its negotiation effectiveness.",
    _SUGGESTION_FOCUS,
    "For each suggestion, provide:\n"
    "- A short title (3-5 words)\n"
    "- A specific suggestion text (1-2 sentences)\n"
    "- The exact text to use (if applicable)",
    _SUGGESTION_FORMAT,
])

_CHAT_SYSTEM_PROMPT = "\n\n".join([
    "You are an expert negotiation coach specializing in helping people in real-time chat negotiations.\n"
    "Analyze the current message being drafted and the conversation context, then provide 2-3 specific "
    "suggestions to improve the negotiation effectiveness.",
    _SUGGESTION_FOCUS,
    "For each suggestion, provide:\n"
    "- A short title (3-5 words)\n"
    "- A specific suggestion text (1-2 sentences)",
    _SUGGESTION_FORMAT,
])


def build_email_suggestion_messages(text: str) -> List[ChatMessage]:
    return [
        ChatMessage(role=ROLE_SYSTEM, content=_EMAIL_SYSTEM_PROMPT),
        ChatMessage(role=ROLE_USER, content=text),
    ]


def build_chat_suggestion_messages(
    current_message: str,
    previous_messages: Optional[Sequence[ChatTurn]] = None,
) -> List[ChatMessage]:
    """
    System prompt, the last CHAT_HISTORY_LIMIT turns, then the current draft.

    Turns flagged is_user are sent as the user's side of the conversation,
    everything else as the counterparty (assistant role).
    """
    messages = [ChatMessage(role=ROLE_SYSTEM, content=_CHAT_SYSTEM_PROMPT)]
    for turn in list(previous_messages or [])[-CHAT_HISTORY_LIMIT:]:
        messages.append(ChatMessage(
            role=ROLE_USER if turn.is_user else ROLE_ASSISTANT,
            content=turn.text,
        ))
    messages.append(ChatMessage(
        role=ROLE_USER,
        content=f'I\'m drafting this message: "{current_message}"',
    ))
    return messages

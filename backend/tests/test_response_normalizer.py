"""
NegotiateAI Backend - Response Normalizer Unit Tests
=====================================================

What we test:
    ✅ Whole-text JSON and JSON embedded in prose or code fences
    ✅ Brackets inside string literals do not break extraction
    ✅ Strict schema validation (integer ranges, types, non-empty lists)
    ✅ normalize() never raises and flags fallbacks
    ✅ Normalizing a serialized result yields the same result
"""

import json

import pytest

from negotiateai.exceptions import ParseError
from negotiateai.schemas.analysis import AnalysisResult, SuggestionItem, SuggestionList
from negotiateai.services.response_normalizer import (
    JsonShape,
    extract_json,
    find_balanced,
    normalize,
    parse_structured,
)


def _fallback_analysis():
    return AnalysisResult(
        score=0, tone="n/a", sentiment="n/a", persuasive_strength=0,
        strengths=[], weaknesses=[], suggestions=[],
    )


def _fallback_suggestions():
    return [SuggestionItem(title="Parsing Error", text="fallback")]


class TestFindBalanced:

    def test_returns_first_balanced_object(self):
        text = 'prefix {"a": {"b": 1}} middle {"c": 2}'
        assert find_balanced(text, "{", "}") == '{"a": {"b": 1}}'

    def test_ignores_brackets_inside_strings(self):
        text = 'Here: {"tone": "firm } but fair {", "n": 1} done'
        assert find_balanced(text, "{", "}") == '{"tone": "firm } but fair {", "n": 1}'

    def test_handles_escaped_quotes(self):
        text = r'x {"q": "she said \"}\" twice"} y'
        assert find_balanced(text, "{", "}") == r'{"q": "she said \"}\" twice"}'

    def test_unbalanced_returns_none(self):
        assert find_balanced('{"a": [1, 2', "{", "}") is None

    def test_no_open_char_returns_none(self):
        assert find_balanced("no json here", "[", "]") is None


class TestExtractJson:

    def test_whole_text_object(self, valid_analysis):
        assert extract_json(json.dumps(valid_analysis), JsonShape.OBJECT) == valid_analysis

    def test_object_in_code_fence(self, valid_analysis):
        raw = "```json\n" + json.dumps(valid_analysis) + "\n```"
        assert extract_json(raw, JsonShape.OBJECT) == valid_analysis

    def test_object_surrounded_by_prose(self, valid_analysis):
        raw = "Sure! Here is my analysis:\n" + json.dumps(valid_analysis) + "\nLet me know."
        assert extract_json(raw, JsonShape.OBJECT) == valid_analysis

    def test_array_with_whitespace(self):
        raw = '  [{"title":"a","text":"b"}]  '
        assert extract_json(raw, JsonShape.ARRAY) == [{"title": "a", "text": "b"}]

    def test_wrong_top_level_type_falls_through_to_scan(self, valid_analysis):
        """A whole-text array is not accepted as an object; the scan finds the inner object."""
        raw = json.dumps([valid_analysis])
        assert extract_json(raw, JsonShape.OBJECT) == valid_analysis

    def test_plain_text_raises(self):
        with pytest.raises(ParseError):
            extract_json("not json at all", JsonShape.ARRAY)

    def test_empty_raises(self):
        with pytest.raises(ParseError):
            extract_json("   ", JsonShape.OBJECT)

    def test_malformed_embedded_json_raises(self):
        with pytest.raises(ParseError):
            extract_json("result: {score: 80, tone: 'x'}", JsonShape.OBJECT)


class TestParseStructured:

    def test_valid_analysis(self, valid_analysis):
        result = parse_structured(json.dumps(valid_analysis), JsonShape.OBJECT, AnalysisResult.model_validate)
        assert result.score == 82
        assert result.persuasive_strength == 74
        assert result.frameworks_used == ["Deadline pressure"]

    def test_optional_fields_may_be_absent(self, valid_analysis):
        data = {k: v for k, v in valid_analysis.items() if k not in ("powerDynamics", "negotiationPhase")}
        result = parse_structured(json.dumps(data), JsonShape.OBJECT, AnalysisResult.model_validate)
        assert result.power_dynamics is None
        assert result.negotiation_phase is None

    @pytest.mark.parametrize("score", ["85", 85.5, 101, -1, True])
    def test_score_must_be_integer_in_range(self, score, valid_analysis):
        data = dict(valid_analysis, score=score)
        with pytest.raises(ParseError):
            parse_structured(json.dumps(data), JsonShape.OBJECT, AnalysisResult.model_validate)

    def test_missing_required_field(self, valid_analysis):
        data = {k: v for k, v in valid_analysis.items() if k != "strengths"}
        with pytest.raises(ParseError):
            parse_structured(json.dumps(data), JsonShape.OBJECT, AnalysisResult.model_validate)

    def test_suggestion_items_need_title_and_text(self):
        with pytest.raises(ParseError):
            parse_structured('[{"title": "only a title"}]', JsonShape.ARRAY, SuggestionList.validate_python)

    def test_empty_suggestion_list_rejected(self):
        with pytest.raises(ParseError):
            parse_structured("[]", JsonShape.ARRAY, SuggestionList.validate_python)


class TestNormalize:

    def test_garbage_yields_fallback(self):
        normalized = normalize("not json at all", JsonShape.ARRAY, SuggestionList.validate_python, _fallback_suggestions)
        assert normalized.is_fallback is True
        assert normalized.value == _fallback_suggestions()

    def test_none_yields_fallback(self):
        normalized = normalize(None, JsonShape.OBJECT, AnalysisResult.model_validate, _fallback_analysis)
        assert normalized.is_fallback is True

    def test_invalid_schema_yields_fallback(self, valid_analysis):
        raw = json.dumps(dict(valid_analysis, score="high"))
        normalized = normalize(raw, JsonShape.OBJECT, AnalysisResult.model_validate, _fallback_analysis)
        assert normalized.is_fallback is True
        assert normalized.value.score == 0

    def test_suggestions_with_whitespace(self):
        normalized = normalize(
            '  [{"title":"a","text":"b"}]  ',
            JsonShape.ARRAY,
            SuggestionList.validate_python,
            _fallback_suggestions,
        )
        assert normalized.is_fallback is False
        assert normalized.value == [SuggestionItem(title="a", text="b")]

    def test_normalizing_serialized_result_is_stable(self, valid_analysis):
        first = normalize(json.dumps(valid_analysis), JsonShape.OBJECT, AnalysisResult.model_validate, _fallback_analysis)
        serialized = json.dumps(first.value.model_dump(by_alias=True))
        second = normalize(serialized, JsonShape.OBJECT, AnalysisResult.model_validate, _fallback_analysis)
        assert second.is_fallback is False
        assert second.value == first.value

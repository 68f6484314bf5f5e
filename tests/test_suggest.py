from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from netsight.constants import AI_SUGGESTION_ERROR
from netsight.models import NetworkType, SuggestionRequest
from netsight.suggest import OpenAISuggester, SuggestionError, build_prompt, parse_suggestion

REPLY = {
    "suggested_parameters": {"modulation": "QPSK", "bandwidth": 10, "distance": 3000, "noise_level": -100},
    "reasoning": "Robust modulation for a long, noisy cell edge.",
}


class StubCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def stub_client(completions: StubCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def make_request(**overrides) -> SuggestionRequest:
    values = {"network_type": "4G", "goal": "minimize_ber", "user_constraints": "distance above 2 km"}
    values.update(overrides)
    return SuggestionRequest(**values)


def test_build_prompt_mentions_inputs_and_ranges():
    prompt = build_prompt(make_request())
    assert "Network type: 4G" in prompt
    assert "Goal: minimize_ber" in prompt
    assert "User constraints: distance above 2 km" in prompt
    assert "QPSK, 16-QAM, 64-QAM, 256-QAM" in prompt
    assert "between 10 and 5000" in prompt

    assert "User constraints: none" in build_prompt(make_request(user_constraints=None))


def test_suggester_returns_parsed_reply():
    completions = StubCompletions(content=json.dumps(REPLY))
    suggester = OpenAISuggester(model="test-model", client=stub_client(completions))

    result = suggester.suggest(make_request(network_type=NetworkType.NR))

    assert result.suggested_parameters.modulation == "QPSK"
    assert result.suggested_parameters.distance == 3000.0
    assert result.reasoning.startswith("Robust")
    call = completions.calls[0]
    assert call["model"] == "test-model"
    assert call["response_format"] == {"type": "json_object"}
    assert "Network type: 5G" in call["messages"][-1]["content"]


def test_parse_accepts_camel_case_fences_and_numeric_strings():
    content = "```json\n" + json.dumps({
        "suggestedParameters": {"modulation": "64-QAM", "bandwidth": "40", "distance": "800", "noiseLevel": "-98"},
        "reasoning": "Balanced.",
    }) + "\n```"
    result = parse_suggestion(content)
    assert result.suggested_parameters.bandwidth == 40.0
    assert result.suggested_parameters.noise_level == -98.0


@pytest.mark.parametrize(
    "completions",
    [
        StubCompletions(error=RuntimeError("connection reset")),
        StubCompletions(content=None),
        StubCompletions(content="I suggest QPSK."),
        StubCompletions(content=json.dumps({"reasoning": "missing parameters"})),
    ],
)
def test_failures_surface_as_generic_error(completions):
    suggester = OpenAISuggester(client=stub_client(completions))
    with pytest.raises(SuggestionError) as excinfo:
        suggester.suggest(make_request())
    assert str(excinfo.value) == AI_SUGGESTION_ERROR
    assert excinfo.value.__cause__ is not None

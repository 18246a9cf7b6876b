from types import SimpleNamespace

import pytest

from server.llm import GeminiGenerator, GenerationError, extract_json_array, extract_json_object


class FakeModels:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append(model)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(text=outcome)


def make_generator(outcomes, sleeps):
    client = SimpleNamespace(models=FakeModels(outcomes))
    return GeminiGenerator(client=client, models=['flash', 'pro'], retries=3, sleep=sleeps.append)


def test_first_success_is_returned():
    sleeps = []
    generator = make_generator(['["Q"]'], sleeps)
    assert generator.generate("prompt") == '["Q"]'
    assert sleeps == []


def test_retries_then_falls_back_to_next_model():
    sleeps = []
    generator = make_generator([RuntimeError("503")] * 3 + ['ok'], sleeps)

    assert generator.generate("prompt") == 'ok'
    assert generator.client.models.calls == ['flash', 'flash', 'flash', 'pro']
    assert sleeps == [1, 2, 4]


def test_empty_text_counts_as_failure():
    sleeps = []
    generator = make_generator(['', 'text'], sleeps)
    assert generator.generate("prompt") == 'text'
    assert sleeps == [1]


def test_all_attempts_exhausted():
    sleeps = []
    generator = make_generator([RuntimeError("quota")] * 6, sleeps)

    with pytest.raises(GenerationError):
        generator.generate("prompt")
    assert sleeps == [1, 2, 4, 1, 2, 4]


def test_extract_array_inside_fences():
    assert extract_json_array('```json\n["A?", " B? "]\n```') == ["A?", "B?"]


def test_extract_array_from_lines():
    text = "Here are some:\n1. What is polymorphism?\n2. Why?\n* Explain dependency injection."
    assert extract_json_array(text) == ["What is polymorphism?", "Explain dependency injection."]


def test_extract_object():
    assert extract_json_object('prefix {"a": {"b": 1}} suffix') == {'a': {'b': 1}}
    with pytest.raises(ValueError):
        extract_json_object("no braces")

import pytest
import requests

from proctoring.api_client import InterviewAPI, QuestionSourceError, EvaluationError


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.body = body

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self.body is None:
            raise ValueError("no json")
        return self.body

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeHTTP:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, json=None, timeout=None):
        self.requests.append((url, json))
        if self.error:
            raise self.error
        return self.response


def test_generate_questions_defaults():
    http = FakeHTTP(FakeResponse(body={'questions': ['Q1', 'Q2']}))
    api = InterviewAPI('http://localhost:3000/', session=http)

    assert api.generate_questions() == ['Q1', 'Q2']
    url, payload = http.requests[0]
    assert url == 'http://localhost:3000/api/generate-questions'
    assert payload == {'domain': 'general', 'level': 'medium'}


@pytest.mark.parametrize("http", [
    FakeHTTP(error=requests.ConnectionError("refused")),
    FakeHTTP(FakeResponse(500, {'error': 'boom', 'questions': ['Q']})),
    FakeHTTP(FakeResponse(body={'questions': []})),
    FakeHTTP(FakeResponse(body=None)),
])
def test_question_failures(http):
    api = InterviewAPI('http://server', session=http)
    with pytest.raises(QuestionSourceError):
        api.generate_questions('python', 'junior')
    assert api.fetch_questions('python', 'junior') is None


def test_evaluate_responses_payload():
    evaluation = {'overall_proficiency': 'Good', 'feedback': 'ok', 'results': []}
    http = FakeHTTP(FakeResponse(body={'evaluation': evaluation}))
    api = InterviewAPI('http://server', session=http)
    answers = [{'question': 'Q1', 'response': 'A1'}]

    assert api.evaluate_responses(answers, 12.346, 'python') == evaluation
    url, payload = http.requests[0]
    assert url == 'http://server/api/evaluate-responses'
    assert payload == {'answers': answers, 'posture': {'spineAngle': '12.35'}, 'domain': 'python'}


def test_evaluate_responses_error_status():
    http = FakeHTTP(FakeResponse(500, {'error': 'Failed to evaluate responses.'}))
    api = InterviewAPI('http://server', session=http)
    with pytest.raises(EvaluationError, match='Failed to evaluate'):
        api.evaluate_responses([], 0.0)


def test_evaluate_responses_transport_error():
    api = InterviewAPI('http://server', session=FakeHTTP(error=requests.Timeout("slow")))
    with pytest.raises(EvaluationError):
        api.evaluate_responses([], 0.0)


@pytest.mark.parametrize("body", [["not", "an", "object"], "oops", 3])
def test_evaluate_responses_rejects_non_object_body(body):
    api = InterviewAPI('http://server', session=FakeHTTP(FakeResponse(200, body)))
    with pytest.raises(EvaluationError):
        api.evaluate_responses([{'question': 'Q', 'response': 'A'}], 1.0)


def test_evaluate_responses_rejects_non_object_evaluation():
    api = InterviewAPI('http://server', session=FakeHTTP(FakeResponse(200, {'evaluation': ['x']})))
    with pytest.raises(EvaluationError):
        api.evaluate_responses([], 1.0)

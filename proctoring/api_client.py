"""HTTP client for the interview server: question source and evaluation sink."""

from typing import Dict, List, Optional

import requests

from config import SERVER_URL, HTTP_TIMEOUT, EVALUATION_TIMEOUT


class QuestionSourceError(RuntimeError):
    pass


class EvaluationError(RuntimeError):
    pass


class InterviewAPI:

    def __init__(self, base_url: str = SERVER_URL, session: requests.Session = None):
        self.base_url = base_url.rstrip('/')
        self.http = session or requests.Session()

    def generate_questions(self, domain: str = None, level: str = None) -> List[str]:
        """
        POST /api/generate-questions.

        Raises:
            QuestionSourceError: on transport failure, non-2xx status or an
                empty question list
        """
        payload = {'domain': domain or 'general', 'level': level or 'medium'}
        try:
            res = self.http.post(f"{self.base_url}/api/generate-questions", json=payload, timeout=HTTP_TIMEOUT)
            res.raise_for_status()
            data = res.json()
        except (requests.RequestException, ValueError) as e:
            raise QuestionSourceError(f"Question request failed: {e}") from e

        questions = data.get('questions') if isinstance(data, dict) else None
        if not isinstance(questions, list) or not questions:
            raise QuestionSourceError("No questions returned")
        return [str(q) for q in questions]

    def fetch_questions(self, domain: str = None, level: str = None) -> Optional[List[str]]:
        """Questions from the server, or None so the caller can fall back."""
        try:
            return self.generate_questions(domain, level)
        except QuestionSourceError as e:
            print(f"[API] fetchQuestions failed: {e}")
            return None

    def evaluate_responses(self, answers: List[Dict], spine_angle: float, domain: str = None) -> Dict:
        """
        POST /api/evaluate-responses with every answer and the final posture average.

        Raises:
            EvaluationError: on transport failure or an error response
        """
        payload = {
            'answers': answers,
            'posture': {'spineAngle': f"{spine_angle:.2f}"},
            'domain': domain,
        }
        try:
            res = self.http.post(f"{self.base_url}/api/evaluate-responses", json=payload,
                                 timeout=EVALUATION_TIMEOUT)
            data = res.json()
        except (requests.RequestException, ValueError) as e:
            raise EvaluationError(f"Evaluation request failed: {e}") from e

        if not isinstance(data, dict):
            raise EvaluationError(f"Unexpected evaluation response ({res.status_code})")
        if not res.ok:
            raise EvaluationError(data.get('error') or 'Evaluation failed')
        evaluation = data.get('evaluation') or {}
        if not isinstance(evaluation, dict):
            raise EvaluationError("Evaluation is not an object")
        return evaluation

"""
Gemini text generation with per-model retries, plus helpers that pull JSON
out of free-form model output.
"""

import json
import re
import time
from typing import Callable, List, Optional, Sequence

from google import genai

from config import GEMINI_API_KEY, GEMINI_MODELS, GEMINI_RETRIES


class GenerationError(RuntimeError):
    """Every model failed on every attempt."""


class GeminiGenerator:
    """
    Tries each model in order, up to `retries` attempts per model, sleeping
    2**attempt seconds after each failed attempt.
    """

    def __init__(self, client=None, models: Sequence[str] = GEMINI_MODELS,
                 retries: int = GEMINI_RETRIES, sleep: Callable[[float], None] = time.sleep,
                 api_key: Optional[str] = GEMINI_API_KEY):
        self._client = client
        self.api_key = api_key
        self.models = list(models)
        self.retries = retries
        self.sleep = sleep

    @property
    def client(self):
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate(self, prompt: str) -> str:
        last_error = None
        for model_name in self.models:
            for attempt in range(self.retries):
                try:
                    response = self.client.models.generate_content(model=model_name, contents=prompt)
                    text = getattr(response, 'text', None)
                    if not text:
                        raise GenerationError("No text found in Gemini response")
                    return text
                except Exception as e:
                    last_error = e
                    print(f"[LLM] Attempt {attempt + 1} failed for {model_name}. Retrying... {e}")
                    self.sleep(2 ** attempt)

        print("[LLM] All models failed after all retries.")
        raise GenerationError(f"Failed to generate content: {last_error}")


def extract_json_array(raw_text: str) -> List[str]:
    """
    Questions from model output: the outermost JSON array if there is one,
    otherwise numbered or bulleted lines longer than 10 characters.
    """
    start = raw_text.find('[')
    end = raw_text.rfind(']')
    if start != -1 and end > start:
        items = json.loads(raw_text[start:end + 1])
        return [str(item).strip() for item in items if str(item).strip()]

    questions = []
    for line in raw_text.splitlines():
        line = line.strip()
        if re.match(r'^\d+\.', line) or re.match(r'^[-*]\s', line):
            question = re.sub(r'^\d+\.\s*|^[-*]\s*', '', line).strip()
            if len(question) > 10:
                questions.append(question)
    return questions


def extract_json_object(raw_text: str) -> dict:
    """The outermost {...} in model output (markdown fences are ignored)."""
    start = raw_text.find('{')
    end = raw_text.rfind('}')
    if start == -1 or end == -1 or end < start:
        raise ValueError("No JSON object found.")
    return json.loads(raw_text[start:end + 1])

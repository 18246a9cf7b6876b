"""
Interview server.

Generates interview questions and evaluates answers through Gemini, and
exposes the proctoring audit trail (sessions and violations) recorded by
the client.
"""

import random
from typing import List

from flask import Flask, jsonify, request
from flask_cors import CORS

from config import (
    DEFAULT_QUESTIONS, NUM_QUESTIONS, NUM_HR_QUESTIONS, DB_PATH, SERVER_HOST, SERVER_PORT,
)
import db
from server.llm import GeminiGenerator, GenerationError, extract_json_array, extract_json_object


def question_prompt(count: int, domain: str, level: str) -> str:
    return f"""
Respond ONLY with a valid JSON array of exactly {count} technical interview questions as strings.
Do NOT include any explanations, markdown, or extra text.
Example: ["Q1", "Q2", "Q3"]
Domain: {domain}
Level: {level}
"""


def answer_prompt(question: str, answer: str, domain: str, level: str) -> str:
    return f"""You are an expert interview evaluator. Analyze the candidate's answer based on the question, domain ({domain}), and target level ({level}). Your response must be ONLY a single JSON object with the following structure:
{{
  "score": "<integer from 1 to 5, where 5 is excellent>",
  "tip": "<A single, actionable suggestion for improvement.>",
  "proficiency": "<A high-level proficiency assessment, e.g., 'Good grasp of fundamentals.'>",
  "overallFeedback": "<A one-paragraph summary of the strengths and weaknesses of this answer.>"
}}
Evaluate the following response for a {level} level interview question in the {domain} domain:
Question: "{question}"
Candidate Answer: "{answer}"
"""


def final_prompt(qa_pairs: List[dict], domain: str, level: str) -> str:
    pairs = "\n".join(
        f"Q{i + 1}: {qa.get('question')}\nA{i + 1}: {qa.get('answer')}" for i, qa in enumerate(qa_pairs)
    )
    return f"""
You are an expert interview evaluator. Given the following Q&A pairs for a {level} {domain} interview, provide a JSON object with:
{{
  "overallScore": "<integer 1-5>",
  "overallFeedback": "<one-paragraph summary>",
  "strengths": "<short bullet list>",
  "areasForImprovement": "<short bullet list>"
}}
Q&A pairs:
{pairs}
"""


def responses_prompt(answers: List[dict], spine_angle, domain: str) -> str:
    pairs = "\n".join(
        f"Q{i + 1}: {a.get('question')}\nA{i + 1}: {a.get('response')}" for i, a in enumerate(answers)
    )
    return f"""
You are an expert interview evaluator for a {domain} interview. The candidate's average spine
tilt during the interview was {spine_angle} degrees from vertical. Respond ONLY with a JSON object:
{{
  "overall_proficiency": "<short proficiency label>",
  "feedback": "<one-paragraph summary, mention posture if it was poor>",
  "results": [{{"question": "<question>", "score": <integer 1-10>, "improvement": "<one tip>"}}]
}}
Include one entry in "results" per question, in order.
Q&A pairs:
{pairs}
"""


def json_body() -> dict:
    """Request JSON as a dict; anything else (missing, malformed, an array) is empty."""
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def create_app(generator=None, db_path: str = None, hr_questions: List[str] = None) -> Flask:
    """
    Build the Flask app.

    Args:
        generator: Object with generate(prompt) -> str (defaults to GeminiGenerator)
        db_path: sqlite audit database (defaults to config.DB_PATH)
        hr_questions: Generic questions used for mixing and as fallback
    """
    app = Flask(__name__)
    CORS(app)

    generator = generator or GeminiGenerator()
    db_path = db_path or DB_PATH
    hr_questions = list(hr_questions or DEFAULT_QUESTIONS)
    db.init_db(db_path)

    @app.errorhandler(404)
    def handle_404(e):
        return jsonify({'error': 'Endpoint not found'}), 404

    @app.route('/api/generate-questions', methods=['POST'])
    def generate_questions():
        body = json_body()
        domain = body.get('domain')
        level = body.get('level')
        try:
            raw_count = body.get('numQuestions')
            num_questions = NUM_QUESTIONS if raw_count is None else int(raw_count)
        except (TypeError, ValueError):
            return jsonify({'error': 'numQuestions must be an integer.'}), 400
        if num_questions < 1:
            return jsonify({'error': 'numQuestions must be positive.'}), 400

        if not domain or not level:
            return jsonify({'questions': hr_questions[:num_questions]})

        num_tech = max(0, num_questions - NUM_HR_QUESTIONS)
        try:
            raw_text = generator.generate(question_prompt(num_tech, domain, level))
            tech_questions = extract_json_array(raw_text)
        except (GenerationError, ValueError) as e:
            print(f"[SERVER] Question generation failed: {e}")
            return jsonify({
                'error': 'Failed to generate specific questions. Serving generic questions.',
                'questions': hr_questions[:num_questions],
            }), 500

        selected_hr = random.sample(hr_questions, min(NUM_HR_QUESTIONS, len(hr_questions)))
        return jsonify({'questions': (selected_hr + tech_questions)[:num_questions]})

    @app.route('/api/evaluate-answer', methods=['POST'])
    def evaluate_answer():
        body = json_body()
        question = body.get('question')
        answer = body.get('answer')
        if not question or not answer:
            return jsonify({'error': 'Missing question or answer for evaluation.'}), 400

        try:
            raw_text = generator.generate(answer_prompt(question, answer, body.get('domain'), body.get('level')))
            evaluation = extract_json_object(raw_text)
        except (GenerationError, ValueError) as e:
            print(f"[SERVER] Evaluation parsing failed: {e}")
            return jsonify({'error': 'Failed to parse evaluation from model.'}), 500
        return jsonify({'evaluation': evaluation})

    @app.route('/api/final-evaluation', methods=['POST'])
    def final_evaluation():
        body = json_body()
        qa_pairs = body.get('qaPairs')
        if not isinstance(qa_pairs, list) or not qa_pairs or not all(isinstance(qa, dict) for qa in qa_pairs):
            return jsonify({'error': 'No answers provided.'}), 400

        try:
            raw_text = generator.generate(final_prompt(qa_pairs, body.get('domain'), body.get('level')))
            evaluation = extract_json_object(raw_text)
        except (GenerationError, ValueError) as e:
            print(f"[SERVER] Final evaluation parsing failed: {e}")
            return jsonify({'error': 'Failed to parse final evaluation from model.'}), 500
        return jsonify({'evaluation': evaluation})

    @app.route('/api/evaluate-responses', methods=['POST'])
    def evaluate_responses():
        body = json_body()
        answers = body.get('answers')
        if not isinstance(answers, list) or not answers or not all(isinstance(a, dict) for a in answers):
            return jsonify({'error': 'No answers provided.'}), 400
        posture = body.get('posture') or {}
        if not isinstance(posture, dict):
            return jsonify({'error': 'posture must be an object.'}), 400
        spine_angle = posture.get('spineAngle')

        try:
            raw_text = generator.generate(responses_prompt(answers, spine_angle, body.get('domain') or 'general'))
            evaluation = extract_json_object(raw_text)
        except (GenerationError, ValueError) as e:
            print(f"[SERVER] Response evaluation failed: {e}")
            return jsonify({'error': 'Failed to evaluate responses.'}), 500

        evaluation.setdefault('overall_proficiency', 'N/A')
        evaluation.setdefault('feedback', '')
        evaluation.setdefault('results', [])
        return jsonify({'evaluation': evaluation})

    @app.route('/api/status')
    def api_status():
        return jsonify(db.get_status(db_path))

    @app.route('/api/violations')
    def api_violations():
        session_id = request.args.get('session_id')
        limit = request.args.get('limit', 50, type=int)
        return jsonify(db.recent_violations(session_id, limit, db_path))

    return app


def main():
    app = create_app()
    print(f"[SERVER] Server is running on port {SERVER_PORT}")
    app.run(host=SERVER_HOST, port=SERVER_PORT, debug=True)


if __name__ == '__main__':
    main()

# mediminder/services/quiz_service.py
import json
import random
import re
from typing import List, Optional, Sequence, Tuple

from pydantic import ValidationError

from mediminder.models.quiz import QuizQuestion, QuizQuestionSet
from mediminder.services.ai_provider import AIProviderError, StructuredOutputError, ai_provider
from mediminder.services.prompt_library import PROMPT_LIBRARY
from mediminder.utils.config import settings
from mediminder.utils.logger import logger

SOURCE_AI = "ai"
SOURCE_FALLBACK = "fallback"

# Static questions used when AI generation is unavailable or the user has no medications.
FALLBACK_QUESTIONS: Tuple[QuizQuestion, ...] = (
    QuizQuestion(
        question_text="What is the correct dosage of your medication?",
        options=["1 tablet", "2 tablets", "3 tablets", "4 tablets"],
        correct_answer=0,
    ),
    QuizQuestion(
        question_text="When should you take your medication?",
        options=["Before meals", "After meals", "With meals", "Before bed"],
        correct_answer=2,
    ),
    QuizQuestion(
        question_text="What should you do if you miss a dose?",
        options=[
            "Take it immediately",
            "Skip it and take the next dose",
            "Double the next dose",
            "Call your doctor",
        ],
        correct_answer=0,
    ),
)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class QuizParseError(Exception):
    """Raised when free-text AI output cannot be turned into quiz questions."""
    pass


def fisher_yates_permutation(size: int, rng: random.Random) -> List[int]:
    """Uniform random permutation of range(size)."""
    order = list(range(size))
    for i in range(size - 1, 0, -1):
        j = rng.randint(0, i)
        order[i], order[j] = order[j], order[i]
    return order


def shuffle_question(question: QuizQuestion, rng: Optional[random.Random] = None) -> QuizQuestion:
    """Returns a copy with options shuffled and correct_answer moved to follow its option."""
    rng = rng or random.Random()
    order = fisher_yates_permutation(len(question.options), rng)
    return question.model_copy(update={
        "options": [question.options[i] for i in order],
        "correct_answer": order.index(question.correct_answer),
    })


def fallback_questions(shuffle: bool = True, rng: Optional[random.Random] = None) -> List[QuizQuestion]:
    if not shuffle:
        return [q.model_copy(deep=True) for q in FALLBACK_QUESTIONS]
    rng = rng or random.Random()
    return [shuffle_question(q, rng) for q in FALLBACK_QUESTIONS]


def format_medications(medications: Sequence) -> str:
    lines = []
    for med in medications:
        med_id = getattr(med, "id", None)
        label = f"{med.name} (id: {med_id})" if med_id else med.name
        lines.append(f"- {label}: {med.dosage}, {med.frequency}")
    return "\n".join(lines)


def parse_quiz_response(response_text: str) -> List[QuizQuestion]:
    """
    Degraded parser for a free-text completion that should contain the quiz JSON.
    Tolerates markdown fences and chatter around the object; drops malformed questions.
    """
    match = _JSON_OBJECT.search(response_text or "")
    if not match:
        raise QuizParseError("No JSON object found in AI response")
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise QuizParseError(f"Invalid JSON in AI response: {e}") from e

    raw_questions = payload.get("questions") if isinstance(payload, dict) else None
    if not isinstance(raw_questions, list):
        raise QuizParseError("AI response has no 'questions' list")

    questions = []
    for raw in raw_questions:
        try:
            questions.append(QuizQuestion.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Dropping malformed AI question: {e.errors()[0].get('msg')}")
    if not questions:
        raise QuizParseError("AI response contained no usable questions")
    return questions


class QuizService:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        logger.info("QuizService initialized.")

    async def generate_ai_questions(self, medications: Sequence) -> List[QuizQuestion]:
        """
        Requests questions for the given medications.
        Raises AIProviderError or QuizParseError; callers decide how to degrade.
        """
        inputs = {
            "question_count": settings.quiz_question_count,
            "medications": format_medications(medications),
        }
        prompt = PROMPT_LIBRARY["Quiz Generator"]
        try:
            question_set = await ai_provider.complete_structured(
                prompt, inputs, QuizQuestionSet,
                temperature=settings.quiz_temperature,
                max_tokens=settings.quiz_max_tokens,
            )
            questions = question_set.questions
        except StructuredOutputError:
            logger.warning("Structured quiz output failed; falling back to free-text parsing.")
            response_text = await ai_provider.complete(
                prompt, inputs,
                temperature=settings.quiz_temperature,
                max_tokens=settings.quiz_max_tokens,
            )
            questions = parse_quiz_response(response_text)

        if not questions:
            raise QuizParseError("AI returned an empty question list")
        return questions[:settings.quiz_question_count]

    async def get_questions(self, medications: Sequence, restart: bool = False) -> Tuple[List[QuizQuestion], str]:
        """
        Always returns a usable question list and where it came from.
        With no medications the AI is skipped; the static set is only reshuffled on restart.
        """
        if not medications:
            logger.info("No medications on file; using fallback questions.")
            return fallback_questions(shuffle=restart, rng=self.rng), SOURCE_FALLBACK

        try:
            questions = await self.generate_ai_questions(medications)
            logger.info(f"Generated {len(questions)} AI questions for {len(medications)} medications.")
            return questions, SOURCE_AI
        except (AIProviderError, QuizParseError) as e:
            logger.warning(f"AI question generation failed, using fallback questions: {e}")
            return fallback_questions(shuffle=True, rng=self.rng), SOURCE_FALLBACK


# Instantiate the service globally or manage via dependency injection
quiz_service = QuizService()

# mediminder/services/analytics.py
# Knowledge analytics engine: turns a user's full quiz history into the doctor report.
import math
import re
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from mediminder.models.enums import PriorityLevel, Topic
from mediminder.models.quiz import QuizQuestion
from mediminder.models.report import (
    EducationArea,
    KnowledgeReport,
    MedicationKnowledge,
    MissedQuestion,
    Recommendation,
)
from mediminder.utils.config import settings
from mediminder.utils.logger import logger

FALLBACK_MEDICATION_LABEL = "your medication"

# Tried in order; the first capture wins.
MEDICATION_PATTERNS = (
    re.compile(r"about (.*?)\?", re.IGNORECASE),
    re.compile(r"for (.*?)\?", re.IGNORECASE),
)

# Order matters: a question can mention several of these.
TOPIC_KEYWORDS: List[Tuple[Topic, Tuple[str, ...]]] = [
    (Topic.DOSAGE, ("dosage", "how much", "amount")),
    (Topic.TIMING, ("when", "time", "schedule")),
    (Topic.MISSED_DOSES, ("miss", "skip", "forget")),
    (Topic.SIDE_EFFECTS, ("side effect", "adverse", "reaction")),
    (Topic.INTERACTIONS, ("interact", "other medication", "food")),
    (Topic.STORAGE, ("store", "keep", "refrigerate")),
]


class NoAttemptsError(Exception):
    """Raised when a report is requested before any quiz attempt exists."""
    pass


def extract_medication_name(question_text: str) -> str:
    for pattern in MEDICATION_PATTERNS:
        match = pattern.search(question_text)
        if match:
            return match.group(1)
    return FALLBACK_MEDICATION_LABEL


def identify_topic(question_text: str) -> Topic:
    lower_text = question_text.lower()
    for topic, keywords in TOPIC_KEYWORDS:
        if any(keyword in lower_text for keyword in keywords):
            return topic
    return Topic.GENERAL_KNOWLEDGE


def calculate_overall_score(attempts: Sequence) -> int:
    """Percentage of correct answers across every attempt, rounded half up."""
    total_score = sum(attempt.score for attempt in attempts)
    total_questions = sum(attempt.total_questions for attempt in attempts)
    if total_questions <= 0:
        return 0
    return int(math.floor(100 * total_score / total_questions + 0.5))


def miss_rate(knowledge: MedicationKnowledge) -> float:
    return (knowledge.missed / knowledge.total) * 100


def classify_priority(knowledge: MedicationKnowledge) -> PriorityLevel:
    rate = miss_rate(knowledge)
    if rate > settings.high_priority_miss_rate:
        return PriorityLevel.HIGH
    if rate > settings.medium_priority_miss_rate:
        return PriorityLevel.MEDIUM
    return PriorityLevel.LOW


def tally_attempts(attempts: Sequence) -> Tuple[Dict[str, MedicationKnowledge], List[MissedQuestion]]:
    """
    Walks every (attempt, question) pair once.

    Every question counts toward its medication's total; only misses feed the
    missed counter, the topic histogram and the missed-question list. Missed
    questions are de-duplicated by exact text and keep first-seen order.
    """
    knowledge: Dict[str, MedicationKnowledge] = {}
    missed_questions: List[MissedQuestion] = []
    seen_texts = set()

    for attempt in attempts:
        for index, raw_question in enumerate(attempt.questions):
            question = raw_question if isinstance(raw_question, QuizQuestion) else QuizQuestion.model_validate(raw_question)
            user_answer = attempt.answers[index] if index < len(attempt.answers) else None
            medication_name = extract_medication_name(question.question_text)

            entry = knowledge.setdefault(medication_name, MedicationKnowledge(topics={}))
            entry.total += 1

            if user_answer == question.correct_answer:
                continue

            entry.missed += 1
            topic = identify_topic(question.question_text)
            entry.topics[topic] = entry.topics.get(topic, 0) + 1

            if question.question_text not in seen_texts:
                seen_texts.add(question.question_text)
                missed_questions.append(MissedQuestion(
                    question_text=question.question_text,
                    options=question.options,
                    correct_answer=question.correct_answer,
                    explanation=question.explanation,
                    medication_name=medication_name,
                    topic=topic,
                ))

    return knowledge, missed_questions


def generate_education_areas(knowledge: Dict[str, MedicationKnowledge]) -> List[EducationArea]:
    areas = []
    for medication, data in knowledge.items():
        if data.total <= 0:
            continue
        level = classify_priority(data)
        if level is PriorityLevel.HIGH:
            description = f"Significant knowledge gaps about {medication}. Consider scheduling a detailed consultation."
        elif level is PriorityLevel.MEDIUM:
            description = f"Some knowledge gaps about {medication}. Review medication information and ask questions at next appointment."
        else:
            description = f"Good understanding of {medication}, but some areas could be reviewed."
        areas.append(EducationArea(medication=medication, level=level, description=description))
    return areas


def generate_recommendations(knowledge: Dict[str, MedicationKnowledge]) -> List[Recommendation]:
    recommendations = [Recommendation(
        title="Schedule a Medication Review",
        description="Schedule an appointment with your healthcare provider to review all your medications.",
    )]

    for medication, data in knowledge.items():
        if data.total <= 0:
            continue
        if classify_priority(data) is PriorityLevel.HIGH:
            recommendations.append(Recommendation(
                title=f"Detailed Education on {medication}",
                description=f"Request a detailed explanation about {medication}, including proper usage, side effects, and interactions.",
            ))
        for topic, count in data.topics.items():
            if count > 0:
                recommendations.append(Recommendation(
                    title=f"Review {topic.value} for {medication}",
                    description=f"Focus on understanding {topic.value.lower()} aspects of {medication}.",
                ))
    return recommendations


def build_knowledge_report(
    attempts: Sequence,
    patient_name: Optional[str] = None,
    report_date: Optional[date] = None,
) -> KnowledgeReport:
    """
    Builds the knowledge report from the complete attempt history.

    Pure given its inputs; pass `report_date` for a fully deterministic result.
    Raises NoAttemptsError for an empty history.
    """
    if not attempts:
        raise NoAttemptsError("You need to complete at least one quiz to generate a report.")

    knowledge, missed_questions = tally_attempts(attempts)
    knowledge = {name: data for name, data in knowledge.items() if data.total > 0}

    report = KnowledgeReport(
        date=(report_date or date.today()).isoformat(),
        patient_name=patient_name or "Patient",
        overall_score=calculate_overall_score(attempts),
        medication_knowledge=knowledge,
        areas_for_education=generate_education_areas(knowledge),
        specific_questions=missed_questions[:settings.missed_question_sample_size],
        recommendations=generate_recommendations(knowledge),
    )
    logger.debug(f"Built knowledge report from {len(attempts)} attempts covering {len(knowledge)} medications")
    return report

# tests/test_analytics.py
from datetime import date
from types import SimpleNamespace

import pytest

from mediminder.models.enums import PriorityLevel, Topic
from mediminder.models.report import MedicationKnowledge
from mediminder.services.analytics import (
    FALLBACK_MEDICATION_LABEL,
    NoAttemptsError,
    build_knowledge_report,
    calculate_overall_score,
    classify_priority,
    extract_medication_name,
    identify_topic,
    tally_attempts,
)


def question(text, correct=0):
    return {
        "question_text": text,
        "options": ["A", "B", "C", "D"],
        "correct_answer": correct,
        "explanation": f"Because of {text}",
    }


def attempt(questions, answers):
    score = sum(1 for q, a in zip(questions, answers) if a == q["correct_answer"])
    return SimpleNamespace(questions=questions, answers=answers, score=score, total_questions=len(questions))


@pytest.mark.report
class TestQuestionClassification:
    @pytest.mark.parametrize("text, expected", [
        ("What should you know about Metformin?", "Metformin"),
        ("What is the usual dose for Lisinopril?", "Lisinopril"),
        ("What is the correct dosage of your medication?", FALLBACK_MEDICATION_LABEL),
    ])
    def test_extract_medication_name(self, text, expected):
        assert extract_medication_name(text) == expected

    def test_about_wins_over_for(self):
        assert extract_medication_name("Looking for facts about Aspirin?") == "Aspirin"

    @pytest.mark.parametrize("text, expected", [
        ("What is the correct dosage of your medication?", Topic.DOSAGE),
        ("When should you take your medication?", Topic.TIMING),
        ("What should you do if you miss a dose?", Topic.MISSED_DOSES),
        ("Which side effect is common with Metformin?", Topic.SIDE_EFFECTS),
        ("Should you take Warfarin with food?", Topic.INTERACTIONS),
        ("Where should you store insulin?", Topic.STORAGE),
        ("What is Aspirin used to treat?", Topic.GENERAL_KNOWLEDGE),
    ])
    def test_identify_topic(self, text, expected):
        assert identify_topic(text) == expected

    def test_topic_order_is_significant(self):
        # Mentions both an amount and a time; dosage is checked first.
        assert identify_topic("How much should you take at bed time?") == Topic.DOSAGE


@pytest.mark.report
class TestScoring:
    def test_overall_score_spans_all_attempts(self):
        attempts = [
            SimpleNamespace(score=1, total_questions=3),
            SimpleNamespace(score=2, total_questions=2),
        ]
        assert calculate_overall_score(attempts) == 60

    def test_overall_score_rounds_half_up(self):
        # 1/8 = 12.5%
        assert calculate_overall_score([SimpleNamespace(score=1, total_questions=8)]) == 13

    def test_overall_score_without_questions_is_zero(self):
        assert calculate_overall_score([SimpleNamespace(score=0, total_questions=0)]) == 0

    @pytest.mark.parametrize("total, missed, expected", [
        (4, 3, PriorityLevel.HIGH),
        (5, 2, PriorityLevel.MEDIUM),
        (5, 1, PriorityLevel.LOW),
        (2, 1, PriorityLevel.MEDIUM),  # exactly 50% is not High
        (4, 1, PriorityLevel.LOW),     # exactly 25% is not Medium
    ])
    def test_classify_priority(self, total, missed, expected):
        assert classify_priority(MedicationKnowledge(total=total, missed=missed)) == expected


@pytest.mark.report
class TestTally:
    def test_totals_count_every_question_and_misses_only_misses(self):
        questions = [
            question("What is the dosage for Metformin?"),
            question("When do you take Metformin for Metformin?"),
            question("What should you know about Aspirin?"),
        ]
        knowledge, missed = tally_attempts([attempt(questions, [0, 1, 0])])

        assert knowledge["Metformin"].total == 2
        assert knowledge["Metformin"].missed == 1
        assert knowledge["Metformin"].topics == {Topic.TIMING: 1}
        assert knowledge["Aspirin"].total == 1
        assert knowledge["Aspirin"].missed == 0
        assert [m.question_text for m in missed] == ["When do you take Metformin for Metformin?"]

    def test_missing_answer_counts_as_miss(self):
        questions = [question("What is the dosage for Metformin?"), question("When is the time for Metformin?")]
        raw = SimpleNamespace(questions=questions, answers=[0], score=1, total_questions=2)
        knowledge, missed = tally_attempts([raw])
        assert knowledge["Metformin"].missed == 1
        assert len(missed) == 1

    def test_repeated_miss_is_listed_once(self):
        q = question("What is the dosage for Metformin?")
        knowledge, missed = tally_attempts([attempt([q], [1]), attempt([q], [2])])
        assert knowledge["Metformin"].missed == 2
        assert knowledge["Metformin"].topics[Topic.DOSAGE] == 2
        assert len(missed) == 1
        assert missed[0].medication_name == "Metformin"
        assert missed[0].topic == Topic.DOSAGE


@pytest.mark.report
class TestKnowledgeReport:
    def test_no_attempts_raises(self):
        with pytest.raises(NoAttemptsError):
            build_knowledge_report([])

    def test_report_contents(self):
        questions = [
            question("What is the dosage for Metformin?"),
            question("When should you take Metformin for Metformin?"),
            question("What should you do if you miss a dose of Metformin for Metformin?"),
            question("What should you know about Aspirin?"),
        ]
        report = build_knowledge_report(
            [attempt(questions, [1, 1, 0, 0])],
            patient_name="pat@example.com",
            report_date=date(2024, 5, 1),
        )

        assert report.date == "2024-05-01"
        assert report.patient_name == "pat@example.com"
        assert report.overall_score == 50
        assert set(report.medication_knowledge) == {"Metformin", "Aspirin"}

        levels = {area.medication: area.level for area in report.areas_for_education}
        assert levels == {"Metformin": PriorityLevel.HIGH, "Aspirin": PriorityLevel.LOW}

        titles = [r.title for r in report.recommendations]
        assert titles[0] == "Schedule a Medication Review"
        assert "Detailed Education on Metformin" in titles
        assert "Review Dosage for Metformin" in titles
        assert "Review Timing for Metformin" in titles
        assert not any("Aspirin" in title for title in titles)

        dosage = next(r for r in report.recommendations if r.title == "Review Dosage for Metformin")
        assert dosage.description == "Focus on understanding dosage aspects of Metformin."

    def test_patient_name_defaults(self):
        report = build_knowledge_report([attempt([question("What should you know about Aspirin?")], [0])])
        assert report.patient_name == "Patient"
        assert report.overall_score == 100
        assert report.specific_questions == []

    def test_missed_question_sample_is_capped(self):
        questions = [question(f"What should you know about Drug{i}?") for i in range(7)]
        report = build_knowledge_report([attempt(questions, [3] * 7)])
        assert len(report.specific_questions) == 5
        assert report.specific_questions[0].question_text == "What should you know about Drug0?"
        assert report.overall_score == 0

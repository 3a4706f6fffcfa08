# tests/test_reports_api.py
import pytest
from fastapi.testclient import TestClient


def question(text, correct):
    return {"question_text": text, "options": ["A", "B", "C", "D"], "correct_answer": correct}


@pytest.mark.report
class TestKnowledgeReportAPI:
    def test_requires_an_attempt(self, client: TestClient, user_headers):
        response = client.get("/reports/knowledge", headers=user_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "You need to complete at least one quiz to generate a report."

    def test_report_over_all_attempts(self, client: TestClient, user_headers):
        first = [
            question("What is the dosage for Metformin?", 0),
            question("When should you take Metformin for Metformin?", 1),
            question("What should you know about Aspirin?", 2),
        ]
        second = [
            question("What is the dosage for Metformin?", 0),
            question("What should you know about Aspirin?", 2),
        ]
        client.post("/quiz/attempts", json={"questions": first, "answers": [3, 1, 3]}, headers=user_headers)
        client.post("/quiz/attempts", json={"questions": second, "answers": [3, 2]}, headers=user_headers)

        response = client.get("/reports/knowledge", headers=user_headers)
        assert response.status_code == 200
        report = response.json()

        # 2 correct out of 5 questions
        assert report["overall_score"] == 40
        assert report["patient_name"] == user_headers["X-User-Email"]
        assert report["medication_knowledge"]["Metformin"] == {
            "total": 3, "missed": 2, "topics": {"Dosage": 2},
        }
        assert report["medication_knowledge"]["Aspirin"]["missed"] == 1

        levels = {area["medication"]: area["level"] for area in report["areas_for_education"]}
        assert levels == {"Metformin": "High Priority", "Aspirin": "Medium Priority"}

        missed_texts = [q["question_text"] for q in report["specific_questions"]]
        assert missed_texts == ["What is the dosage for Metformin?", "What should you know about Aspirin?"]
        assert report["recommendations"][0]["title"] == "Schedule a Medication Review"

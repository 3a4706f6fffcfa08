# tests/test_medications_api.py
import pytest
from fastapi.testclient import TestClient

from mediminder.models.medication import RecognitionResult

METFORMIN = {"name": "Metformin", "dosage": "500 mg", "frequency": "twice daily", "notes": "With meals"}


@pytest.mark.medications
class TestMedicationsAPI:
    def test_requires_owner_header(self, client: TestClient):
        response = client.get("/medications/")
        assert response.status_code == 401
        assert response.json()["detail"] == "Missing X-User-Id header"

    def test_crud_round(self, client: TestClient, user_headers):
        created = client.post("/medications/", json=METFORMIN, headers=user_headers)
        assert created.status_code == 201
        med = created.json()
        assert med["user_id"] == user_headers["X-User-Id"]
        assert med["name"] == "Metformin"

        listed = client.get("/medications/", headers=user_headers)
        assert [m["id"] for m in listed.json()] == [med["id"]]

        updated = client.put(f"/medications/{med['id']}", json={"dosage": "1000 mg"}, headers=user_headers)
        assert updated.status_code == 200
        assert updated.json()["dosage"] == "1000 mg"
        assert updated.json()["frequency"] == "twice daily"

        deleted = client.delete(f"/medications/{med['id']}", headers=user_headers)
        assert deleted.status_code == 204
        assert client.get(f"/medications/{med['id']}", headers=user_headers).status_code == 404

    def test_other_owner_sees_not_found(self, client: TestClient, user_headers):
        med = client.post("/medications/", json=METFORMIN, headers=user_headers).json()
        intruder = {"X-User-Id": "someone-else"}

        assert client.get(f"/medications/{med['id']}", headers=intruder).status_code == 404
        assert client.put(f"/medications/{med['id']}", json={"dosage": "1 mg"}, headers=intruder).status_code == 404
        assert client.delete(f"/medications/{med['id']}", headers=intruder).status_code == 404
        assert med["id"] not in [m["id"] for m in client.get("/medications/", headers=intruder).json()]

    def test_rejects_blank_fields(self, client: TestClient, user_headers):
        response = client.post("/medications/", json={**METFORMIN, "name": ""}, headers=user_headers)
        assert response.status_code == 422

    def test_recognize_rejects_non_images(self, client: TestClient, user_headers):
        response = client.post(
            "/medications/recognize",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=user_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Only image files are allowed!"

    def test_recognize_returns_unsaved_draft(self, client: TestClient, user_headers, ai_mock):
        ai_mock.describe_image_structured.side_effect = None
        ai_mock.describe_image_structured.return_value = RecognitionResult(
            identified=True, name="Aspirin", dosage="81 mg", frequency="Once daily", notes="Take with water"
        )
        response = client.post(
            "/medications/recognize",
            files={"file": ("pill.png", b"\x89PNG fake", "image/png")},
            headers=user_headers,
        )
        assert response.status_code == 200
        assert response.json() == {
            "name": "Aspirin", "dosage": "81 mg", "frequency": "Once daily", "notes": "Take with water"
        }
        assert client.get("/medications/", headers=user_headers).json() == []

    def test_recognize_unidentified_is_bad_request(self, client: TestClient, user_headers, ai_mock):
        ai_mock.describe_image_structured.side_effect = None
        ai_mock.describe_image_structured.return_value = RecognitionResult(identified=False, reason="Too blurry")
        response = client.post(
            "/medications/recognize",
            files={"file": ("pill.jpg", b"fake", "image/jpeg")},
            headers=user_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Too blurry"

    def test_recognize_provider_down(self, client: TestClient, user_headers):
        response = client.post(
            "/medications/recognize",
            files={"file": ("pill.jpg", b"fake", "image/jpeg")},
            headers=user_headers,
        )
        assert response.status_code == 502

    def test_speak_medication(self, client: TestClient, user_headers, ai_mock):
        med = client.post("/medications/", json=METFORMIN, headers=user_headers).json()
        ai_mock.complete.side_effect = None
        ai_mock.complete.return_value = "Take Metformin twice daily with meals."
        ai_mock.synthesize_speech.side_effect = None

        response = client.post(f"/medications/{med['id']}/speak", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["text"] == "Take Metformin twice daily with meals."
        assert response.json()["audio_url"].startswith("/audio/medication-")
        narrated = ai_mock.complete.call_args.args[1]["text"]
        assert narrated.startswith("Here are the details for Metformin")

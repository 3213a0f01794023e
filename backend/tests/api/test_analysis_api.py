"""Tests for materials, gap analysis and quiz endpoints."""
import pytest

pytestmark = pytest.mark.unit


def test_upload_and_list_materials(api_client, seeded):
    response = api_client.post(
        "/api/materials/upload",
        data={"userId": str(seeded["user_id"]), "sessionId": str(seeded["session_id"])},
        files=[
            ("files", ("Lecture.PDF", b"Newton's second law f=ma", "application/pdf")),
            ("files", ("outline.txt", b"plain words", "text/plain")),
        ],
    )

    assert response.status_code == 201
    materials = response.json()
    assert [m["type"] for m in materials] == ["pdf", "text"]
    assert "Newton's Second Law" in materials[0]["extractedConcepts"]

    by_session = api_client.get("/api/materials", params={"sessionId": seeded["session_id"]}).json()
    by_user = api_client.get("/api/materials", params={"userId": seeded["user_id"]}).json()
    assert len(by_session) == len(by_user) == 2
    assert api_client.get("/api/materials").status_code == 400


def test_upload_replaces_invalid_utf8(api_client, seeded):
    response = api_client.post(
        "/api/materials/upload",
        data={"userId": str(seeded["user_id"])},
        files=[("files", ("slides.pptx", b"inertia \xff\xfe deck", "application/octet-stream"))],
    )

    assert response.status_code == 201
    [material] = response.json()
    assert material["type"] == "ppt"
    assert material["sessionId"] is None
    assert material["content"] == "inertia \ufffd\ufffd deck"


def test_upload_without_files_is_400(api_client, seeded):
    response = api_client.post("/api/materials/upload", data={"userId": str(seeded["user_id"])})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid material data"


def test_gap_analysis_and_teach(api_client, seeded):
    sid = seeded["session_id"]
    material = api_client.post(
        "/api/materials",
        json={"userId": seeded["user_id"], "sessionId": sid, "name": "n.txt", "type": "text",
              "content": "Newton's second law f=ma"},
    ).json()
    api_client.post("/api/messages", json={"sessionId": sid, "role": "user", "content": "newton"})

    gaps = api_client.post("/api/gaps", json={"sessionId": sid, "materialIds": [material["id"]]}).json()
    statuses = {g["concept"]: g["status"] for g in gaps}
    assert statuses["Newton's Laws of Motion"] == "partially_covered"

    taught = api_client.post("/api/gaps/teach", json={"sessionId": sid, "concept": "Newton's Second Law"}).json()
    assert taught["gap"]["status"] == "covered"
    assert taught["notice"]["title"] == "Concept Selected"

    listed = api_client.get("/api/gaps", params={"sessionId": sid}).json()
    assert len(listed) == len(gaps)

    missing = api_client.post("/api/gaps/teach", json={"sessionId": sid, "concept": "Dark Matter"})
    assert missing.status_code == 404


def test_quiz_generate_and_answer(api_client, seeded):
    sid = seeded["session_id"]
    api_client.post(
        "/api/messages",
        json={"sessionId": sid, "role": "user", "content": "mitochondria power the cell"},
    )

    response = api_client.post("/api/quizzes", json={"sessionId": sid})
    assert response.status_code == 201
    quiz = response.json()
    assert quiz["title"] == "Quiz on Current Topic"
    question = quiz["questions"][0]
    assert question["options"][question["correctOption"]] == "Mitochondria"

    answer = api_client.post(
        f"/api/quizzes/{quiz['id']}/answer",
        json={"questionIndex": 0, "optionIndex": question["correctOption"]},
    ).json()
    assert answer["correct"] is True
    assert answer["finished"] is True
    assert answer["advanceAfterSeconds"] == 1.0

    assert api_client.get(f"/api/quizzes/{quiz['id']}").json() == quiz
    assert [q["id"] for q in api_client.get("/api/quizzes", params={"sessionId": sid}).json()] == [quiz["id"]]


def test_quiz_answer_out_of_range(api_client, seeded):
    quiz = api_client.post("/api/quizzes", json={"sessionId": seeded["session_id"]}).json()

    bad_option = api_client.post(f"/api/quizzes/{quiz['id']}/answer", json={"questionIndex": 0, "optionIndex": 4})
    bad_question = api_client.post(f"/api/quizzes/{quiz['id']}/answer", json={"questionIndex": 3, "optionIndex": 0})

    assert bad_option.status_code == 400
    assert bad_option.json()["message"] == "Invalid answer data"
    assert bad_question.status_code == 400
    assert "debug_id" in bad_question.json()

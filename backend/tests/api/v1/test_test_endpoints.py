"""
Tests for the /v1/test endpoints: start, submit, progress and statistics.
"""
import pytest


def start(client, headers, count=None):
    url = "/v1/test/start" if count is None else f"/v1/test/start?count={count}"
    response = client.post(url, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def right_answers(service, questions):
    return [service.bank.get(q["id"]).correct_index for q in questions]


class TestStartTest:
    """Tests for POST /v1/test/start."""

    def test_default_test(self, client, user_headers):
        data = start(client, user_headers)
        assert data["mode"] == "test"
        assert data["total_questions"] == 15
        assert [q["position"] for q in data["questions"]] == list(range(1, 16))
        assert data["session_id"]

    def test_answer_key_not_exposed(self, client, user_headers):
        question = start(client, user_headers, count=3)["questions"][0]
        assert set(question) == {"id", "position", "category", "question_text", "options"}

    def test_no_repeats_across_tests(self, client, user_headers):
        first = {q["id"] for q in start(client, user_headers, count=20)["questions"]}
        second = {q["id"] for q in start(client, user_headers, count=20)["questions"]}
        assert not first & second

    def test_count_larger_than_bank(self, client, user_headers):
        response = client.post("/v1/test/start?count=50", headers=user_headers)
        assert response.status_code == 400
        assert "Only 40 questions are available" in response.json()["detail"]

    @pytest.mark.parametrize("count", [0, -1, 101, "ten"])
    def test_invalid_count(self, client, user_headers, count):
        response = client.post(f"/v1/test/start?count={count}", headers=user_headers)
        assert response.status_code == 422
        assert isinstance(response.json()["detail"], list)

    def test_anonymous_user(self, client, service):
        start(client, {}, count=5)
        assert service.exposure.count("anonymous") == 5


class TestSubmitTest:
    """Tests for POST /v1/test/submit."""

    def test_perfect_submission(self, client, service, user_headers):
        data = start(client, user_headers, count=20)
        response = client.post(
            "/v1/test/submit",
            json={"session_id": data["session_id"], "answers": right_answers(service, data["questions"])},
            headers=user_headers,
        )
        assert response.status_code == 200
        result = response.json()["result"]
        assert result["score"] == 20
        assert result["ability_estimate"] == 145
        assert result["percentile"] == 99.9
        assert result["performance_level"] == "Exceptional"
        assert result["result_id"].startswith("test_")
        assert len(result["outcomes"]) == 20
        assert response.json()["history_entry"]["type"] == "Full IQ Test"

    def test_blank_submission(self, client, user_headers):
        data = start(client, user_headers, count=10)
        response = client.post(
            "/v1/test/submit",
            json={"session_id": data["session_id"], "answers": [None] * 10},
            headers=user_headers,
        )
        result = response.json()["result"]
        assert result["correct_answers"] == 0
        assert result["ability_estimate"] == 70
        assert result["outcomes"][0]["submitted_index"] is None

    def test_outcomes_reveal_answers_after_submit(self, client, service, user_headers):
        data = start(client, user_headers, count=2)
        response = client.post(
            "/v1/test/submit", json={"session_id": data["session_id"]}, headers=user_headers
        )
        outcome = response.json()["result"]["outcomes"][0]
        question = service.bank.get(data["questions"][0]["id"])
        assert outcome["correct_index"] == question.correct_index
        assert outcome["correct_answer_text"] == question.answer_text

    def test_second_submit_is_not_found(self, client, user_headers):
        data = start(client, user_headers, count=3)
        body = {"session_id": data["session_id"], "answers": []}
        assert client.post("/v1/test/submit", json=body, headers=user_headers).status_code == 200
        response = client.post("/v1/test/submit", json=body, headers=user_headers)
        assert response.status_code == 404

    def test_other_users_session_forbidden(self, client, user_headers):
        data = start(client, user_headers, count=3)
        response = client.post(
            "/v1/test/submit",
            json={"session_id": data["session_id"], "answers": []},
            headers={"X-User-ID": "someone-else"},
        )
        assert response.status_code == 403

    def test_too_many_answers(self, client, user_headers):
        data = start(client, user_headers, count=2)
        response = client.post(
            "/v1/test/submit",
            json={"session_id": data["session_id"], "answers": [0, 1, 2]},
            headers=user_headers,
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("answers", [["a"], [True], [1.5]])
    def test_non_integer_answers_rejected(self, client, user_headers, answers):
        data = start(client, user_headers, count=2)
        response = client.post(
            "/v1/test/submit",
            json={"session_id": data["session_id"], "answers": answers},
            headers=user_headers,
        )
        assert response.status_code == 422

    def test_out_of_range_answer_is_wrong(self, client, user_headers):
        data = start(client, user_headers, count=1)
        response = client.post(
            "/v1/test/submit",
            json={"session_id": data["session_id"], "answers": [7]},
            headers=user_headers,
        )
        outcome = response.json()["result"]["outcomes"][0]
        assert outcome["is_correct"] is False
        assert outcome["user_answer_text"] == ""


class TestProgressAndStatistics:
    def test_progress(self, client, user_headers):
        start(client, user_headers)
        data = client.get("/v1/test/progress", headers=user_headers).json()
        assert data == {
            "test_count": 1,
            "questions_seen": 15,
            "total_possible_tests": 2,
            "remaining_tests": 1,
            "progress_percentage": 38,
            "can_take_more_tests": True,
        }

    def test_statistics(self, client):
        data = client.get("/v1/test/statistics").json()
        assert data["total_questions"] == 40
        assert data["categories"] == 4
        assert data["questions_per_category"]["alpha"] == 10
        assert data["is_fallback"] is False

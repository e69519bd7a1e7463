"""HTTP-level tests for every insight endpoint, backed by fake gateways."""

from __future__ import annotations

import json

from app.config.settings import settings
from app.services.errors import GatewayError, GatewayErrorKind

from conftest import VALID_REPORT


def test_admin_sentiment_bands_score(client, harness):
    harness.model.replies = ["0.85"]

    response = client.post("/adminSentiment", json={"message": "Thank you for waiting."})

    assert response.status_code == 200
    assert response.json() == {"admin_sentiment": "Professional", "admin_sentiment_score": 0.85}


def test_customer_sentiment_issues_two_model_calls(client, harness):
    harness.model.replies = ["Frustrated", "0.2"]

    response = client.post("/customerSentiment", json={"message": "Still no signal!"})

    assert response.status_code == 200
    assert response.json() == {
        "customer_sentiment": "Frustrated",
        "customer_sentiment_score": 0.2,
    }
    assert len(harness.model.calls) == 2
    assert all(call["user"] == "Still no signal!" for call in harness.model.calls)


def test_check_topics_returns_model_text(client, harness):
    harness.model.replies = ["1,3"]

    response = client.post(
        "/checkTopics",
        json={"message": "My bill is wrong and roaming fails", "topics": ["Billing", "Fibre", "Roaming"]},
    )

    assert response.status_code == 200
    assert response.json() == {"aiResponse": "1,3"}
    assert "1. Billing\n2. Fibre\n3. Roaming" in harness.model.calls[0]["system"]


def test_query_with_no_matches_still_answers(client, harness):
    harness.model.replies = ["Dial *100# to check your balance."]

    response = client.post("/queryGPT", json={"queryText": "How do I check my balance?"})

    assert response.status_code == 200
    assert response.json() == {"aiResponse": "Dial *100# to check your balance."}
    assert harness.retriever.queries == ["How do I check my balance?"]
    assert harness.model.calls[0]["context"] == ""


def test_analyse_data_persists_report_in_background(client, harness):
    harness.model.replies = [json.dumps(VALID_REPORT)]

    response = client.post(
        "/analyseData",
        json={"chatData": [{"sender": "agent", "text": "Hello"}, {"sender": "customer", "text": "Hi"}]},
    )

    assert response.status_code == 200
    assert response.content == b""
    assert json.loads(harness.store.payload) == VALID_REPORT

    stored = client.get("/data")
    assert stored.status_code == 200
    assert stored.headers["content-type"].startswith("application/json")
    assert stored.text == harness.store.payload


def test_analyse_data_succeeds_when_report_store_fails(client, harness):
    harness.model.replies = [json.dumps(VALID_REPORT)]
    harness.store.fail = True

    response = client.post("/analyseData", json={"chatData": "agent: hi\ncustomer: hello"})

    assert response.status_code == 200
    assert harness.store.writes == 1
    assert harness.store.payload is None


def test_analyse_data_rejects_fenced_json(client, harness):
    harness.model.replies = ["```json\n" + json.dumps(VALID_REPORT) + "\n```"]

    response = client.post("/analyseData", json={"chatData": "agent: hi"})

    assert response.status_code == 500
    assert "error" in response.json()
    assert harness.store.writes == 0


def test_data_without_report_is_not_found(client):
    response = client.get("/data")

    assert response.status_code == 404
    assert response.json() == {"error": "No analysis report available"}


def test_categorize_issue(client, harness):
    harness.model.replies = ["Category: Billing\nSubcategory: I don't agree with my bill (suspected scam)"]

    response = client.post("/categorizeIssue", json={"text": "There is a charge I never made"})

    assert response.status_code == 200
    assert response.json() == {
        "category": "Billing",
        "subcategory": "I don't agree with my bill (suspected scam)",
    }


def test_categorize_issue_single_line_reply_fails(client, harness):
    harness.model.replies = ["Billing"]

    response = client.post("/categorizeIssue", json={"text": "Wrong bill"})

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred while processing your request."}


def test_transcribe_and_classify(client, harness):
    harness.model.replies = ["Category: Billing\nSubcategory: Others"]

    response = client.post(
        "/transcribeAndClassify",
        files={"audioFile": ("issue.mp3", b"ID3fake-audio", "audio/mpeg")},
    )

    assert response.status_code == 200
    assert response.json() == {
        "transcript": "My bill has a scam charge",
        "classification": {"category": "Billing", "subcategory": "Others"},
    }
    assert harness.transcriber.calls == [(b"ID3fake-audio", "audio/mpeg")]
    assert harness.model.calls[0]["user"] == "My bill has a scam charge"


def test_transcribe_without_file_is_bad_request(client, harness):
    response = client.post("/transcribeAndClassify")

    assert response.status_code == 400
    assert response.json() == {"error": "No audio file uploaded"}
    assert harness.transcriber.calls == []
    assert harness.model.calls == []


def test_transcription_failure_hides_details(client, harness):
    harness.transcriber.transcript = GatewayError(
        GatewayErrorKind.UNAVAILABLE,
        "arn:aws:transcribe secret endpoint exploded",
        gateway="transcribe",
    )

    response = client.post(
        "/transcribeAndClassify",
        files={"audioFile": ("issue.wav", b"RIFFfake", "audio/wav")},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred while processing the voice issue"}
    assert "arn" not in response.text
    assert harness.model.calls == []


def test_model_timeout_returns_generic_error(client, harness):
    harness.model.replies = [GatewayError(GatewayErrorKind.TIMEOUT, "read timed out", gateway="bedrock")]

    response = client.post("/adminSentiment", json={"message": "Hello"})

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred while processing your request."}


def test_malformed_body_returns_error_envelope(client, harness):
    response = client.post("/adminSentiment", json={"wrong": "field"})

    assert response.status_code == 500
    assert set(response.json()) == {"error"}
    assert harness.model.calls == []


def test_blank_message_never_reaches_model(client, harness):
    response = client.post("/customerSentiment", json={"message": "   "})

    assert response.status_code == 500
    assert harness.model.calls == []


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_oversize_upload_never_reaches_transcriber(client, harness, monkeypatch):
    monkeypatch.setattr(settings, "max_audio_bytes", harness.max_audio_bytes)

    response = client.post(
        "/transcribeAndClassify",
        files={"audioFile": ("long.mp3", b"\x00" * (harness.max_audio_bytes * 4), "audio/mpeg")},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred while processing the voice issue"}
    assert harness.transcriber.calls == []
    assert harness.model.calls == []


def test_error_envelope_documented_in_openapi(client):
    schema = client.get("/openapi.json").json()
    paths = schema["paths"]
    error_ref = "#/components/schemas/ErrorResponse"

    def ref(path, method, status_code):
        content = paths[path][method]["responses"][status_code]["content"]
        return content["application/json"]["schema"]["$ref"]

    assert ref("/adminSentiment", "post", "500") == error_ref
    assert ref("/transcribeAndClassify", "post", "400") == error_ref
    assert ref("/data", "get", "404") == error_ref
    assert schema["components"]["schemas"]["ErrorResponse"]["required"] == ["error"]

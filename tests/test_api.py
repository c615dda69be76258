from types import SimpleNamespace

from fastapi.testclient import TestClient

from parka.main import create_app
from parka.services.language_model import LanguageModelClient
from parka.services.wearable_source import AuthorizationStatus, InMemoryWearableSource
from parka.utils import pdf_generator

API = "/api/v1"


def test_root(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json() == {"message": "Welcome to the Parka Health API"}


def test_medication_flow(client):
    res = client.post(f"{API}/medications", json={"name": "Levodopa", "scheduled_time": "08:00:00"})
    assert res.status_code == 201
    medication = res.json()
    assert medication["name"] == "Levodopa"
    assert medication["is_active"] is True

    entries = client.get(f"{API}/medications/entries/today").json()
    assert len(entries) == 1
    assert entries[0]["status"] == "pending"
    assert entries[0]["is_overdue"] is True

    toggled = client.post(f"{API}/medications/entries/{entries[0]['id']}/toggle").json()
    assert toggled[0]["status"] == "taken"
    assert toggled[0]["is_overdue"] is False

    adherence = client.get(f"{API}/medications/adherence").json()
    assert adherence == {"total": 1, "taken": 1, "missed": 0, "pending": 0, "adherence_rate": 1.0}

    assert len(client.post(f"{API}/medications/entries/generate").json()) == 1

    res = client.delete(f"{API}/medications/{medication['id']}")
    assert res.status_code == 204
    assert client.get(f"{API}/medications").json() == []
    assert client.get(f"{API}/medications/entries/today").json() == []


def test_deleting_unknown_medication_is_no_content(client):
    res = client.delete(f"{API}/medications/7f1c8a52-4f0e-4c1e-9d8e-0b7f2f3c1a11")
    assert res.status_code == 204


def test_blank_medication_name_is_bad_request(client):
    res = client.post(f"{API}/medications", json={"name": "  ", "scheduled_time": "08:00:00"})
    assert res.status_code == 400
    assert res.json() == {"message": "Medication name must not be empty."}


def test_mood_logs(client):
    res = client.post(f"{API}/mood-logs", json={"category": "Good", "note": "slept well"})
    assert res.status_code == 201
    assert res.json()["mood"] == "Good: slept well"

    res = client.post(f"{API}/mood-logs", json={"mood": "Tired after lunch"})
    assert res.status_code == 201
    log_id = res.json()["id"]

    assert len(client.get(f"{API}/mood-logs").json()) == 2
    assert client.get(f"{API}/mood-logs/streak").json() == {"streak_count": 1}

    assert client.delete(f"{API}/mood-logs/{log_id}").status_code == 204
    assert [log["mood"] for log in client.get(f"{API}/mood-logs").json()] == ["Good: slept well"]


def test_mood_log_needs_category_or_text(client):
    assert client.post(f"{API}/mood-logs", json={"note": "no category"}).status_code == 422


def test_health_ingest_refresh_and_series(client):
    samples = [
        {"kind": "quantity", "metric": "heart_rate", "timestamp": "2024-03-09T08:00:00+00:00", "value": 60,
         "unit": "count/min"},
        {"kind": "quantity", "metric": "heart_rate", "timestamp": "2024-03-09T20:00:00+00:00", "value": 80,
         "unit": "count/min"},
        {"kind": "sleep", "start": "2024-03-09T23:00:00+00:00", "end": "2024-03-10T01:00:00+00:00",
         "stage": "asleep_core"},
    ]
    res = client.post(f"{API}/health/samples", json={"samples": samples})
    assert res.status_code == 201
    assert res.json() == {"received": 3}

    assert client.post(f"{API}/health/authorize").json() == {"status": "granted"}

    refresh = client.post(f"{API}/health/refresh").json()
    assert refresh["applied"] is True
    assert refresh["errors"] == {}
    assert refresh["has_tracking_streak"] is False

    heart_rate = client.get(f"{API}/health/metrics/heart_rate").json()
    assert heart_rate["name"] == "Heart Rate"
    assert heart_rate["summary"]["average"] == 70.0
    assert len(heart_rate["points"]) == 1

    sleep = client.get(f"{API}/health/metrics/sleep_duration").json()
    assert sleep["points"][0]["value"] == 2.0

    assert len(client.get(f"{API}/health/metrics").json()) == 8


def test_samples_without_zone_are_read_in_local_time(client):
    samples = [
        {"kind": "quantity", "metric": "heart_rate", "timestamp": "2024-03-09T08:00:00", "value": 60,
         "unit": "count/min"},
        {"kind": "quantity", "metric": "heart_rate", "timestamp": "2024-03-09T20:00:00+00:00", "value": 80,
         "unit": "count/min"},
        {"kind": "sleep", "start": "2024-03-09T23:00:00", "end": "2024-03-10T01:00:00", "stage": "asleep_core"},
    ]
    assert client.post(f"{API}/health/samples", json={"samples": samples}).status_code == 201

    res = client.post(f"{API}/health/refresh")
    assert res.status_code == 200
    assert res.json()["errors"] == {}

    heart_rate = client.get(f"{API}/health/metrics/heart_rate").json()
    assert heart_rate["summary"]["average"] == 70.0
    assert client.get(f"{API}/health/metrics/sleep_duration").json()["points"][0]["value"] == 2.0


def test_refresh_window_with_one_zoned_end(client):
    samples = [{"kind": "quantity", "metric": "heart_rate", "timestamp": "2024-03-05T10:00:00Z", "value": 64,
                "unit": "count/min"}]
    client.post(f"{API}/health/samples", json={"samples": samples})

    res = client.post(f"{API}/health/refresh", json={"start": "2024-03-01T00:00:00", "end": "2024-03-10T09:00:00Z"})
    assert res.status_code == 200
    assert res.json()["applied"] is True
    assert client.get(f"{API}/health/metrics/heart_rate").json()["summary"]["average"] == 64.0


def test_refresh_window_backwards_is_bad_request(client):
    res = client.post(f"{API}/health/refresh", json={"start": "2024-03-10T00:00:00", "end": "2024-03-01T00:00:00Z"})
    assert res.status_code == 400
    assert res.json() == {"message": "'start' must not be after 'end'."}


def test_unknown_metric_is_unprocessable(client):
    assert client.get(f"{API}/health/metrics/blood_pressure").status_code == 422


def test_denied_refresh_is_forbidden(test_settings, clock):
    app = create_app(test_settings, wearable_source=InMemoryWearableSource(AuthorizationStatus.DENIED), clock=clock)
    res = TestClient(app).post(f"{API}/health/refresh", json={})
    assert res.status_code == 403
    assert "message" in res.json()


def test_chat_without_api_key_is_unavailable(client):
    res = client.post(f"{API}/coach/chat", json={"message": "hello"})
    assert res.status_code == 503


def test_chat_and_history(test_settings, clock, fake_groq):
    llm = LanguageModelClient(test_settings, client=fake_groq(reply="Hi! How can I help you today?"))
    client = TestClient(create_app(test_settings, llm_client=llm, clock=clock))

    res = client.post(f"{API}/coach/chat", json={"message": "hello"})
    assert res.status_code == 200
    assert res.json()["intent"] == "greeting"
    assert res.json()["content"] == "Hi! How can I help you today?"

    history = client.get(f"{API}/coach/history").json()
    assert [m["role"] for m in history] == ["user", "assistant"]

    assert client.delete(f"{API}/coach/history").status_code == 204
    assert client.get(f"{API}/coach/history").json() == []


def test_upstream_failure_maps_to_bad_gateway(test_settings, clock, fake_groq):
    llm = LanguageModelClient(test_settings, client=fake_groq(reply=None))
    client = TestClient(create_app(test_settings, llm_client=llm, clock=clock))

    res = client.post(f"{API}/coach/chat", json={"message": "How is my sleep?"})
    assert res.status_code == 502
    assert res.json() == {"message": "No content in response"}


def test_reports(client):
    pdf = client.post(f"{API}/coach/report", json={"content": "Stable week.", "include_charts": False})
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")

    markdown = client.post(f"{API}/coach/report/markdown").json()["report_markdown"]
    assert "Parkinson's Clinical Observation Report" in markdown


def test_pdf_failure_returns_message_body(client, monkeypatch):
    monkeypatch.setattr(pdf_generator.pisa, "CreatePDF", lambda *args, **kwargs: SimpleNamespace(err=1))
    res = client.post(f"{API}/coach/report", json={"content": "Stable week.", "include_charts": False})
    assert res.status_code == 500
    assert res.json() == {"message": "PDF creation error: 1"}

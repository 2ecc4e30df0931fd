import pytest
from fastapi.testclient import TestClient

from riskline.core.config import get_settings, load_app_config
from riskline.core.errors import AssessmentError
from riskline.core.status import RunStatusStore
from riskline.main import create_app
from riskline.models.alerts import AlertsPayload, AssessmentRunResult


def _make_client(tmp_path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "assessment.yaml"))
    monkeypatch.setenv("SCHEDULER_ENABLED", "false")
    get_settings.cache_clear()
    load_app_config.cache_clear()
    RunStatusStore().reset()
    return TestClient(create_app())


def test_health_check(tmp_path, monkeypatch):
    client = _make_client(tmp_path, monkeypatch)
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "정상"
    assert body["version"] == get_settings().version


def test_run_assessment_endpoint_reports_result(tmp_path, monkeypatch):
    client = _make_client(tmp_path, monkeypatch)
    result = AssessmentRunResult(
        run_id="abc123",
        alerts=AlertsPayload(high_risk_patients=["DEMO001"]),
        patient_count=47,
        submission={"success": True},
    )
    monkeypatch.setattr("riskline.api.assessment.run_assessment", lambda: result)

    response = client.post("/assessments/run")
    assert response.status_code == 200
    body = response.json()
    assert body["patientCount"] == 47
    assert body["submission"] == {"success": True}
    assert body["run_id"] == "abc123"


def test_run_assessment_endpoint_reports_failure(tmp_path, monkeypatch):
    client = _make_client(tmp_path, monkeypatch)

    def _fail():
        raise AssessmentError("PIPE_FETCH_001", "fetch", "Server error '503 Service Unavailable'")

    monkeypatch.setattr("riskline.api.assessment.run_assessment", _fail)

    response = client.post("/assessments/run")
    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "PIPE_FETCH_001"
    assert "503" in body["detail"]


def test_status_without_runs(tmp_path, monkeypatch):
    client = _make_client(tmp_path, monkeypatch)
    response = client.get("/assessments/status")
    assert response.json() == {"last_status": "실행 이력 없음"}


def test_preview_scores_records_without_remote_calls(tmp_path, monkeypatch):
    client = _make_client(tmp_path, monkeypatch)
    records = [
        {"patient_id": "DEMO001", "blood_pressure": "145/95", "temperature": 103.5, "age": 70},
        {"patient_id": 0, "blood_pressure": "120/", "temperature": 98.6, "age": 30},
        {"patient_id": "", "blood_pressure": "160/100", "temperature": 104, "age": 80},
    ]
    response = client.post("/v1/alerts/preview", json=records)
    assert response.status_code == 200
    body = response.json()
    assert body["alerts"] == {
        "high_risk_patients": ["DEMO001"],
        "fever_patients": ["DEMO001"],
        "data_quality_issues": ["0"],
    }
    assert [profile["patient_id"] for profile in body["profiles"]] == ["DEMO001", "0"]
    assert body["profiles"][0]["total_score"] == 7


def test_preview_accepts_single_record(tmp_path, monkeypatch):
    client = _make_client(tmp_path, monkeypatch)
    response = client.post(
        "/v1/alerts/preview",
        json={"patient_id": "DEMO009", "blood_pressure": "135/85", "temperature": "99.6", "age": "45"},
    )
    body = response.json()
    assert body["alerts"]["fever_patients"] == ["DEMO009"]
    assert body["profiles"][0]["total_score"] == 4

import pytest

pytest.importorskip("fastapi")

from fastapi.testclient import TestClient

from conftest import make_aggregate_data
from streamqc.api.main import create_app


@pytest.fixture
def client():
    return TestClient(create_app())


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_modules_listed_in_report_order(client):
    response = client.get("/api/modules")
    assert response.status_code == 200

    modules = response.json()
    assert modules[0]["key"] == "basic_statistics"
    assert modules[-1]["key"] == "kmer_content"
    assert modules[-1]["family"] == "kmer"


def test_generate_report(client):
    response = client.post("/api/reports", json={"aggregate": make_aggregate_data()})
    assert response.status_code == 200

    report = response.json()
    assert report["filename"] == "sample.fastq"
    grades = {result["key"]: result["grade"] for result in report["results"]}
    assert grades["basic_statistics"] == "pass"
    assert grades["gc_content"] == "pass"
    assert "kmer_content" not in grades


def test_generate_report_text(client):
    response = client.post("/api/reports/text", json={"aggregate": make_aggregate_data()})
    assert response.status_code == 200
    assert response.text.startswith("##StreamQC\t")
    assert ">>Basic Statistics\tpass" in response.text


def test_invalid_aggregate_is_rejected(client):
    data = make_aggregate_data()
    data["gc_count"] = [1.0] * 10
    response = client.post("/api/reports", json={"aggregate": data})
    assert response.status_code == 422


def test_unsupported_schema_version_is_rejected(client):
    data = make_aggregate_data(schema_version=2)
    response = client.post("/api/reports", json={"aggregate": data})
    assert response.status_code == 422
    assert "schema version" in response.text

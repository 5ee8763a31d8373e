"""Health endpoint tests."""

from civicdesk.core.config import settings


def test_health_reports_database(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": settings.app_name, "database": "ok"}

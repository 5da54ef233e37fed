import pytest
from rest_framework.test import APIClient


@pytest.mark.django_db
def test_inventory_health():
    client = APIClient()
    resp_health = client.get("/api/v1/inventario/health/")
    assert resp_health.status_code == 200
    assert resp_health.json()["app"] == "inventario"


@pytest.mark.django_db
def test_project_health_is_public():
    resp = APIClient().get("/health/")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# EOF

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock

from training_erp.api.deps import (
    get_session_mutation_service,
    get_session_query_service,
    get_session_reconciler,
)
from training_erp.api.main import create_app
from training_erp.application.session_presenter import ExpandOptions
from training_erp.core.exceptions import (
    DealNotFoundError,
    ResourceConflictError,
    SessionNotFoundError,
    ValidationError,
)

BASE = "/api/v1/deal-sessions"


def session_payload(**overrides):
    payload = {
        "session_id": "s-1",
        "deal_id": "deal-1",
        "deal_product_id": "prod-form",
        "deal_product": None,
        "inicio": "2025-03-10T10:00:00.000+01:00",
        "fin": "2025-03-10T12:00:00.000+01:00",
        "sala_id": "sala-1",
        "sala": None,
        "formadores": [],
        "unidades_moviles": [],
        "direccion": "Calle Mayor 1",
        "sede": "Madrid",
        "comentarios": None,
        "estado": "Planificada",
        "origen": {"deal_product_id": "prod-form", "code": "form-basico"},
        "created_at": "2025-03-01T09:00:00.000+01:00",
        "updated_at": "2025-03-01T09:00:00.000+01:00",
        "is_empty": False,
        "is_exceeding_quantity": False,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def mock_query_service():
    return AsyncMock()


@pytest.fixture
def mock_mutation_service():
    return AsyncMock()


@pytest.fixture
def mock_reconciler():
    return AsyncMock()


@pytest.fixture(autouse=True)
def override_services(app, mock_query_service, mock_mutation_service, mock_reconciler):
    app.dependency_overrides[get_session_query_service] = lambda: mock_query_service
    app.dependency_overrides[get_session_mutation_service] = lambda: mock_mutation_service
    app.dependency_overrides[get_session_reconciler] = lambda: mock_reconciler
    yield
    app.dependency_overrides.clear()


def test_list_sessions(client, mock_query_service):
    mock_query_service.list_sessions.return_value = [session_payload()]

    response = client.get(BASE, params={"dealId": "deal-1", "expand": "sala", "estado": "Planificada"})

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["sessions"][0]["session_id"] == "s-1"
    mock_query_service.list_sessions.assert_awaited_once_with(
        "deal-1", status="Planificada", expand=ExpandOptions(sala=True)
    )


def test_list_sessions_accepts_snake_case_deal_id(client, mock_query_service):
    mock_query_service.list_sessions.return_value = []

    response = client.get(BASE, params={"deal_id": "deal-1", "status": "Borrador"})

    assert response.status_code == 200
    assert response.json() == {"ok": True, "sessions": []}
    mock_query_service.list_sessions.assert_awaited_once_with(
        "deal-1", status="Borrador", expand=ExpandOptions()
    )


def test_list_sessions_without_deal_id_returns_400(client, mock_query_service):
    response = client.get(BASE)

    assert response.status_code == 400
    assert response.json() == {
        "ok": False,
        "error_code": "VALIDATION_ERROR",
        "message": "Falta dealId",
    }
    mock_query_service.list_sessions.assert_not_called()


def test_get_session(client, mock_query_service):
    mock_query_service.get_session.return_value = session_payload()

    response = client.get(f"{BASE}/s-1", params={"expand": "resources"})

    assert response.status_code == 200
    assert response.json()["session"]["estado"] == "Planificada"
    mock_query_service.get_session.assert_awaited_once_with(
        "s-1", ExpandOptions(True, True, True, True)
    )


def test_get_missing_session_returns_404(client, mock_query_service):
    mock_query_service.get_session.side_effect = SessionNotFoundError("s-404")

    response = client.get(f"{BASE}/s-404")

    assert response.status_code == 404
    assert response.json() == {
        "ok": False,
        "error_code": "NOT_FOUND",
        "message": "Sesión no encontrada",
    }


def test_post_without_session_fields_syncs(client, mock_reconciler, mock_mutation_service):
    mock_reconciler.sync.return_value = {"created": 3, "deleted": 0, "flagged": [], "total": 3}

    response = client.post(BASE, json={"dealId": "deal-1"})

    assert response.status_code == 200
    assert response.json() == {"ok": True, "created": 3, "deleted": 0, "flagged": [], "total": 3}
    mock_reconciler.sync.assert_awaited_once_with("deal-1")
    mock_mutation_service.create_session.assert_not_called()


def test_post_with_session_fields_creates(client, mock_reconciler, mock_mutation_service):
    mock_mutation_service.create_session.return_value = session_payload(estado="Borrador")

    response = client.post(
        f"{BASE}?expand=sala",
        json={"deal_id": "deal-1", "comentarios": "Grupo de mañana", "formadores": ["trainer-1"]},
    )

    assert response.status_code == 200
    assert response.json()["session"]["estado"] == "Borrador"
    mock_reconciler.sync.assert_not_called()
    deal_id, fields, expand = mock_mutation_service.create_session.await_args.args
    assert deal_id == "deal-1"
    assert fields == {"comentarios": "Grupo de mañana", "formadores": ["trainer-1"]}
    assert expand == ExpandOptions(sala=True)


def test_post_body_expand_takes_precedence(client, mock_mutation_service):
    mock_mutation_service.create_session.return_value = session_payload()

    client.post(
        f"{BASE}?expand=sala",
        json={"dealId": "deal-1", "sede": "Madrid", "expand": ["formadores"]},
    )

    _, _, expand = mock_mutation_service.create_session.await_args.args
    assert expand == ExpandOptions(formadores=True)


def test_post_invalid_date_returns_400(client, mock_mutation_service):
    response = client.post(BASE, json={"dealId": "deal-1", "inicio": "mañana"})

    assert response.status_code == 400
    assert response.json()["message"] == "El campo inicio debe ser una fecha válida ISO-8601"
    mock_mutation_service.create_session.assert_not_called()


@pytest.mark.parametrize("raw", [0, 1741600800, "1741600800", "20250310"])
def test_post_epoch_date_returns_400(client, mock_mutation_service, raw):
    response = client.post(BASE, json={"dealId": "deal-1", "inicio": raw})

    assert response.status_code == 400
    assert response.json() == {
        "ok": False,
        "error_code": "VALIDATION_ERROR",
        "message": "El campo inicio debe ser una fecha válida ISO-8601",
    }
    mock_mutation_service.create_session.assert_not_called()


def test_patch_epoch_end_returns_400(client, mock_mutation_service):
    response = client.patch(f"{BASE}/s-1", json={"fin": 1741608000})

    assert response.status_code == 400
    assert response.json()["message"] == "El campo fin debe ser una fecha válida ISO-8601"
    mock_mutation_service.update_session.assert_not_called()


def test_post_iso_dates_reach_service(client, mock_mutation_service):
    mock_mutation_service.create_session.return_value = session_payload()

    client.post(
        BASE,
        json={"dealId": "deal-1", "inicio": "2025-03-10T09:00:00Z", "fin": " "},
    )

    _, fields, _ = mock_mutation_service.create_session.await_args.args
    assert fields["inicio"] == datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)
    assert fields["fin"] is None


def test_post_numeric_resource_ids_are_stringified(client, mock_mutation_service):
    mock_mutation_service.create_session.return_value = session_payload()

    response = client.post(
        BASE,
        json={"dealId": "deal-1", "sala_id": 7, "formadores": [3, "trainer-1"], "unidades_moviles": [12]},
    )

    assert response.status_code == 200
    _, fields, _ = mock_mutation_service.create_session.await_args.args
    assert fields["sala_id"] == "7"
    assert fields["formadores"] == ["3", "trainer-1"]
    assert fields["unidades_moviles"] == ["12"]


def test_post_invalid_trainer_list_returns_400(client):
    response = client.post(BASE, json={"dealId": "deal-1", "formadores": "trainer-1"})

    assert response.status_code == 400
    assert response.json()["message"] == "El campo formadores debe ser una lista de identificadores"


def test_post_malformed_json_returns_400(client):
    response = client.post(
        BASE, content="{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Body inválido"


def test_post_conflict_returns_409_with_conflicts(client, mock_mutation_service):
    conflicts = [
        {
            "resource_type": "sala",
            "resource_id": "sala-1",
            "resource_label": "Aula 1",
            "conflicts": [{"session_id": "s-x", "deal_id": "deal-9"}],
        }
    ]
    mock_mutation_service.create_session.side_effect = ResourceConflictError(
        "La sala seleccionada (Aula 1) ya está asignado a Otro.", conflicts
    )

    response = client.post(BASE, json={"dealId": "deal-1", "sala_id": "sala-1"})

    assert response.status_code == 409
    data = response.json()
    assert data["ok"] is False
    assert data["error_code"] == "RESOURCE_CONFLICT"
    assert data["conflicts"] == conflicts


def test_post_unknown_deal_returns_404(client, mock_reconciler):
    mock_reconciler.sync.side_effect = DealNotFoundError("deal-404")

    response = client.post(BASE, json={"dealId": "deal-404"})

    assert response.status_code == 404
    assert response.json()["message"] == "Deal no encontrado"


def test_sync_endpoint(client, mock_reconciler):
    mock_reconciler.sync.return_value = {"created": 0, "deleted": 1, "flagged": ["s-5"], "total": 4}

    response = client.post(f"{BASE}/sync", json={"deal_id": "deal-1"})

    assert response.status_code == 200
    assert response.json()["flagged"] == ["s-5"]


def test_sync_without_deal_id_returns_400(client, mock_reconciler):
    response = client.post(f"{BASE}/sync", json={})

    assert response.status_code == 400
    assert response.json()["message"] == "Falta dealId"
    mock_reconciler.sync.assert_not_called()


def test_patch_passes_only_supplied_fields(client, mock_mutation_service):
    mock_mutation_service.update_session.return_value = session_payload(comentarios=None)

    response = client.patch(f"{BASE}/s-1", json={"comentarios": None, "unidades_moviles": []})

    assert response.status_code == 200
    session_id, fields, _ = mock_mutation_service.update_session.await_args.args
    assert session_id == "s-1"
    assert fields == {"comentarios": None, "unidades_moviles": []}


def test_patch_validation_error_returns_400(client, mock_mutation_service):
    mock_mutation_service.update_session.side_effect = ValidationError(
        "La fecha de fin debe ser posterior a la fecha de inicio", field="fin"
    )

    response = client.patch(f"{BASE}/s-1", json={"fin": "2025-03-10T09:00:00+01:00"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_delete_session(client, mock_mutation_service):
    mock_mutation_service.delete_session.return_value = None

    response = client.delete(f"{BASE}/s-1")

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    mock_mutation_service.delete_session.assert_awaited_once_with("s-1")


def test_unexpected_error_returns_500_without_details(client, mock_mutation_service):
    mock_mutation_service.delete_session.side_effect = RuntimeError("connection reset")

    response = client.delete(f"{BASE}/s-1")

    assert response.status_code == 500
    assert response.json() == {
        "ok": False,
        "error_code": "INTERNAL_ERROR",
        "message": "Error inesperado en deal-sessions",
    }


def test_unknown_route_returns_not_found_envelope(client):
    response = client.get("/api/v1/unknown")

    assert response.status_code == 404
    assert response.json()["message"] == "Ruta no encontrada"


def test_correlation_id_is_echoed(client, mock_query_service):
    mock_query_service.list_sessions.return_value = []

    response = client.get(BASE, params={"dealId": "deal-1"}, headers={"X-Correlation-ID": "req-123"})

    assert response.headers["X-Correlation-ID"] == "req-123"

from datetime import date

from fastapi.testclient import TestClient

from app.main import app


client = TestClient(app)


def test_find_booking_eligible_for_reschedule(session_factory, add_booking):
    add_booking("70912345678", date(2025, 11, 11))

    response = client.get("/api/agendamentos/70912345678")

    body = response.json()
    assert response.status_code == 200
    assert body["ok"] is True
    assert body["data"]["agendamento"]["numero_nota"] == "70912345678"
    assert body["data"]["pode_reagendar"] is True
    assert body["data"]["motivo_bloqueio"] == ""
    assert body["data"]["codigo_bloqueio"] is None


def test_find_booking_reports_highest_priority_block(session_factory, add_booking):
    add_booking("70900000001", date(2025, 11, 6), status="concluido", reschedule_count=1)
    add_booking("70900000002", date(2025, 11, 6), status="reagendado", reschedule_count=1)
    add_booking("70900000003", date(2025, 11, 6))

    expected = {
        "70900000001": ("ALREADY_COMPLETED", "Este agendamento já foi concluído."),
        "70900000002": (
            "RESCHEDULE_LIMIT_REACHED",
            "O limite de 1 reagendamento por nota já foi atingido.",
        ),
        "70900000003": (
            "LEAD_TIME_EXPIRED",
            "O prazo para reagendamento (3 dias úteis de antecedência) expirou.",
        ),
    }
    for note, (code, message) in expected.items():
        body = client.get(f"/api/agendamentos/{note}").json()
        assert body["data"]["pode_reagendar"] is False
        assert body["data"]["codigo_bloqueio"] == code
        assert body["data"]["motivo_bloqueio"] == message


def test_find_booking_not_found(session_factory):
    response = client.get("/api/agendamentos/70999999999")

    body = response.json()
    assert response.status_code == 404
    assert body["ok"] is False
    assert body["error_code"] == "BOOKING_NOT_FOUND"


def test_health_reports_ok():
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}

from datetime import date

from fastapi.testclient import TestClient

from app.main import app


client = TestClient(app)


def test_date_with_both_periods_full_is_fully_booked(session_factory, add_booking):
    day = date(2025, 11, 10)
    add_booking("70900000001", day, period="manha")
    add_booking("70900000002", day, period="manha")
    add_booking("70900000003", day, period="tarde")
    add_booking("70900000004", day, period="tarde")

    response = client.get("/api/disponibilidade/Criciuma")

    body = response.json()
    assert response.status_code == 200
    assert body["ok"] is True
    assert body["data"]["localidade"] == "Criciuma"
    assert body["data"]["periodos_lotados"] == {"2025-11-10": ["manha", "tarde"]}
    assert body["data"]["datas_lotadas"] == ["2025-11-10"]


def test_single_full_period_is_not_a_fully_booked_date(session_factory, add_booking):
    day = date(2025, 11, 12)
    add_booking("70900000001", day, period="tarde")
    add_booking("70900000002", day, period="tarde")
    add_booking("70900000003", day, period="manha")

    body = client.get("/api/disponibilidade/Criciuma").json()

    assert body["data"]["periodos_lotados"] == {"2025-11-12": ["tarde"]}
    assert body["data"]["datas_lotadas"] == []


def test_availability_ignores_completed_past_and_other_localities(session_factory, add_booking):
    add_booking("70900000001", date(2025, 11, 12), status="concluido")
    add_booking("70900000002", date(2025, 11, 12))
    add_booking("70900000003", date(2025, 11, 3))
    add_booking("70900000004", date(2025, 11, 3))
    add_booking("70900000005", date(2025, 11, 13), locality="Tubarao")
    add_booking("70900000006", date(2025, 11, 13), locality="Tubarao")

    body = client.get("/api/disponibilidade/Criciuma").json()

    assert body["data"]["periodos_lotados"] == {}
    assert body["data"]["datas_lotadas"] == []

    other = client.get("/api/disponibilidade/Tubarao").json()
    assert other["data"]["periodos_lotados"] == {"2025-11-13": ["manha"]}

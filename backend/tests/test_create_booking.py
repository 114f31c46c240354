from datetime import date

from fastapi.testclient import TestClient

from app.main import app


client = TestClient(app)


def _payload(**overrides):
    payload = {
        "numero_nota": "70912345678",
        "numero_instalacao": "98765",
        "responsavel_pelo_agendamento": "Maria Souza",
        "localidade": "Criciuma",
        "data": "2025-11-11",
        "periodo": "manha",
    }
    payload.update(overrides)
    return payload


def test_create_booking_returns_201_with_original_and_current_slot(session_factory):
    response = client.post("/api/agendamentos", json=_payload())

    body = response.json()
    assert response.status_code == 201
    assert body["ok"] is True
    booking = body["data"]["agendamento"]
    assert booking["numero_nota"] == "70912345678"
    assert booking["data_original"] == "2025-11-11"
    assert booking["data_atual"] == "2025-11-11"
    assert booking["periodo_original"] == "manha"
    assert booking["periodo_atual"] == "manha"
    assert booking["status"] == "agendado"
    assert booking["quantidade_reagendamentos"] == 0
    assert booking["reagendado_em"] is None


def test_duplicate_note_number_returns_409(session_factory):
    first = client.post("/api/agendamentos", json=_payload())
    second = client.post("/api/agendamentos", json=_payload(periodo="tarde"))

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["error_code"] == "DUPLICATE_NOTE_NUMBER"


def test_third_booking_in_same_slot_returns_409(session_factory, add_booking):
    add_booking("70900000001", date(2025, 11, 11))
    add_booking("70900000002", date(2025, 11, 11))

    response = client.post("/api/agendamentos", json=_payload())

    body = response.json()
    assert response.status_code == 409
    assert body["ok"] is False
    assert body["error_code"] == "SLOT_FULL"


def test_completed_bookings_and_other_slots_do_not_use_capacity(session_factory, add_booking):
    add_booking("70900000001", date(2025, 11, 11), status="concluido")
    add_booking("70900000002", date(2025, 11, 11))
    add_booking("70900000003", date(2025, 11, 11), locality="Tubarao")
    add_booking("70900000004", date(2025, 11, 11), period="tarde")

    response = client.post("/api/agendamentos", json=_payload())

    assert response.status_code == 201


def test_missing_fields_return_400(session_factory):
    payload = _payload()
    del payload["responsavel_pelo_agendamento"]

    response = client.post("/api/agendamentos", json=payload)

    body = response.json()
    assert response.status_code == 400
    assert body["error_code"] == "INVALID_ARGS"
    assert body["human_message"] == "Todos os campos são obrigatórios."


def test_blank_field_counts_as_missing(session_factory):
    response = client.post("/api/agendamentos", json=_payload(localidade="   "))

    assert response.status_code == 400
    assert response.json()["human_message"] == "Todos os campos são obrigatórios."


def test_invalid_note_number_returns_400(session_factory):
    for note in ("12345", "70812345678", "7091234567", "709123456789"):
        response = client.post("/api/agendamentos", json=_payload(numero_nota=note))
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_NOTE_NUMBER"


def test_note_number_with_leading_zero_is_accepted(session_factory):
    response = client.post("/api/agendamentos", json=_payload(numero_nota="07091234567"))

    assert response.status_code == 201


def test_invalid_period_returns_400(session_factory):
    response = client.post("/api/agendamentos", json=_payload(periodo="noite"))

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_ARGS"


def test_date_rules_return_400(session_factory):
    cases = {
        "2025-11-15": "NON_BUSINESS_DAY",
        "2025-12-08": "HORIZON_EXCEEDED",
        "2025-11-06": "INSUFFICIENT_LEAD_TIME",
    }
    for requested, error_code in cases.items():
        response = client.post("/api/agendamentos", json=_payload(data=requested))
        assert response.status_code == 400
        assert response.json()["error_code"] == error_code


def test_lead_time_message_mentions_three_business_days(session_factory):
    response = client.post("/api/agendamentos", json=_payload(data="2025-11-06"))

    assert response.json()["human_message"] == (
        "O agendamento deve ter no mínimo 3 dias úteis de antecedência."
    )


def test_horizon_disabled_by_env(session_factory, monkeypatch):
    monkeypatch.setenv("BOOKING_HORIZON_DAYS", "off")

    response = client.post("/api/agendamentos", json=_payload(data="2025-12-08"))

    assert response.status_code == 201


def test_english_field_names_are_accepted(session_factory):
    response = client.post(
        "/api/agendamentos",
        json={
            "noteNumber": "70912345679",
            "installationNumber": "555",
            "responsibleParty": "Carlos",
            "locality": "Criciuma",
            "date": "2025-11-12",
            "period": "tarde",
        },
    )

    body = response.json()
    assert response.status_code == 201
    assert body["data"]["agendamento"]["periodo_atual"] == "tarde"
    assert body["data"]["agendamento"]["responsavel_pelo_agendamento"] == "Carlos"


def test_non_object_body_returns_400(session_factory):
    response = client.post("/api/agendamentos", json=["not", "an", "object"])

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_ARGS"

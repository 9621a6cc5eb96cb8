from fastapi.testclient import TestClient

from feecalc.main import app
from feecalc.tariffs import REFERENCE_TARIFFS

client = TestClient(app)

PERIOD = "2025-03"


def seed_tariffs():
    r = client.put("/api/v1/tariffs/", json=REFERENCE_TARIFFS.model_dump(mode="json"))
    assert r.status_code == 200, r.text
    assert r.json() == {"rows": 13}


def payload(unit_id="A101", kind="Apartment", area="70", tariffs=None):
    body = {
        "period": PERIOD,
        "inputs": [
            {
                "unit": {"unit_id": unit_id, "owner_id": "O1", "kind": kind, "area_m2": area},
                "owner": {"owner_id": "O1", "name": "Tran Thi B", "phone": "0901"},
                "vehicles": [
                    {"vehicle_id": "V1", "unit_id": unit_id, "type": "car", "start_date": "2024-05-01"},
                ],
                "adjustments": [{"unit_id": unit_id, "period": PERIOD, "amount": -10000}],
            }
        ],
        "reference": {
            "water_readings": [{"unit_id": unit_id, "period": PERIOD, "consumption_m3": 10}],
        },
    }
    if tariffs is not None:
        body["reference"]["tariffs"] = tariffs
    return body


def test_health():
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_tariffs_round_trip_through_storage():
    seed_tariffs()
    r = client.get("/api/v1/tariffs/")
    assert r.status_code == 200
    body = r.json()
    assert len(body["service"]) == 3
    assert [p["tier"] for p in body["parking"]] == ["Car", "Car-A", "Moto12", "Moto34", "Bicycle"]


def test_calculate_uses_stored_tariffs():
    seed_tariffs()
    r = client.post("/api/v1/charges/calculate", json=payload())
    assert r.status_code == 200, r.text
    [rec] = r.json()
    assert rec["service_total"] == 269500
    assert rec["parking_total"] == 928800
    assert rec["water_total"] == 97755
    assert rec["adjustments"] == -10000
    assert rec["total_due"] == 269500 + 928800 + 97755 - 10000
    assert rec["data_gaps"] == []


def test_commit_then_list():
    seed_tariffs()
    r = client.post("/api/v1/charges/commit", json=payload(unit_id="C303"))
    assert r.status_code == 200, r.text
    assert r.json() == {"written": 1, "keys": ["2025-03_C303"]}

    # committing again overwrites rather than duplicates
    client.post("/api/v1/charges/commit", json=payload(unit_id="C303", area="80"))
    r = client.get("/api/v1/charges/", params={"period": PERIOD})
    assert r.status_code == 200
    rows = [row for row in r.json() if row["unit_id"] == "C303"]
    assert len(rows) == 1
    assert rows[0]["area_m2"] == 80.0


def test_list_rejects_bad_period():
    r = client.get("/api/v1/charges/", params={"period": "March"})
    assert r.status_code == 400


def test_strict_missing_tariff_is_conflict():
    tariffs = REFERENCE_TARIFFS.model_dump(mode="json")
    tariffs["service"] = [t for t in tariffs["service"] if t["key"] != "KIOS"]
    r = client.post(
        "/api/v1/charges/calculate",
        params={"strict": "true"},
        json=payload(unit_id="K1", kind="KIOS", area="12", tariffs=tariffs),
    )
    assert r.status_code == 409
    assert r.json()["detail"] == {"unit_id": "K1", "missing": ["tariff:service:KIOS"]}


def test_lenient_missing_tariff_reports_gap():
    tariffs = REFERENCE_TARIFFS.model_dump(mode="json")
    tariffs["service"] = []
    r = client.post("/api/v1/charges/calculate", json=payload(tariffs=tariffs))
    assert r.status_code == 200
    assert r.json()[0]["data_gaps"] == ["tariff:service:Apartment"]


def test_invalid_inputs_are_unprocessable():
    r = client.post("/api/v1/charges/calculate", json=payload(area="-5"))
    assert r.status_code == 422

    body = payload()
    body["period"] = "2025-13"
    r = client.post("/api/v1/charges/calculate", json=body)
    assert r.status_code == 422


def test_audit_endpoint_flags_gaps():
    tariffs = REFERENCE_TARIFFS.model_dump(mode="json")
    body = payload(tariffs=tariffs)
    body["reference"]["water_readings"] = []
    [rec] = client.post("/api/v1/charges/calculate", json=body).json()

    r = client.post("/api/v1/charges/audit", json={"records": [rec]})
    assert r.status_code == 200
    assert [f["issue"] for f in r.json()] == ["no_water_usage", "missing_reference"]

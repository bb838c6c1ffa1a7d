from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from auction_api.models import VehicleExternalInfo


@pytest.fixture
def catalog(upsert_vehicle) -> dict[str, dict]:
    return {
        "sonata": upsert_vehicle(
            source="automart",
            mgmt_number="A100",
            car_number="12가3456",
            manufacturer="Hyundai",
            model_name="Sonata DN8",
            fuel_type="gasoline",
            year=2020,
            mileage=40000,
            price=1500,
            status="bidding-open",
        ),
        "k5": upsert_vehicle(
            source="automart",
            mgmt_number="A200",
            car_number="34나5678",
            manufacturer="Kia",
            model_name="K5",
            fuel_type="diesel",
            year=2018,
            mileage=90000,
            price=900,
            status="closed",
            result_status="sold",
            final_price=1000,
        ),
        "bmw": upsert_vehicle(
            source="onbid",
            source_id="OB-1",
            manufacturer="BMW",
            model_name="520d",
            fuel_type="diesel",
            year=2016,
            price=2100,
            status="closed",
            result_status="failed",
        ),
        "unpriced": upsert_vehicle(source="court_auction", source_id="2026타경1", model_name="Porter"),
    }


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "timestamp" in response.json()


def test_list_vehicles_defaults(client: TestClient, catalog) -> None:
    response = client.get("/api/vehicles")

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"] == {"page": 1, "limit": 20, "total": 4, "total_pages": 1}
    assert len(body["data"]) == 4
    assert all(item["has_inspection"] is False for item in body["data"])


@pytest.mark.parametrize(
    ("params", "expected"),
    [
        ({"fuel_type": "diesel"}, {"k5", "bmw"}),
        ({"year": 2020}, {"sonata"}),
        ({"year_max": 2018}, {"k5", "bmw"}),
        ({"price_min": 1000, "price_max": 2000}, {"sonata"}),
        ({"mileage_max": 50000}, {"sonata"}),
        ({"source": "onbid"}, {"bmw"}),
        ({"status": "closed"}, {"k5", "bmw"}),
        ({"result_status": "sold"}, {"k5"}),
        ({"listing_type": "active"}, {"sonata"}),
        ({"listing_type": "completed"}, {"k5", "bmw"}),
        ({"listing_type": "bogus"}, {"sonata", "k5", "bmw", "unpriced"}),
        ({"search": "sonata"}, {"sonata"}),
        ({"search": "A200"}, {"k5"}),
        ({"search": "bmw"}, {"bmw"}),
        ({"car_number": "5678"}, {"k5"}),
        ({"fuel_type": "  "}, {"sonata", "k5", "bmw", "unpriced"}),
    ],
)
def test_list_vehicles_filters(client: TestClient, catalog, params, expected) -> None:
    response = client.get("/api/vehicles", params=params)

    assert response.status_code == 200
    ids = {item["id"] for item in response.json()["data"]}
    assert ids == {catalog[name]["id"] for name in expected}
    assert response.json()["pagination"]["total"] == len(expected)


def test_list_vehicles_sorting_puts_nulls_last(client: TestClient, catalog) -> None:
    ascending = client.get("/api/vehicles", params={"sort_by": "price", "sort_dir": "asc"}).json()["data"]
    descending = client.get("/api/vehicles", params={"sort_by": "price", "sort_dir": "desc"}).json()["data"]

    assert [item["price"] for item in ascending] == [900, 1500, 2100, None]
    assert [item["price"] for item in descending] == [2100, 1500, 900, None]


def test_list_vehicles_unknown_sort_field_falls_back(client: TestClient, catalog) -> None:
    response = client.get("/api/vehicles", params={"sort_by": "price;DROP TABLE vehicles", "sort_dir": "asc"})

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["data"]] == [
        catalog[name]["id"] for name in ("sonata", "k5", "bmw", "unpriced")
    ]


def test_list_vehicles_pages_agree_with_total(client: TestClient, catalog) -> None:
    seen: list[int] = []
    for page in (1, 2, 3):
        body = client.get("/api/vehicles", params={"page": page, "limit": 2, "sort_by": "price"}).json()
        assert body["pagination"]["total"] == 4
        assert body["pagination"]["total_pages"] == 2
        seen.extend(item["id"] for item in body["data"])

    assert sorted(seen) == sorted(vehicle["id"] for vehicle in catalog.values())


def test_list_vehicles_clamps_out_of_range_pagination(client: TestClient, catalog) -> None:
    body = client.get("/api/vehicles", params={"page": -5, "limit": 1000}).json()

    assert body["pagination"]["page"] == 1
    assert body["pagination"]["limit"] == 20


def test_list_vehicles_rejects_malformed_numbers(client: TestClient) -> None:
    assert client.get("/api/vehicles", params={"page": "abc"}).status_code == 400
    assert client.get("/api/vehicles", params={"price_min": "cheap"}).status_code == 400
    assert client.get("/api/vehicles", params={"has_inspection": "maybe"}).status_code == 400


def test_get_vehicle(client: TestClient, catalog) -> None:
    response = client.get(f"/api/vehicles/{catalog['sonata']['id']}")

    assert response.status_code == 200
    assert response.json()["source_id"] == "automart:A100"
    assert client.get("/api/vehicles/9999").status_code == 404
    assert client.get("/api/vehicles/not-a-number").status_code == 400


def test_upsert_endpoint_validates_payload(client: TestClient) -> None:
    assert client.post("/api/vehicles/upsert", json={"model_name": "Nameless"}).status_code == 400
    assert client.post("/api/vehicles/upsert", json={"mgmt_number": "X", "price": -10}).status_code == 400
    assert client.post("/api/vehicles/upsert", json={"mgmt_number": "X", "due_date": "someday"}).status_code == 400


def test_upsert_endpoint_merges_fields(client: TestClient, upsert_vehicle) -> None:
    first = upsert_vehicle(mgmt_number="M1", price=1000, car_number="11가1111")
    second = upsert_vehicle(mgmt_number="M1", status="closed")

    assert second["id"] == first["id"]
    assert second["price"] == 1000
    assert second["car_number"] == "11가1111"
    assert second["status"] == "closed"


def test_vehicle_history(client: TestClient, upsert_vehicle) -> None:
    vehicle = upsert_vehicle(mgmt_number="H1", price=5000, auction_count=1)
    upsert_vehicle(mgmt_number="H1", price=4500, auction_count=2)

    response = client.get(f"/api/vehicles/{vehicle['id']}/history")

    assert response.status_code == 200
    assert [entry["auction_round"] for entry in response.json()] == [2, 1]
    assert client.get("/api/vehicles/9999/history").status_code == 404


def test_inspection_upsert_and_fetch(client: TestClient, catalog) -> None:
    vehicle_id = catalog["sonata"]["id"]
    assert client.get(f"/api/vehicles/{vehicle_id}/inspection").status_code == 404

    response = client.post(
        "/api/vehicles/inspection/upsert",
        json={
            "vehicle_source_id": "automart:A100",
            "inspection_date": "2026-09-30",
            "vin": "KMHXX00XXXX000001",
            "report_data": {"accident": False},
        },
    )
    assert response.status_code == 200
    assert response.json()["vehicle_id"] == vehicle_id

    fetched = client.get(f"/api/vehicles/{vehicle_id}/inspection").json()
    assert fetched["report_data"] == {"accident": False}
    assert fetched["inspection_date"] == "2026-09-30"

    listed = client.get("/api/vehicles", params={"has_inspection": "true"}).json()["data"]
    assert [item["id"] for item in listed] == [vehicle_id]
    assert listed[0]["has_inspection"] is True
    without = client.get("/api/vehicles", params={"has_inspection": "false"}).json()
    assert without["pagination"]["total"] == 3


def test_inspection_upsert_errors(client: TestClient) -> None:
    missing_vehicle = client.post(
        "/api/vehicles/inspection/upsert",
        json={"vehicle_source_id": "nope", "report_data": {}},
    )
    missing_report = client.post("/api/vehicles/inspection/upsert", json={"vehicle_source_id": "nope"})

    assert missing_vehicle.status_code == 404
    assert missing_report.status_code == 400


def test_lookup_by_car_number(client: TestClient, db: Session, catalog) -> None:
    db.add(
        VehicleExternalInfo(
            car_number="12가3456",
            source="car365",
            data={"owners": 2},
            fetched_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
        )
    )
    db.commit()

    response = client.get("/api/vehicles/lookup/12가3456")

    assert response.status_code == 200
    body = response.json()
    assert [vehicle["id"] for vehicle in body["vehicles"]] == [catalog["sonata"]["id"]]
    assert body["external_info"]["data"] == {"owners": 2}
    assert body["car365_url"].startswith("https://www.car365.go.kr/")
    assert body["car365_url"].endswith("carNo=12가3456")


def test_lookup_unknown_car_number(client: TestClient) -> None:
    body = client.get("/api/vehicles/lookup/99허9999").json()

    assert body["vehicles"] == []
    assert body["external_info"] is None


def test_stats(client: TestClient, catalog) -> None:
    body = client.get("/api/stats").json()

    assert body["total_count"] == 3
    assert body["avg_price"] == 1500
    assert body["price_range"] == {"min": 900, "max": 2100}
    assert body["completed_count"] == 2
    assert body["avg_final_price"] == 1000
    assert body["sale_rate"] == 50
    assert {item["fuel_type"]: item["count"] for item in body["by_fuel_type"]} == {"diesel": 2, "gasoline": 1}
    assert {item["status"]: item["count"] for item in body["by_status"]} == {"closed": 2, "bidding-open": 1}
    assert {item["source"]: item["count"] for item in body["by_source"]} == {
        "automart": 2,
        "onbid": 1,
        "court_auction": 1,
    }


def test_stats_on_empty_catalog(client: TestClient) -> None:
    body = client.get("/api/stats").json()

    assert body["total_count"] == 0
    assert body["price_range"] == {"min": 0, "max": 0}
    assert body["sale_rate"] == 0


def test_sources(client: TestClient, catalog) -> None:
    sources = client.get("/api/sources").json()

    assert sources[0] == {"source": "automart", "name": "Automart public sale", "count": 2}
    assert {item["source"] for item in sources} == {"automart", "onbid", "court_auction"}


def test_market_mappings_are_seeded(client: TestClient) -> None:
    body = client.get("/api/market-mappings").json()

    assert {item["internal_name"] for item in body["manufacturers"]} >= {"hyundai", "kia", "bmw"}
    assert {item["internal_name"] for item in body["fuel_types"]} >= {"gasoline", "diesel", "electric"}
    assert len(body["models"]) > 0


def test_cors_allows_credentials(client: TestClient) -> None:
    response = client.options(
        "/api/vehicles",
        headers={"Origin": "http://localhost:4321", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-credentials"] == "true"


def test_search_treats_wildcards_literally(client: TestClient, upsert_vehicle) -> None:
    plain = upsert_vehicle(mgmt_number="AB1")
    underscored = upsert_vehicle(mgmt_number="A_1")

    by_underscore = client.get("/api/vehicles", params={"search": "A_1"}).json()["data"]
    by_percent = client.get("/api/vehicles", params={"search": "%"}).json()["data"]

    assert [item["id"] for item in by_underscore] == [underscored["id"]]
    assert plain["id"] not in {item["id"] for item in by_percent}
    assert by_percent == []


@pytest.mark.parametrize(
    "params",
    [
        {"page": 10**19},
        {"year": 10**19},
        {"price_min": -(10**19)},
        {"mileage_max": 10**19},
    ],
)
def test_list_vehicles_rejects_out_of_range_numbers(client: TestClient, params) -> None:
    assert client.get("/api/vehicles", params=params).status_code == 400


def test_vehicle_routes_reject_out_of_range_ids(client: TestClient) -> None:
    huge = 10**19

    assert client.get(f"/api/vehicles/{huge}").status_code == 400
    assert client.get(f"/api/vehicles/{huge}/history").status_code == 400
    assert client.get(f"/api/vehicles/{huge}/inspection").status_code == 400
    assert client.get("/api/vehicles/0").status_code == 400


def test_upsert_endpoint_rejects_values_outside_column_range(client: TestClient) -> None:
    too_big_price = client.post("/api/vehicles/upsert", json={"mgmt_number": "R1", "price": 2**63})
    too_big_year = client.post("/api/vehicles/upsert", json={"mgmt_number": "R1", "year": 2**31})

    assert too_big_price.status_code == 400
    assert too_big_year.status_code == 400

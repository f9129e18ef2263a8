from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from conftest import FakeTabularStore, make_settings
from store_records_api.app.core.errors import ConfigurationMissing
from store_records_api.app.main import create_app
from store_records_api.app.services.store_service import StoreService


@pytest.fixture
def api(service: StoreService) -> TestClient:
    return TestClient(create_app(make_settings(), store_service=service))


def test_list_stores(api: TestClient, store_a: Dict[str, Any]) -> None:
    response = api.get("/api/v1/stores/")

    assert response.status_code == 200
    assert response.json() == [
        {"storeName": "Store A", "companyName": "Acme", "teamName": "North", "interviewer": "Sato"}
    ]


def test_get_store_document(api: TestClient, tabular_store: FakeTabularStore, store_a: Dict[str, Any]) -> None:
    tabular_store.seed("OvertimeSubjects", {"StoreID": "S1", "Subject": "Audit"})

    response = api.get("/api/v1/stores/Store A")

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"store", "outsourcingCosts", "recruitmentMedia", "overtimeSubjects", "organizationCharts"}
    assert body["store"]["StoreID"] == "S1"
    assert body["overtimeSubjects"][0]["Subject"] == "Audit"
    assert body["outsourcingCosts"] == []


def test_unknown_store_is_404(api: TestClient) -> None:
    response = api.get("/api/v1/stores/Unknown Store")

    assert response.status_code == 404
    assert "Unknown Store" in response.json()["detail"]


def test_duplicate_store_is_409(api: TestClient, tabular_store: FakeTabularStore) -> None:
    tabular_store.seed("Stores", {"StoreID": "S1", "StoreName": "Twin"}, {"StoreID": "S2", "StoreName": "Twin"})

    assert api.get("/api/v1/stores/Twin").status_code == 409


def test_failed_child_fetch_is_502(api: TestClient, tabular_store: FakeTabularStore, store_a: Dict[str, Any]) -> None:
    tabular_store.fail("RecruitmentMedia", "Find", 500)

    response = api.get("/api/v1/stores/Store A")

    assert response.status_code == 502
    assert "RecruitmentMedia" in response.json()["detail"]


def test_save_store(api: TestClient, tabular_store: FakeTabularStore, store_a: Dict[str, Any]) -> None:
    response = api.put(
        "/api/v1/stores/Store A",
        json={"storeName": "ignored", "store": {"TeamName": "East"}, "outsourcingCosts": [{"Amount": 100}]},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert tabular_store.rows("Stores", StoreID="S1")[0]["TeamName"] == "East"
    assert tabular_store.rows("OutsourcingCosts", StoreID="S1")[0]["Amount"] == 100


def test_failed_save_still_answers_200(api: TestClient, tabular_store: FakeTabularStore, store_a: Dict[str, Any]) -> None:
    tabular_store.seed("OvertimeSubjects", {"StoreID": "S1"})
    tabular_store.fail("OvertimeSubjects", "Delete", 500)

    response = api.put("/api/v1/stores/Store A", json={"overtimeSubjects": [{"Subject": "New"}]})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert "OvertimeSubjects" in body["error"]


def test_info(api: TestClient) -> None:
    body = api.get("/api/v1/info/").json()

    assert body["parentTable"] == "Stores"
    assert body["childTables"] == ["OutsourcingCosts", "RecruitmentMedia", "OvertimeSubjects", "OrganizationCharts"]


def test_token_guard(service: StoreService, store_a: Dict[str, Any]) -> None:
    api = TestClient(create_app(make_settings(api_token="form-token"), store_service=service))

    assert api.get("/api/v1/stores/").status_code == 401
    assert api.get("/api/v1/stores/", headers={"Authorization": "Bearer wrong"}).status_code == 401
    assert api.get("/api/v1/stores/", headers={"Authorization": "Bearer form-token"}).status_code == 200
    assert api.get("/api/v1/info/").status_code == 200


def test_missing_credentials_stop_start_up() -> None:
    with pytest.raises(ConfigurationMissing) as excinfo:
        create_app(make_settings(app_id="", access_key=""))

    assert excinfo.value.names == ["APPSHEET_APP_ID", "APPSHEET_ACCESS_KEY"]


def test_numeric_store_name_is_served(api: TestClient, tabular_store: FakeTabularStore) -> None:
    tabular_store.seed("Stores", {"StoreID": "S8", "StoreName": 123, "CompanyName": "Acme"})

    response = api.get("/api/v1/stores/123")

    assert response.status_code == 200
    assert response.json()["store"]["StoreName"] == 123
    assert api.get("/api/v1/stores/").json()[0]["storeName"] == "123"


def test_save_with_non_object_body_is_rejected_in_result(
    api: TestClient, tabular_store: FakeTabularStore, store_a: Dict[str, Any]
) -> None:
    as_list = api.put("/api/v1/stores/Store A", json=[{"Amount": 1}])
    empty = api.put("/api/v1/stores/Store A")

    for response in (as_list, empty):
        assert response.status_code == 200
        assert response.json()["success"] is False
    assert tabular_store.actions() == []


def test_store_name_with_slash(api: TestClient, tabular_store: FakeTabularStore) -> None:
    tabular_store.seed("Stores", {"StoreID": "S5", "StoreName": "Shibuya/Harajuku"})

    read = api.get("/api/v1/stores/Shibuya%2FHarajuku")
    saved = api.put("/api/v1/stores/Shibuya%2FHarajuku", json={"store": {"TeamName": "West"}})

    assert read.status_code == 200
    assert read.json()["store"]["StoreID"] == "S5"
    assert saved.json() == {"success": True}
    assert tabular_store.rows("Stores", StoreID="S5")[0]["TeamName"] == "West"

import json

import pytest

from hermes.config.settings import settings

ORDERS = "/api/v1/orders"


def order_payload(order_number="A-1", **fields):
    payload = {"date": "2024-04-01", "orderNumber": order_number, "material": "09Г2С", "diameter": "1200"}
    payload.update(fields)
    return payload


def create(client, order_number="A-1", **fields):
    response = client.post(ORDERS, json=order_payload(order_number, **fields))
    assert response.status_code == 201, response.text
    return response.json()


def test_root_and_health(client):
    assert client.get("/").json()["service"] == settings.APP_TITLE
    response = client.get("/health/db")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_order(client):
    body = create(client, executors=[{"name": "Иванов", "date": "2024-04-02"}])

    assert body["id"]
    assert body["orderNumber"] == "A-1"
    assert body["status"] == "active"
    assert body["createdAt"] == body["updatedAt"]
    assert len(body["executors"]) == 6
    assert body["executors"][0] == {"name": "Иванов", "date": "2024-04-02"}


def test_create_duplicate_order_number_conflicts(client):
    create(client, "A-1")
    response = client.post(ORDERS, json=order_payload("A-1"))
    assert response.status_code == 409


@pytest.mark.parametrize(
    "payload",
    [
        order_payload("bad number"),
        order_payload("A-1", date=""),
        {"orderNumber": "A-1"},
    ],
)
def test_create_rejects_invalid_form(client, payload):
    assert client.post(ORDERS, json=payload).status_code == 422


def test_get_update_delete(client):
    created = create(client)
    order_id = created["id"]

    assert client.get(f"{ORDERS}/{order_id}").json()["orderNumber"] == "A-1"

    response = client.put(f"{ORDERS}/{order_id}", json={"material": "AISI 321", "cutting": "плазма"})
    assert response.status_code == 200
    updated = response.json()
    assert updated["id"] == order_id
    assert updated["createdAt"] == created["createdAt"]
    assert updated["material"] == "AISI 321"
    assert updated["cutting"] == "плазма"
    assert updated["diameter"] == "1200"

    assert client.delete(f"{ORDERS}/{order_id}").status_code == 200
    assert client.get(f"{ORDERS}/{order_id}").status_code == 404
    assert client.delete(f"{ORDERS}/{order_id}").status_code == 404


def test_update_to_taken_order_number_conflicts(client):
    create(client, "A-1")
    second = create(client, "A-2")

    response = client.put(f"{ORDERS}/{second['id']}", json={"orderNumber": "A-1"})
    assert response.status_code == 409


def test_update_missing_order(client):
    assert client.put(f"{ORDERS}/nope", json={"material": "x"}).status_code == 404


def test_list_sort_and_filter(client):
    create(client, "B-2", material="Ст3")
    create(client, "A-1", material="AISI 304")
    create(client, "C-3", material="aisi 321")

    response = client.get(ORDERS, params={"sort_by": "orderNumber", "sort_order": "asc"})
    assert [o["orderNumber"] for o in response.json()] == ["A-1", "B-2", "C-3"]

    response = client.get(ORDERS, params={"sort_by": "orderNumber", "sort_order": "asc", "search": "AISI"})
    assert [o["orderNumber"] for o in response.json()] == ["A-1", "C-3"]

    response = client.get(ORDERS, params={"sort_by": "orderNumber", "sort_order": "asc", "skip": 1, "limit": 1})
    assert [o["orderNumber"] for o in response.json()] == ["B-2"]


def test_search(client):
    create(client, "ABC-1", bottomNumber="D-77")
    create(client, "XYZ-2")

    assert [o["orderNumber"] for o in client.get(f"{ORDERS}/search", params={"q": "d-7"}).json()] == ["ABC-1"]
    assert client.get(f"{ORDERS}/search", params={"q": "a"}).status_code == 400
    assert client.get(f"{ORDERS}/search").status_code == 400


def test_stats(client):
    create(client, "A-1", material="Ст3")
    create(client, "A-2", material="Ст3")
    create(client, "A-3", material="")

    assert client.get(f"{ORDERS}/stats").json() == {
        "total": 3,
        "active": 3,
        "uniqueMaterials": 1,
        "uniqueOrderNumbers": 3,
    }


def test_export_csv(client):
    create(client, "A-1", date="2024-01-10", material="Сталь, лист")
    create(client, "A-2", date="2024-03-10")

    response = client.get(f"{ORDERS}/export/csv")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "orders_export_" in response.headers["content-disposition"]
    lines = response.text.split("\n")
    assert lines[0].startswith("ID,Дата заказа,Номер заказа")
    assert len(lines) == 3
    # newest order date first
    assert ",A-2," in lines[1]
    assert '"Сталь, лист"' in lines[2]

    response = client.get(f"{ORDERS}/export/csv", params={"date_from": "2024-02-01"})
    assert len(response.text.split("\n")) == 2


def test_export_skips_deleted_orders(client):
    created = create(client, "A-1")
    create(client, "A-2")
    client.put(f"{ORDERS}/{created['id']}", json={"status": "deleted"})

    lines = client.get(f"{ORDERS}/export/csv").text.split("\n")
    assert len(lines) == 2
    assert ",A-2," in lines[1]


def test_import_csv(client):
    create(client, "A-1", material="old")
    text = "Номер заказа,Материал,Номер днища\nA-1,new,B-1\nA-2,Ст3,B-2\nbad number,x,y\n"

    response = client.post(
        f"{ORDERS}/import/csv",
        files={"file": ("orders.csv", text.encode("utf-8"), "text/csv")},
    )
    assert response.status_code == 200
    assert response.json() == {"imported": 1, "updated": 0, "skipped": 1, "errors": 1, "total": 3}

    response = client.post(
        f"{ORDERS}/import/csv",
        files={"file": ("orders.csv", text.encode("utf-8"), "text/csv")},
        data={"overwrite": "true"},
    )
    assert response.json() == {"imported": 0, "updated": 2, "skipped": 0, "errors": 1, "total": 3}
    materials = {o["orderNumber"]: o["material"] for o in client.get(ORDERS).json()}
    assert materials == {"A-1": "new", "A-2": "Ст3"}


def test_import_csv_by_bottom_number(client):
    create(client, "A-1", bottomNumber="B-1")
    text = "Номер заказа,Номер днища,Раскрой\nA-1,B-1,газ\n"

    response = client.post(
        f"{ORDERS}/import/csv",
        files={"file": ("orders.csv", text.encode("utf-8"), "text/csv")},
        data={"overwrite": "true", "lookup_field": "bottomNumber"},
    )
    assert response.json()["updated"] == 1
    assert client.get(ORDERS).json()[0]["cutting"] == "газ"


def test_import_rejects_unusable_files(client):
    response = client.post(
        f"{ORDERS}/import/csv",
        files={"file": ("orders.csv", "Номер заказа\n".encode("utf-8"), "text/csv")},
    )
    assert response.status_code == 400
    assert client.get(ORDERS).json() == []


def test_upload_size_limit(client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 16)
    text = "Номер заказа\nA-1\nA-2\nA-3\n"

    response = client.post(
        f"{ORDERS}/import/csv",
        files={"file": ("orders.csv", text.encode("utf-8"), "text/csv")},
    )
    assert response.status_code == 400


def test_backup_and_restore(client):
    first = create(client, "A-1")
    create(client, "A-2")

    response = client.get(f"{ORDERS}/backup")
    assert response.status_code == 200
    assert "orders_backup_" in response.headers["content-disposition"]
    payload = response.json()
    assert payload["version"] == 1
    assert payload["totalRecords"] == 2

    client.delete(f"{ORDERS}/{first['id']}")
    create(client, "A-3")

    response = client.post(
        f"{ORDERS}/backup/restore",
        files={"file": ("backup.json", json.dumps(payload).encode("utf-8"), "application/json")},
    )
    assert response.status_code == 200
    assert response.json() == {"restored": 2, "errors": 0, "total": 2}
    assert sorted(o["orderNumber"] for o in client.get(ORDERS).json()) == ["A-1", "A-2"]
    assert client.get(f"{ORDERS}/{first['id']}").json()["createdAt"] == first["createdAt"]


def test_restore_rejects_malformed_backup(client):
    create(client, "A-1")

    response = client.post(
        f"{ORDERS}/backup/restore",
        files={"file": ("backup.json", b"{}", "application/json")},
    )
    assert response.status_code == 400
    assert len(client.get(ORDERS).json()) == 1


def test_bulk_delete(client):
    first = create(client, "A-1")
    second = create(client, "A-2")
    create(client, "A-3")

    response = client.post(f"{ORDERS}/delete", json={"ids": [first["id"], second["id"], "missing"]})

    assert response.status_code == 200
    assert response.json() == {"deleted": 2, "errors": 1}
    assert [o["orderNumber"] for o in client.get(ORDERS).json()] == ["A-3"]


def test_clear_all(client):
    create(client, "A-1")
    create(client, "A-2")

    assert client.delete(f"{ORDERS}/clear-all").json() == {"deleted": 2}
    assert client.get(ORDERS).json() == []

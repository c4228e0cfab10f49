"""HTTP surface: routes, and every failure arriving as a notification body."""
import base64
import json

from app.core.exceptions import StoreUnavailable


def _customer(client, name="Meena Traders", **fields):
    response = client.post("/customers", json={"name": name, **fields})
    assert response.status_code == 201
    return response.json()


def _invoice(client, customer_id):
    response = client.post(
        "/invoices",
        json={
            "invoiceNumber": "A-001",
            "customerId": customer_id,
            "date": "2024-01-05",
            "items": [
                {"name": "Cleaning", "quantity": 1, "price": 100},
                {"name": "Repair", "quantity": 2, "price": 50},
            ],
        },
    )
    assert response.status_code == 201
    return response.json()


def _is_notification(body):
    return set(body["detail"]) == {"title", "description", "variant"}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_security_headers(client):
    response = client.get("/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_customer_crud(client):
    customer = _customer(client, email="meena@example.in")
    assert customer["avatar"] == "avatar-1"

    updated = client.patch(f"/customers/{customer['id']}", json={"mobile": "98450 00000"}).json()
    assert updated["mobile"] == "98450 00000"
    assert updated["email"] == "meena@example.in"

    found = client.get("/customers", params={"search": "meena@", "searchBy": "email"}).json()
    assert [c["id"] for c in found] == [customer["id"]]

    deleted = client.delete(f"/customers/{customer['id']}")
    assert deleted.status_code == 200
    assert deleted.json()["variant"] == "default"

    missing = client.get(f"/customers/{customer['id']}")
    assert missing.status_code == 404
    assert _is_notification(missing.json())


def test_unknown_request_fields_are_rejected(client):
    response = client.post("/customers", json={"name": "Meena", "avatar": "avatar-9"})

    assert response.status_code == 422


def test_invoice_total_and_item_totals(client):
    customer = _customer(client)

    invoice = _invoice(client, customer["id"])

    assert [item["total"] for item in invoice["items"]] == [100, 100]
    assert invoice["total"] == 200


def test_invoice_for_missing_customer_is_rejected(client):
    response = client.post("/invoices", json={"customerId": "ghost", "date": "2024-01-05", "items": []})

    assert response.status_code == 422
    assert response.json()["detail"]["title"] == "Invalid Input"


def test_status_update_through_api(client):
    customer = _customer(client)
    invoice = _invoice(client, customer["id"])
    url = f"/invoices/{invoice['id']}/items/1/status"

    first = client.post(url, json={"status": "Under Process", "date": "2024-01-10"})
    second = client.post(url, json={"status": "Completed", "date": "2024-01-12", "notes": "Done on site"})

    assert first.status_code == 200
    item = second.json()
    assert item["status"] == "Completed"
    assert item["processedDate"] == "2024-01-12"
    assert [h["status"] for h in item["statusHistory"]] == ["Under Process", "Completed"]

    services = client.get(f"/customers/{customer['id']}/services").json()
    assert len(services) == 2
    assert services[1]["status"] == "Completed"
    assert services[1]["originalIndex"] == 1
    assert services[0].get("status") is None


def test_status_date_before_last_update_is_rejected(client):
    customer = _customer(client)
    invoice = _invoice(client, customer["id"])
    url = f"/invoices/{invoice['id']}/items/0/status"
    client.post(url, json={"status": "Under Process", "date": "2024-01-10"})

    response = client.post(url, json={"status": "Completed", "date": "2024-01-09"})

    assert response.status_code == 422
    assert _is_notification(response.json())
    history = client.get(f"/invoices/{invoice['id']}").json()["items"][0]["statusHistory"]
    assert len(history) == 1


def test_status_for_missing_slot_is_not_found(client):
    customer = _customer(client)
    invoice = _invoice(client, customer["id"])

    response = client.post(
        f"/invoices/{invoice['id']}/items/5/status", json={"status": "Completed", "date": "2024-01-10"}
    )

    assert response.status_code == 404
    assert response.json()["detail"]["variant"] == "destructive"


def test_item_patch_cannot_touch_status(client):
    customer = _customer(client)
    invoice = _invoice(client, customer["id"])
    url = f"/invoices/{invoice['id']}/items/0"

    refused = client.patch(url, json={"status": "Completed"})
    accepted = client.patch(url, json={"acknowledgmentNumber": "ACK-1"})

    assert refused.status_code == 422
    assert accepted.json()["acknowledgmentNumber"] == "ACK-1"


def test_item_patch_rejects_nulls_and_keeps_invoice_readable(client):
    customer = _customer(client)
    invoice = _invoice(client, customer["id"])
    url = f"/invoices/{invoice['id']}/items/0"

    for body in ({"name": None}, {"quantity": None}, {"name": "   "}, {"price": -5}):
        response = client.patch(url, json=body)
        assert response.status_code == 422, body

    stored = client.get(f"/invoices/{invoice['id']}")
    assert stored.status_code == 200
    assert stored.json()["items"] == invoice["items"]
    assert client.get(f"/customers/{customer['id']}/services").status_code == 200
    assert client.patch(url, json={"name": "Deep cleaning"}).json()["name"] == "Deep cleaning"


def test_extract_then_save_matches_existing_customer(client, fake_groq):
    existing = _customer(client, name="Meena Traders")
    fake_groq.complete_json.return_value = json.dumps(
        {
            "invoiceNumber": "INV-77",
            "customerName": "meena  traders",
            "date": "2024-01-05",
            "aadhaarNumber": "",
            "items": [{"name": "AC Service", "quantity": 1, "price": 800, "total": 800}],
        }
    )
    uri = "data:image/jpeg;base64," + base64.b64encode(b"jpeg bytes").decode()

    extracted = client.post("/invoices/extract", json={"invoiceDataUri": uri})
    assert extracted.status_code == 200

    saved = client.post("/invoices/from-extraction", json=extracted.json()).json()

    assert saved["customerCreated"] is False
    assert saved["customer"]["id"] == existing["id"]
    assert saved["invoice"]["customerId"] == existing["id"]
    assert saved["invoice"]["total"] == 800


def test_save_extraction_creates_new_customer(client):
    payload = {
        "customerName": "Sunil Electricals",
        "date": "2024-01-06",
        "aadhaarNumber": "1234 5678 9012",
        "items": [],
    }

    saved = client.post("/invoices/from-extraction", json=payload).json()

    assert saved["customerCreated"] is True
    assert saved["customer"]["aadhaar"] == "1234 5678 9012"
    assert len(client.get("/customers").json()) == 1


def test_failed_extraction_is_a_notification(client, fake_groq):
    fake_groq.complete_json.return_value = "I could not read this image."
    uri = "data:image/png;base64," + base64.b64encode(b"png").decode()

    response = client.post("/invoices/extract", json={"invoiceDataUri": uri})

    assert response.status_code == 502
    assert response.json()["detail"]["title"] == "Extraction Failed"


def test_assignment_suggestion(client, fake_groq):
    employee = client.post("/employees", json={"name": "Ravi Kumar", "skills": ["AC"]}).json()
    fake_groq.complete_json.return_value = json.dumps(
        {"suggestedStaff": "Ravi Kumar", "reasoning": "Only available technician."}
    )

    response = client.post(
        "/assignment/suggest",
        json={"taskDescription": "Service the split AC unit", "priority": "High", "dueDate": "2024-02-01"},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["suggestedStaff"] == "Ravi Kumar"
    assert body["employee"]["id"] == employee["id"]


def test_bad_assignment_answer_is_a_notification(client, fake_groq):
    client.post("/employees", json={"name": "Ravi Kumar"})
    fake_groq.complete_json.return_value = json.dumps({"staff": "Ravi"})

    response = client.post(
        "/assignment/suggest",
        json={"taskDescription": "Service the split AC unit", "priority": "High", "dueDate": "2024-02-01"},
    )

    assert response.status_code == 502
    assert response.json()["detail"]["title"] == "Assignment Failed"


def test_tasks_and_dashboard(client):
    employee = client.post("/employees", json={"name": "Ravi Kumar"}).json()
    customer = _customer(client)
    created = client.post(
        "/tasks",
        json={"title": "Service AC", "customerId": customer["id"], "assigneeId": employee["id"], "priority": "High"},
    )
    assert created.status_code == 201
    task = created.json()
    assert task["assigneeName"] == "Ravi Kumar"
    assert task["customerName"] == "Meena Traders"
    assert client.get(f"/employees/{employee['id']}").json()["workload"] == 1

    client.patch(f"/tasks/{task['id']}", json={"status": "Done"})

    summary = client.get("/dashboard/summary").json()
    assert summary["taskStatus"] == [{"name": "Done", "value": 1}]
    assert summary["staffPerformance"] == [{"employeeId": employee["id"], "name": "Ravi", "tasks": 1}]
    assert summary["totals"]["customers"] == 1
    assert client.get(f"/employees/{employee['id']}").json()["workload"] == 0

    assert client.delete(f"/tasks/{task['id']}").status_code == 200
    assert client.delete(f"/tasks/{task['id']}").status_code == 404


def test_store_outage_is_a_notification(client, monkeypatch):
    def unavailable(*args, **kwargs):
        raise StoreUnavailable("connection refused")

    monkeypatch.setattr(client.app.state.store, "query", unavailable)

    response = client.get("/customers")

    assert response.status_code == 503
    assert response.json()["detail"]["title"] == "Store Unavailable"
    assert "connection refused" not in response.text

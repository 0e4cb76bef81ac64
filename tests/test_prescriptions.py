def add(client, **fields):
    payload = {"patientName": "Jane Doe", "drugName": "Amoxicillin", "dosage": "500mg"}
    payload.update(fields)
    return client.post("/api/addNew", json=payload)


def test_add_prescription_appears_in_list(client):
    resp = add(client)
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "Prescription Saved Successfully"}

    listed = client.get("/api/viewAll").get_json()
    assert len(listed) == 1
    assert listed[0]["patientName"] == "Jane Doe"
    assert listed[0]["drugName"] == "Amoxicillin"
    assert listed[0]["dosage"] == "500mg"
    assert "_id" in listed[0]


def test_list_keeps_insertion_order(client):
    add(client, patientName="A")
    add(client, patientName="B")
    names = [p["patientName"] for p in client.get("/api/viewAll").get_json()]
    assert names == ["A", "B"]


def test_missing_field_reports_error_as_status(client):
    resp = client.post("/api/addNew", json={"patientName": "Jane Doe", "dosage": "5mg"})
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "Prescription validation failed: drugName is required"
    assert client.get("/api/viewAll").get_json() == []


def test_empty_string_counts_as_missing(client):
    resp = add(client, dosage="")
    assert "dosage is required" in resp.get_json()["status"]


def test_delete_prescription(client):
    add(client)
    prescription_id = client.get("/api/viewAll").get_json()[0]["_id"]

    resp = client.post("/api/deleteUser", json={"id": prescription_id})
    assert resp.get_json() == {"status": "Prescription deleted successfully"}
    assert client.get("/api/viewAll").get_json() == []


def test_delete_unknown_id_reports_success(client):
    add(client)
    resp = client.post("/api/deleteUser", json={"id": 9999})
    assert resp.get_json() == {"status": "Prescription deleted successfully"}
    assert len(client.get("/api/viewAll").get_json()) == 1


def test_delete_malformed_id(client):
    resp = client.post("/api/deleteUser", json={"id": "not-an-id"})
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "Error deleting prescription"}


def test_delete_float_or_bool_id_deletes_nothing(client):
    add(client)
    for bad_id in (1.9, True, 1.0):
        resp = client.post("/api/deleteUser", json={"id": bad_id})
        assert resp.get_json() == {"status": "Error deleting prescription"}
    assert len(client.get("/api/viewAll").get_json()) == 1


def test_delete_digit_string_id(client):
    add(client)
    prescription_id = client.get("/api/viewAll").get_json()[0]["_id"]
    resp = client.post("/api/deleteUser", json={"id": str(prescription_id)})
    assert resp.get_json() == {"status": "Prescription deleted successfully"}
    assert client.get("/api/viewAll").get_json() == []


def test_delete_without_id_matches_nothing(client):
    add(client)
    resp = client.post("/api/deleteUser", json={})
    assert resp.get_json() == {"status": "Prescription deleted successfully"}
    assert len(client.get("/api/viewAll").get_json()) == 1

"""HTTP surface: status codes and response shapes."""


def create(client, start_time="13:15", **extra):
    return client.post("/reservations", json={"startTime": start_time, **extra})


class TestCreateEndpoint:
    def test_created(self, client):
        resp = create(client, email="a@example.com", receiveEmail=True)
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "success"
        record = body["record"]
        assert record["startTime"] == "13:15"
        assert record["endTime"] == "13:30"
        assert record["status"] == "queued"
        assert record["receiveEmail"] is True
        assert "email_sent" not in record

    def test_misaligned_minutes(self, client):
        resp = create(client, "13:20")
        assert resp.status_code == 400
        assert resp.json() == {"status": "error", "message": "Minutes must be 00, 15, 30, or 45"}

    def test_conflict(self, client):
        create(client)
        resp = create(client)
        assert resp.status_code == 409
        assert resp.json()["message"] == "This time slot is already reserved"

    def test_missing_start_time(self, client):
        assert client.post("/reservations", json={}).status_code == 422


class TestReadEndpoints:
    def test_list_and_get(self, client):
        rid = create(client).json()["record"]["id"]
        records = client.get("/reservations").json()["records"]
        assert [r["id"] for r in records] == [rid]
        assert client.get(f"/reservations/{rid}").json()["id"] == rid

    def test_get_unknown(self, client):
        resp = client.get("/reservations/nope")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Reservation not found"


class TestStateEndpoints:
    def test_update(self, client):
        rid = create(client).json()["record"]["id"]
        resp = client.put(f"/reservations/{rid}", json={"startTime": "16:45"})
        assert resp.status_code == 200
        assert resp.json()["endTime"] == "17:00"

    def test_update_conflict(self, client):
        create(client, "10:00")
        rid = create(client, "11:00").json()["record"]["id"]
        assert client.put(f"/reservations/{rid}", json={"startTime": "10:00"}).status_code == 409

    def test_cancel_without_body(self, client):
        rid = create(client).json()["record"]["id"]
        resp = client.post(f"/reservations/{rid}/cancel")
        assert resp.status_code == 200
        assert resp.json()["status"] == "cancelled"

    def test_cancel_twice(self, client):
        rid = create(client).json()["record"]["id"]
        client.post(f"/reservations/{rid}/cancel", json={"reason": "Changed plans"})
        resp = client.post(f"/reservations/{rid}/cancel")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Can only cancel reservations with QUEUED status"

    def test_reject(self, client):
        rid = create(client).json()["record"]["id"]
        assert client.post(f"/reservations/{rid}/reject", json={"reason": ""}).status_code == 422
        resp = client.post(f"/reservations/{rid}/reject", json={"reason": "Agent unavailable"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "rejected"


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_notification_health(self, client):
        assert client.get("/notifications/health").json()["status"] == "healthy"

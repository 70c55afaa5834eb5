"""Care API endpoints through the Flask test client."""

from datetime import timedelta

import pytest

from app import create_app
from app.utils.time import utc_now


@pytest.fixture()
def app(tmp_path):
    app = create_app(
        {
            "database_path": str(tmp_path / "test.db"),
            "audit_log_path": str(tmp_path / "audit.log"),
            "log_file_path": None,
        }
    )
    app.config["TESTING"] = True
    yield app
    app.config["CONTAINER"].shutdown()


@pytest.fixture()
def client(app):
    return app.test_client()


def _create_plant(client, **fields):
    body = {"name": "Monstera", "acquired_date": utc_now().isoformat()}
    body.update(fields)
    resp = client.post("/api/plants", json=body)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]["plant_id"]


def _pending(client, plant_id):
    resp = client.get(f"/api/plants/{plant_id}/care-tasks")
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]["tasks"]


class TestPlants:
    def test_create_and_get_plant(self, client):
        plant_id = _create_plant(client, species="Monstera deliciosa", watering_interval_days=5)

        resp = client.get(f"/api/plants/{plant_id}")

        assert resp.status_code == 200
        payload = resp.get_json()
        assert payload["ok"] is True
        assert payload["data"]["name"] == "Monstera"
        assert payload["data"]["watering_interval_days"] == 5
        assert payload["data"]["user_id"] == 1

    def test_create_requires_name(self, client):
        resp = client.post("/api/plants", json={"species": "Ficus"})

        assert resp.status_code == 400
        payload = resp.get_json()
        assert payload["ok"] is False
        assert payload["error"]["details"]["errors"][0]["loc"] == ["name"]

    def test_create_rejects_bad_dates_and_intervals(self, client):
        assert client.post("/api/plants", json={"name": "Fern", "last_watered": "yesterday-ish"}).status_code == 400
        assert client.post("/api/plants", json={"name": "Fern", "watering_interval_days": 0}).status_code == 400

    def test_list_plants_for_session_user(self, client):
        _create_plant(client, name="fern")
        _create_plant(client, name="Aloe")
        with client.session_transaction() as sess:
            sess["user_id"] = 2
        _create_plant(client, name="Basil")

        resp = client.get("/api/plants")

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["count"] == 1
        assert [p["name"] for p in data["plants"]] == ["Basil"]

        with client.session_transaction() as sess:
            sess["user_id"] = 1
        names = [p["name"] for p in client.get("/api/plants").get_json()["data"]["plants"]]
        assert names == ["Aloe", "fern"]

    def test_plain_dates_are_read_in_care_timezone(self, tmp_path):
        app = create_app(
            {
                "database_path": str(tmp_path / "la.db"),
                "audit_log_path": str(tmp_path / "audit.log"),
                "log_file_path": None,
                "timezone": "America/Los_Angeles",
            }
        )
        try:
            client = app.test_client()
            plant_id = _create_plant(client, last_watered="2024-06-13")

            data = client.get(f"/api/plants/{plant_id}").get_json()["data"]

            assert data["last_watered"] == "2024-06-13T07:00:00+00:00"
        finally:
            app.config["CONTAINER"].shutdown()

    def test_unknown_plant(self, client):
        resp = client.get("/api/plants/999")

        assert resp.status_code == 404
        assert resp.get_json()["ok"] is False

    def test_update_intervals(self, client):
        plant_id = _create_plant(client, watering_interval_days=5)

        resp = client.patch(f"/api/plants/{plant_id}/intervals", json={"pruning_interval_days": 60})

        data = resp.get_json()["data"]
        assert resp.status_code == 200
        assert data["pruning_interval_days"] == 60
        assert data["watering_interval_days"] == 5

        resp = client.patch(f"/api/plants/{plant_id}/intervals", json={"watering_interval_days": None})
        assert resp.get_json()["data"]["watering_interval_days"] is None

    def test_update_intervals_validation(self, client):
        plant_id = _create_plant(client)

        assert client.patch(f"/api/plants/{plant_id}/intervals", json={}).status_code == 400
        assert client.patch("/api/plants/999/intervals", json={"watering_interval_days": 3}).status_code == 404


class TestCareTasks:
    def test_new_plant_has_one_watering_task_due_today(self, client):
        plant_id = _create_plant(client)

        tasks = _pending(client, plant_id)

        assert len(tasks) == 1
        assert tasks[0]["task_type"] == "watering"
        assert tasks[0]["status"] == "pending"
        assert tasks[0]["due_status"] == "due"

    def test_listing_is_idempotent(self, client):
        plant_id = _create_plant(client)

        first = _pending(client, plant_id)
        second = _pending(client, plant_id)

        assert [t["task_id"] for t in first] == [t["task_id"] for t in second]

    def test_recently_watered_plant_has_no_tasks(self, client):
        plant_id = _create_plant(client, last_watered=utc_now().isoformat())

        assert _pending(client, plant_id) == []

    def test_care_tasks_for_unknown_plant(self, client):
        assert client.get("/api/plants/999/care-tasks").status_code == 404

    def test_complete_then_complete_again(self, client):
        plant_id = _create_plant(client)
        (task,) = _pending(client, plant_id)

        resp = client.put(f"/api/care-tasks/{task['task_id']}/complete")

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["task"]["status"] == "completed"
        assert data["task"]["completed_at"] is not None
        assert data["pending_tasks"] == []
        plant = client.get(f"/api/plants/{plant_id}").get_json()["data"]
        assert plant["last_watered"] == data["task"]["completed_at"]

        again = client.put(f"/api/care-tasks/{task['task_id']}/complete")
        assert again.status_code == 409
        assert again.get_json()["error"]["details"]["status"] == "completed"

    def test_skip_regenerates_due_task(self, client):
        plant_id = _create_plant(client)
        (task,) = _pending(client, plant_id)

        resp = client.put(f"/api/care-tasks/{task['task_id']}/skip")

        data = resp.get_json()["data"]
        assert resp.status_code == 200
        assert data["task"]["status"] == "skipped"
        assert len(data["pending_tasks"]) == 1
        assert data["pending_tasks"][0]["task_id"] != task["task_id"]

    def test_reschedule_postpones(self, client):
        plant_id = _create_plant(client)
        (task,) = _pending(client, plant_id)

        resp = client.put(f"/api/care-tasks/{task['task_id']}/reschedule", json={"postpone_days": 2})

        data = resp.get_json()["data"]
        assert resp.status_code == 200
        assert data["task"]["status"] == "pending"
        assert data["task"]["due_status"] == "upcoming"
        assert data["pending_tasks"][0]["task_id"] == task["task_id"]

    def test_reschedule_to_date(self, client):
        plant_id = _create_plant(client)
        (task,) = _pending(client, plant_id)
        new_due = (utc_now() + timedelta(days=10)).date().isoformat()

        resp = client.put(f"/api/care-tasks/{task['task_id']}/reschedule", json={"due_date": new_due})

        assert resp.status_code == 200
        assert resp.get_json()["data"]["task"]["due_date"].startswith(new_due)

    def test_reschedule_validation(self, client):
        plant_id = _create_plant(client)
        (task,) = _pending(client, plant_id)
        url = f"/api/care-tasks/{task['task_id']}/reschedule"

        assert client.put(url, json={"due_date": "soon"}).status_code == 400
        assert client.put(url, json={"postpone_days": 0}).status_code == 400
        assert client.put(url, json={"due_date": "2030-01-01", "postpone_days": 2}).status_code == 400

    def test_unknown_task(self, client):
        resp = client.put("/api/care-tasks/4242/skip")

        assert resp.status_code == 404
        assert resp.get_json()["error"]["details"]["task_id"] == 4242


class TestViews:
    def test_history_lists_resolved_tasks(self, client):
        plant_id = _create_plant(client, name="Pothos")
        (task,) = _pending(client, plant_id)
        client.put(f"/api/care-tasks/{task['task_id']}/complete")

        resp = client.get("/api/care-tasks/history")

        data = resp.get_json()["data"]
        assert resp.status_code == 200
        assert data["count"] == 1
        assert data["history"][0]["plant_name"] == "Pothos"
        assert data["history"][0]["status"] == "completed"

    def test_history_limit_validation(self, client):
        assert client.get("/api/care-tasks/history?limit=0").status_code == 400
        assert client.get("/api/care-tasks/history?limit=5").status_code == 200

    def test_dashboard_summary(self, client):
        _create_plant(client, name="Thirsty")
        _create_plant(client, name="Watered", last_watered=utc_now().isoformat())

        resp = client.get("/api/dashboard/care-summary")

        data = resp.get_json()["data"]
        assert resp.status_code == 200
        assert data["total_plants"] == 2
        assert data["plants_needing_care"] == 1
        assert [t["plant_name"] for t in data["upcoming_tasks"]] == ["Thirsty"]


def test_unknown_api_route_returns_json(client):
    resp = client.get("/api/nothing-here")

    assert resp.status_code == 404
    assert resp.get_json()["ok"] is False

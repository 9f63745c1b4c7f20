import csv
import io
from datetime import datetime, timedelta, timezone

import pytest

from models import DataReport, Picking
from services import workers as worker_service
from utils.security import sign_token


def test_start_and_close_picking(client, worker_headers, worker):
    r = client.post("/picking", json={"workType": "packing"}, headers=worker_headers)
    assert r.status_code == 200
    started = r.json()
    assert started["worker_id"] == worker.id
    assert started["work_type"] == "packing"
    assert started["end_timestamp"] is None

    active = client.get("/picking/active", headers=worker_headers).json()
    assert [p["id"] for p in active] == [started["id"]]
    assert client.get("/picking/latest", headers=worker_headers).json()["id"] == started["id"]

    r = client.put(
        f"/picking/{started['id']}",
        json={"subtask": "label A", "subtaskQuantity": 12},
        headers=worker_headers
    )
    assert r.status_code == 200
    closed = r.json()
    assert closed["end_timestamp"] is not None
    assert closed["subtask"] == "label A"
    assert closed["subtask_quantity"] == 12
    assert client.get("/picking/active", headers=worker_headers).json() == []


def test_closing_is_terminal(client, worker_headers):
    picking_id = client.post("/picking", json={"workType": "picking"}, headers=worker_headers).json()["id"]
    assert client.put(f"/picking/{picking_id}", headers=worker_headers).status_code == 200
    assert client.put(f"/picking/{picking_id}", headers=worker_headers).status_code == 409


def test_cannot_close_someone_elses_picking(client, db, worker_headers, admin_headers, add_picking):
    other = worker_service.create_worker(db, name="Bob", password="bob-pw")
    picking = add_picking(other.id, work_type="checking")
    assert client.put(f"/picking/{picking.id}", headers=worker_headers).status_code == 403
    assert client.put(f"/picking/{picking.id}", headers=admin_headers).status_code == 200
    assert client.put("/picking/9999", headers=worker_headers).status_code == 404


def test_unknown_work_type_rejected(client, worker_headers):
    r = client.post("/picking", json={"workType": "juggling"}, headers=worker_headers)
    assert r.status_code == 400
    r = client.post("/picking", json={}, headers=worker_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Missing input workType"


def test_lifecycle_requires_token(client):
    assert client.get("/picking").status_code == 401
    assert client.post("/picking", json={"workType": "picking"}).status_code == 401
    assert client.get("/picking/work", headers={"Authorization": "Bearer nope"}).status_code == 400


def test_assign_and_delete_are_admin_only(client, worker, worker_headers, admin_headers):
    payload = {"workerId": worker.id, "workType": "restocking"}
    assert client.post("/picking/assign", json=payload, headers=worker_headers).status_code == 403
    r = client.post("/picking/assign", json=payload, headers=admin_headers)
    assert r.status_code == 200
    picking_id = r.json()["id"]
    assert r.json()["worker_id"] == worker.id

    mine = client.get("/picking", headers=worker_headers).json()
    assert [p["id"] for p in mine] == [picking_id]
    assert client.get(f"/picking/worker/{worker.id}", headers=admin_headers).json()[0]["id"] == picking_id

    assert client.delete(f"/picking/{picking_id}", headers=worker_headers).status_code == 403
    assert client.delete(f"/picking/{picking_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/picking/{picking_id}", headers=admin_headers).status_code == 404
    assert client.get("/picking", headers=worker_headers).json() == []


@pytest.mark.parametrize("open_packing", [4, 5])
def test_available_work_types(client, worker, worker_headers, add_picking, open_packing):
    for _ in range(open_packing):
        add_picking(worker.id, work_type="packing")
    # closed records do not count against capacity
    add_picking(worker.id, work_type="packing", hours=1)

    available = client.get("/picking/work", headers=worker_headers).json()
    assert ("packing" in available) is (open_packing < 5)
    assert "picking" in available


def test_time_per_worker(client, db, admin, admin_headers, worker, add_picking):
    add_picking(worker.id, work_type="picking", hours=1.5)
    add_picking(worker.id, work_type="packing", hours=0.5)
    add_picking(worker.id, work_type="packing")
    old = datetime.now(timezone.utc) - timedelta(days=45)
    add_picking(worker.id, work_type="picking", start=old, hours=8)

    r = client.get("/picking/time", headers=admin_headers)
    assert r.status_code == 200
    by_name = {w["name"]: w for w in r.json()}
    assert by_name["Alice"]["time"] == pytest.approx(2.0)
    assert by_name["Admin"]["time"] == 0.0
    assert all("password" not in w for w in r.json())

    since = (old - timedelta(days=1)).replace(tzinfo=None).isoformat()
    r = client.get("/picking/time", params={"from_date": since}, headers=admin_headers)
    assert {w["name"]: w["time"] for w in r.json()}["Alice"] == pytest.approx(10.0)


def test_time_per_work_type(client, admin_headers, worker, add_picking):
    add_picking(worker.id, work_type="labelling", hours=2)
    add_picking(worker.id, work_type="labelling", hours=1)

    table = client.get("/picking/time/work-types", headers=admin_headers).json()
    assert table["Alice"]["labelling"] == pytest.approx(3.0)
    assert table["Alice"]["sub division"] == 0.0
    assert len(table["Alice"]) == 8


def test_subtasks_and_all(client, admin_headers, worker, add_picking):
    add_picking(worker.id, work_type="labelling", hours=1, subtask="label A", quantity=10)
    add_picking(worker.id, work_type="labelling", hours=2, subtask="label A", quantity=20)
    add_picking(worker.id, work_type="packing", hours=1)

    summary = client.get("/picking/subtasks", headers=admin_headers).json()
    assert summary == {"label A": {"quantity": 30, "hours": pytest.approx(3.0)}}

    rows = client.get("/picking/all", headers=admin_headers).json()
    assert len(rows) == 3
    assert all(row["worker_name"] == "Alice" for row in rows)
    assert [row["id"] for row in rows] == sorted((row["id"] for row in rows), reverse=True)


def test_csv_export(client, admin_headers, worker, add_picking):
    add_picking(worker.id, work_type="picking", hours=1.5)
    add_picking(worker.id, work_type="labelling", hours=0.25, subtask="label A", quantity=7)

    r = client.get("/picking/export", headers=admin_headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert r.headers["content-disposition"].startswith("attachment")

    lines = r.text.splitlines()
    assert len(lines) == 3
    rows = list(csv.reader(io.StringIO(r.text)))
    assert rows[0] == ["worker", "work_type", "hours", "subtask", "subtask_quantity"]
    assert rows[1] == ["Alice", "labelling", "0.25", "label A", "7"]
    assert rows[2] == ["Alice", "picking", "1.5", "", ""]

    r = client.get("/picking/export/work-types", headers=admin_headers)
    assert r.status_code == 200
    assert r.text.splitlines()[1].startswith("Alice,1.5,0.0,0.25")


def test_upload_reconciles_dataset(client, db, admin_headers, worker, add_picking):
    day_start = datetime(2024, 3, 5, 8, 0, tzinfo=timezone.utc)
    add_picking(worker.id, work_type="picking", start=day_start, hours=2)
    add_picking(worker.id, work_type="packing", start=day_start + timedelta(hours=3), hours=1)
    add_picking(worker.id, work_type="picking", start=day_start + timedelta(days=1), hours=5)
    lazy = worker_service.create_worker(db, name="Bob", password="bob-pw", soft_one_id="2002")

    payload = {"rows": [
        {"softOneId": 1001, "date": "2024-03-05", "orders": 10, "orderLines": 50, "units": 100},
        {"softOneId": "2002", "date": "2024-03-05", "orders": 1, "orderLines": 4, "units": 0},
        {"softOneId": "9999", "date": "2024-03-05", "orders": 1, "orderLines": 1, "units": 1},
    ]}
    r = client.post("/picking/upload", json=payload, headers=admin_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["unmatched"] == ["9999"]

    alice, bob = body["reports"]
    assert alice["worker_id"] == worker.id
    assert alice["date"] == "2024-03-05"
    assert alice["time_spent"] == pytest.approx(2.0)
    assert alice["order_lines_per_hour"] == pytest.approx(25.0)
    assert alice["units_per_order_line"] == pytest.approx(0.5)

    assert bob["worker_id"] == lazy.id
    assert bob["time_spent"] == 0
    assert bob["order_lines_per_hour"] is None
    assert bob["units_per_order_line"] is None

    db.expire_all()
    assert db.query(DataReport).count() == 2


def test_upload_is_admin_only(client, worker_headers):
    r = client.post("/picking/upload", json={"rows": []}, headers=worker_headers)
    assert r.status_code == 403


def test_pickings_of_deleted_worker_are_kept(client, db, admin_headers, worker, add_picking):
    worker_id = worker.id
    add_picking(worker_id, hours=1)
    assert client.delete(f"/worker/{worker_id}", headers=admin_headers).status_code == 200
    db.expire_all()
    assert db.query(Picking).filter(Picking.worker_id == worker_id).count() == 1
    # the report join drops rows without a worker
    assert client.get("/picking/all", headers=admin_headers).json() == []


def test_token_of_admin_flag_false_cannot_read_reports(client, worker):
    headers = {"Authorization": f"Bearer {sign_token(worker.id, False)}"}
    assert client.get("/picking/time", headers=headers).status_code == 403
    assert client.get("/picking/export", headers=headers).status_code == 403

"""
Tests de asignaciones y series semanales
"""
from datetime import date, time

import pytest
from sqlalchemy.exc import OperationalError

from src.models import Assignment, AssignmentProduct, Doctor, VisitGoal
from src.schemas import AssignmentCreate, AssignmentUpdate, WeeklySeriesCreate, WeeklySeriesUpdate
from src.services import AssignmentManager
from src.utils.errors import DependencyError, InvalidInputError, NotFoundError, PermissionDeniedError


def assignment_payload(catalog, **overrides):
    data = {
        "representative_id": catalog.rep_id,
        "doctor_id": catalog.doctor_id,
        "visit_days": ["Wednesday", "Monday"],
        "start_time": time(9, 0),
        "end_time": time(11, 0),
        "product_ids": [catalog.p1_id, catalog.p2_id],
        "visits_per_week": 2,
        "start_date": date(2025, 1, 6),
        "recurring_weeks": 8,
    }
    data.update(overrides)
    return AssignmentCreate(**data)


def series_payload(catalog, **overrides):
    data = {
        "representative_id": catalog.rep_id,
        "doctor_ids": [catalog.doctor_id, catalog.doctor2_id],
        "product_ids": [catalog.p1_id],
        "start_time": time(9, 0),
        "end_time": time(10, 0),
        "weekday": 2,
        "recurring_weeks": 3,
        "start_date": date(2024, 1, 1),
    }
    data.update(overrides)
    return WeeklySeriesCreate(**data)


# ============================================================================
# SERVICIO - CREAR / ACTUALIZAR POR PAR
# ============================================================================

def test_create_assignment_with_products_and_goal(db, catalog, manager_actor):
    assignment, created = AssignmentManager(db).create_or_update_assignment(
        manager_actor, assignment_payload(catalog)
    )

    assert created is True
    assert assignment.visit_days == ["Monday", "Wednesday"]
    assert assignment.product_ids == [catalog.p1_id, catalog.p2_id]
    assert assignment.visit_goal.visits_per_week == 2
    assert assignment.visit_goal.recurring_weeks == 8
    assert assignment.assigned_by == 100
    assert assignment.recurring_type == "none"


def test_create_twice_is_idempotent(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    first, created_first = manager.create_or_update_assignment(manager_actor, assignment_payload(catalog))
    second, created_second = manager.create_or_update_assignment(manager_actor, assignment_payload(catalog))

    assert created_first is True
    assert created_second is False
    assert first.id == second.id
    assert db.query(Assignment).count() == 1
    assert db.query(AssignmentProduct).count() == 2
    assert db.query(VisitGoal).count() == 1


def test_create_on_existing_pair_overwrites_and_replaces_products(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    manager.create_or_update_assignment(manager_actor, assignment_payload(catalog))

    assignment, created = manager.create_or_update_assignment(
        manager_actor,
        assignment_payload(
            catalog,
            visit_days=["Friday"],
            start_time=time(14, 0),
            end_time=time(15, 0),
            product_ids=[catalog.p2_id],
            visits_per_week=0
        )
    )

    assert created is False
    assert assignment.visit_days == ["Friday"]
    assert assignment.start_time == time(14, 0)
    assert assignment.product_ids == [catalog.p2_id]
    assert assignment.visit_goal is None
    assert db.query(VisitGoal).count() == 0


def test_create_retries_as_update_when_insert_hits_unique_constraint(db, catalog, manager_actor, monkeypatch):
    """Una petición concurrente insertó el par entre la búsqueda y el insert"""
    manager = AssignmentManager(db)
    original, _ = manager.create_or_update_assignment(manager_actor, assignment_payload(catalog))
    original_id = original.id

    real_lookup = manager.find_by_natural_key
    calls = []

    def stale_lookup(representative_id, doctor_id):
        calls.append((representative_id, doctor_id))
        if len(calls) == 1:
            return None
        return real_lookup(representative_id, doctor_id)

    monkeypatch.setattr(manager, "find_by_natural_key", stale_lookup)

    assignment, created = manager.create_or_update_assignment(
        manager_actor, assignment_payload(catalog, notes="reintento", product_ids=[catalog.p1_id])
    )

    assert created is False
    assert assignment.id == original_id
    assert assignment.notes == "reintento"
    assert assignment.product_ids == [catalog.p1_id]
    assert len(calls) == 2
    assert db.query(Assignment).count() == 1


def test_create_requires_manager(db, catalog, rep_actor):
    with pytest.raises(PermissionDeniedError):
        AssignmentManager(db).create_or_update_assignment(rep_actor, assignment_payload(catalog))
    assert db.query(Assignment).count() == 0


def test_create_unknown_product_writes_nothing(db, catalog, manager_actor):
    with pytest.raises(NotFoundError):
        AssignmentManager(db).create_or_update_assignment(
            manager_actor, assignment_payload(catalog, product_ids=[catalog.p1_id, 9999])
        )
    assert db.query(Assignment).count() == 0


def test_create_rejects_window_over_limit(db, catalog, manager_actor):
    with pytest.raises(InvalidInputError):
        AssignmentManager(db).create_or_update_assignment(
            manager_actor, assignment_payload(catalog, recurring_weeks=53)
        )


def test_duplicate_product_ids_are_collapsed(db, catalog, manager_actor):
    assignment, _ = AssignmentManager(db).create_or_update_assignment(
        manager_actor, assignment_payload(catalog, product_ids=[catalog.p2_id, catalog.p2_id, catalog.p1_id])
    )
    assert assignment.product_ids == [catalog.p2_id, catalog.p1_id]


# ============================================================================
# SERVICIO - ACTUALIZAR POR ID
# ============================================================================

def test_update_only_touches_sent_fields(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    assignment, _ = manager.create_or_update_assignment(
        manager_actor, assignment_payload(catalog, notes="primera visita")
    )

    updated = manager.update_assignment(manager_actor, assignment.id, AssignmentUpdate(visit_days=["Tuesday"]))

    assert updated.visit_days == ["Tuesday"]
    assert updated.notes == "primera visita"
    assert updated.product_ids == [catalog.p1_id, catalog.p2_id]
    assert updated.visit_goal.visits_per_week == 2


def test_update_explicit_null_clears_notes(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    assignment, _ = manager.create_or_update_assignment(manager_actor, assignment_payload(catalog, notes="x"))

    updated = manager.update_assignment(manager_actor, assignment.id, AssignmentUpdate(notes=None))
    assert updated.notes is None


def test_update_replaces_products_and_removes_goal(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    assignment, _ = manager.create_or_update_assignment(manager_actor, assignment_payload(catalog))

    updated = manager.update_assignment(
        manager_actor, assignment.id, AssignmentUpdate(product_ids=[catalog.p2_id], visits_per_week=0)
    )

    assert updated.product_ids == [catalog.p2_id]
    assert updated.visit_goal is None
    assert db.query(AssignmentProduct).count() == 1


def test_update_creates_goal_when_visits_per_week_positive(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    assignment, _ = manager.create_or_update_assignment(
        manager_actor, assignment_payload(catalog, visits_per_week=None, start_date=None, recurring_weeks=None)
    )
    assert assignment.visit_goal is None

    updated = manager.update_assignment(
        manager_actor, assignment.id,
        AssignmentUpdate(visits_per_week=1, start_date=date(2025, 2, 3), recurring_weeks=4)
    )
    assert updated.visit_goal.visits_per_week == 1
    assert updated.visit_goal.start_date == date(2025, 2, 3)
    assert updated.visit_goal.recurring_weeks == 4


def test_update_window_without_goal_is_rejected(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    assignment, _ = manager.create_or_update_assignment(
        manager_actor, assignment_payload(catalog, visits_per_week=None)
    )

    with pytest.raises(InvalidInputError):
        manager.update_assignment(manager_actor, assignment.id, AssignmentUpdate(recurring_weeks=4))


def test_update_checks_merged_time_window(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    assignment, _ = manager.create_or_update_assignment(manager_actor, assignment_payload(catalog))

    with pytest.raises(InvalidInputError):
        manager.update_assignment(manager_actor, assignment.id, AssignmentUpdate(end_time=time(8, 0)))


def test_update_null_visit_days_rejected(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    assignment, _ = manager.create_or_update_assignment(manager_actor, assignment_payload(catalog))

    with pytest.raises(InvalidInputError):
        manager.update_assignment(manager_actor, assignment.id, AssignmentUpdate(visit_days=None))


def test_update_products_store_failure_keeps_previous_set(db, catalog, manager_actor, monkeypatch):
    manager = AssignmentManager(db)
    assignment, _ = manager.create_or_update_assignment(manager_actor, assignment_payload(catalog))
    assignment_id = assignment.id

    real_flush = db.flush

    def failing_flush(*args, **kwargs):
        # Falla al insertar los productos nuevos, después de borrar los anteriores
        if any(isinstance(obj, AssignmentProduct) for obj in db.new):
            raise OperationalError("INSERT INTO assignment_products", {}, Exception("disk I/O error"))
        return real_flush(*args, **kwargs)

    monkeypatch.setattr(db, "flush", failing_flush)

    with pytest.raises(DependencyError):
        manager.update_assignment(manager_actor, assignment_id, AssignmentUpdate(product_ids=[catalog.p2_id]))

    rows = db.query(AssignmentProduct.product_id).filter(
        AssignmentProduct.assignment_id == assignment_id
    ).order_by(AssignmentProduct.product_id).all()
    assert [row.product_id for row in rows] == [catalog.p1_id, catalog.p2_id]


def test_update_unknown_assignment(db, catalog, manager_actor):
    with pytest.raises(NotFoundError):
        AssignmentManager(db).update_assignment(manager_actor, 9999, AssignmentUpdate(notes="x"))


def test_delete_cascades_goal_and_products(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    assignment, _ = manager.create_or_update_assignment(manager_actor, assignment_payload(catalog))

    manager.delete_assignment(manager_actor, assignment.id)

    assert db.query(Assignment).count() == 0
    assert db.query(VisitGoal).count() == 0
    assert db.query(AssignmentProduct).count() == 0


# ============================================================================
# SERVICIO - LECTURAS
# ============================================================================

def test_available_doctors_excludes_assigned(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    manager.create_or_update_assignment(manager_actor, assignment_payload(catalog))

    available = manager.get_available_doctors(catalog.rep_id)
    assert [doctor.id for doctor in available] == [catalog.doctor2_id]
    assert len(manager.get_available_doctors(catalog.other_rep_id)) == 2


def test_stats(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    manager.create_or_update_assignment(manager_actor, assignment_payload(catalog))
    manager.create_or_update_assignment(
        manager_actor, assignment_payload(catalog, doctor_id=catalog.doctor2_id, visits_per_week=None)
    )

    assert manager.get_stats() == {
        "total_assignments": 2,
        "assignments_with_goals": 1,
        "active_representatives": 1,
        "assigned_doctors": 2,
    }


def test_weekly_calendar_respects_window(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    manager.create_or_update_assignment(
        manager_actor,
        assignment_payload(catalog, start_date=date(2024, 1, 3), recurring_weeks=2)
    )

    first_week = manager.get_weekly_calendar(date(2024, 1, 1), catalog.rep_id)
    second_week = manager.get_weekly_calendar(date(2024, 1, 8), catalog.rep_id)
    third_week = manager.get_weekly_calendar(date(2024, 1, 15), catalog.rep_id)

    # El lunes 1 está antes del inicio de la ventana
    assert first_week["total_entries"] == 1
    assert first_week["days"][2]["day"] == date(2024, 1, 3)
    assert len(first_week["days"][2]["entries"]) == 1
    assert second_week["total_entries"] == 2
    assert third_week["total_entries"] == 0
    assert first_week["week_end"] == date(2024, 1, 7)


# ============================================================================
# SERVICIO - SERIES SEMANALES
# ============================================================================

def test_weekly_series_creates_one_assignment_per_doctor(db, catalog, manager_actor):
    result = AssignmentManager(db).create_weekly_series(manager_actor, series_payload(catalog))

    assert result["created"] == 2
    assert result["failed"] == 0
    assert result["items"][0]["dates"] == [date(2024, 1, 3), date(2024, 1, 10), date(2024, 1, 17)]

    parent_id = result["parent_id"]
    head = db.get(Assignment, parent_id)
    member = db.get(Assignment, result["items"][1]["assignment_id"])

    assert head.recurring_parent_id is None
    assert member.recurring_parent_id == parent_id
    assert head.recurring_type == "weekly"
    assert member.recurring_type == "weekly"
    assert head.visit_days == ["Wednesday"]
    assert head.visit_goal.visits_per_week == 1
    assert head.visit_goal.start_date == date(2024, 1, 3)
    assert head.visit_goal.recurring_weeks == 3
    assert head.product_ids == [catalog.p1_id]


def test_weekly_series_tolerates_partial_failure(db, catalog, manager_actor):
    result = AssignmentManager(db).create_weekly_series(
        manager_actor,
        series_payload(catalog, doctor_ids=[catalog.doctor_id, 9999, catalog.doctor2_id])
    )

    assert result["created"] == 2
    assert result["failed"] == 1
    failed = [item for item in result["items"] if not item["success"]]
    assert failed[0]["doctor_id"] == 9999
    assert failed[0]["error"]
    assert db.query(Assignment).count() == 2


def test_weekly_series_negative_weeks_rejected(db, catalog, manager_actor):
    with pytest.raises(InvalidInputError):
        AssignmentManager(db).create_weekly_series(manager_actor, series_payload(catalog, recurring_weeks=-1))
    assert db.query(Assignment).count() == 0


def test_weekly_series_requires_manager(db, catalog, rep_actor):
    with pytest.raises(PermissionDeniedError):
        AssignmentManager(db).create_weekly_series(rep_actor, series_payload(catalog))


def test_update_weekly_series_only_touches_members(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    result = manager.create_weekly_series(manager_actor, series_payload(catalog))
    outsider, _ = manager.create_or_update_assignment(
        manager_actor,
        assignment_payload(catalog, representative_id=catalog.other_rep_id, notes="fuera de la serie")
    )
    outsider_id = outsider.id

    members = manager.update_weekly_series(
        manager_actor, result["parent_id"], WeeklySeriesUpdate(notes="actualizada", recurring_weeks=5)
    )

    assert len(members) == 2
    assert all(member.notes == "actualizada" for member in members)
    assert all(member.visit_goal.recurring_weeks == 5 for member in members)
    assert db.get(Assignment, outsider_id).notes == "fuera de la serie"


def test_delete_weekly_series_removes_exactly_the_series(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    result = manager.create_weekly_series(manager_actor, series_payload(catalog))
    outsider, _ = manager.create_or_update_assignment(
        manager_actor, assignment_payload(catalog, representative_id=catalog.other_rep_id)
    )
    outsider_id = outsider.id

    deleted = manager.delete_weekly_series(manager_actor, result["parent_id"])

    assert deleted == 2
    assert [a.id for a in db.query(Assignment).all()] == [outsider_id]


def test_delete_unknown_series(db, catalog, manager_actor):
    with pytest.raises(NotFoundError):
        AssignmentManager(db).delete_weekly_series(manager_actor, 9999)


def test_recurring_series_heads(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    result = manager.create_weekly_series(manager_actor, series_payload(catalog))

    heads = manager.get_recurring_series()
    assert [(head.id, count) for head, count in heads] == [(result["parent_id"], 2)]


def test_new_series_reusing_head_leaves_previous_members_alone(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    first = manager.create_weekly_series(manager_actor, series_payload(catalog))
    second = manager.create_weekly_series(manager_actor, series_payload(catalog, doctor_ids=[catalog.doctor_id]))
    left_behind_id = first["items"][1]["assignment_id"]

    # El médico D se reutiliza; D2 queda como cabeza de lo que resta de la primera serie
    assert second["parent_id"] == first["parent_id"]
    assert [a.id for a in manager.get_series_members(second["parent_id"])] == [second["parent_id"]]
    assert db.get(Assignment, left_behind_id).recurring_parent_id is None

    deleted = manager.delete_weekly_series(manager_actor, second["parent_id"])

    assert deleted == 1
    assert [a.id for a in db.query(Assignment).all()] == [left_behind_id]


def test_new_series_turning_old_head_into_child(db, catalog, manager_actor):
    doctor3 = Doctor(first_name="Elvin", last_name="Huseynov", category="C")
    db.add(doctor3)
    db.commit()

    manager = AssignmentManager(db)
    first = manager.create_weekly_series(
        manager_actor,
        series_payload(catalog, doctor_ids=[catalog.doctor_id, catalog.doctor2_id, doctor3.id])
    )
    old_head_id = first["parent_id"]
    remaining_id = first["items"][2]["assignment_id"]

    # La cabeza de la primera serie pasa a ser hija de la nueva
    second = manager.create_weekly_series(
        manager_actor, series_payload(catalog, doctor_ids=[catalog.doctor2_id, catalog.doctor_id])
    )

    assert second["parent_id"] == first["items"][1]["assignment_id"]
    assert db.get(Assignment, old_head_id).recurring_parent_id == second["parent_id"]
    assert db.get(Assignment, remaining_id).recurring_parent_id is None

    deleted = manager.delete_weekly_series(manager_actor, second["parent_id"])

    assert deleted == 2
    assert [a.id for a in db.query(Assignment).all()] == [remaining_id]


def test_update_weekly_series_window_creates_missing_goal(db, catalog, manager_actor):
    manager = AssignmentManager(db)
    result = manager.create_weekly_series(manager_actor, series_payload(catalog))
    member_id = result["items"][1]["assignment_id"]
    manager.update_assignment(manager_actor, member_id, AssignmentUpdate(visits_per_week=0))
    assert db.get(Assignment, member_id).visit_goal is None

    manager.update_weekly_series(manager_actor, result["parent_id"], WeeklySeriesUpdate(recurring_weeks=4))

    goal = db.get(Assignment, member_id).visit_goal
    assert goal.visits_per_week == 1
    assert goal.recurring_weeks == 4
    assert goal.start_date.weekday() == 2


# ============================================================================
# API
# ============================================================================

def assignment_json(catalog, **overrides):
    data = {
        "representative_id": catalog.rep_id,
        "doctor_id": catalog.doctor_id,
        "visit_days": ["Monday", "Wednesday"],
        "start_time": "09:00:00",
        "end_time": "11:00:00",
        "product_ids": [catalog.p1_id, catalog.p2_id],
        "visits_per_week": 2,
        "start_date": "2025-01-06",
        "recurring_weeks": 8,
    }
    data.update(overrides)
    return data


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "MS-VISITS-PY - Visit Assignment Service"


def test_api_create_then_upsert(client, catalog, manager_headers, sent_notifications):
    first = client.post("/api/v1/visits/assignments", json=assignment_json(catalog), headers=manager_headers)
    assert first.status_code == 201
    data = first.json()
    assert data["representative"]["full_name"] == "Aylin Mammadova"
    assert data["doctor"]["specialization_name"] == "Cardiology"
    assert [p["id"] for p in data["products"]] == [catalog.p1_id, catalog.p2_id]
    assert data["visit_goal"]["window_end"] == "2025-02-24"

    second = client.post(
        "/api/v1/visits/assignments",
        json=assignment_json(catalog, product_ids=[catalog.p2_id]),
        headers=manager_headers
    )
    assert second.status_code == 200
    assert second.json()["id"] == data["id"]
    assert [p["id"] for p in second.json()["products"]] == [catalog.p2_id]

    # Solo la creación notifica al representante
    assert [n["type"] for n in sent_notifications] == ["assignment_created"]
    assert sent_notifications[0]["recipient_id"] == 10


def test_api_create_missing_representative_is_rejected(client, catalog, manager_headers):
    payload = assignment_json(catalog)
    del payload["representative_id"]

    response = client.post("/api/v1/visits/assignments", json=payload, headers=manager_headers)
    assert response.status_code == 422

    listing = client.get("/api/v1/visits/assignments", headers=manager_headers)
    assert listing.json() == []


def test_api_requires_token(client, catalog):
    response = client.get("/api/v1/visits/assignments")
    assert response.status_code == 401


def test_api_representative_cannot_create(client, catalog, rep_headers):
    response = client.post("/api/v1/visits/assignments", json=assignment_json(catalog), headers=rep_headers)
    assert response.status_code == 403


def test_api_representative_sees_only_own(client, catalog, manager_headers, rep_headers, other_rep_headers):
    own = client.post("/api/v1/visits/assignments", json=assignment_json(catalog), headers=manager_headers)
    client.post(
        "/api/v1/visits/assignments",
        json=assignment_json(catalog, representative_id=catalog.other_rep_id, product_ids=[]),
        headers=manager_headers
    )

    listing = client.get("/api/v1/visits/assignments", headers=rep_headers)
    assert listing.status_code == 200
    assert [a["id"] for a in listing.json()] == [own.json()["id"]]

    forbidden = client.get(f"/api/v1/visits/assignments/{own.json()['id']}", headers=other_rep_headers)
    assert forbidden.status_code == 403


def test_api_update_and_delete(client, catalog, manager_headers):
    created = client.post("/api/v1/visits/assignments", json=assignment_json(catalog, notes="x"), headers=manager_headers)
    assignment_id = created.json()["id"]

    updated = client.put(
        f"/api/v1/visits/assignments/{assignment_id}",
        json={"notes": None, "visits_per_week": 0},
        headers=manager_headers
    )
    assert updated.status_code == 200
    assert updated.json()["notes"] is None
    assert updated.json()["visit_goal"] is None
    assert updated.json()["visit_days"] == ["Monday", "Wednesday"]

    deleted = client.delete(f"/api/v1/visits/assignments/{assignment_id}", headers=manager_headers)
    assert deleted.status_code == 204

    missing = client.get(f"/api/v1/visits/assignments/{assignment_id}", headers=manager_headers)
    assert missing.status_code == 404


def test_api_invalid_visit_day(client, catalog, manager_headers):
    response = client.post(
        "/api/v1/visits/assignments",
        json=assignment_json(catalog, visit_days=["Someday"]),
        headers=manager_headers
    )
    assert response.status_code == 400


def test_api_stats_and_calendar(client, catalog, manager_headers):
    client.post("/api/v1/visits/assignments", json=assignment_json(catalog), headers=manager_headers)

    stats = client.get("/api/v1/visits/assignments/stats", headers=manager_headers)
    assert stats.json()["total_assignments"] == 1

    calendar = client.get(
        "/api/v1/visits/assignments/calendar",
        params={"week_start": "2025-01-06"},
        headers=manager_headers
    )
    assert calendar.status_code == 200
    data = calendar.json()
    assert data["total_entries"] == 2
    assert data["days"][0]["weekday"] == "Monday"
    assert data["days"][0]["entries"][0]["doctor_name"] == "Rashad Aliyev"


def test_api_available_doctors(client, catalog, manager_headers):
    client.post("/api/v1/visits/assignments", json=assignment_json(catalog), headers=manager_headers)

    response = client.get(
        "/api/v1/visits/doctors/available",
        params={"representative_id": catalog.rep_id},
        headers=manager_headers
    )
    assert response.status_code == 200
    assert [d["id"] for d in response.json()] == [catalog.doctor2_id]


def test_api_weekly_series_lifecycle(client, catalog, manager_headers):
    created = client.post(
        "/api/v1/visits/weekly-assignments",
        json={
            "representative_id": catalog.rep_id,
            "doctor_ids": [catalog.doctor_id, 9999],
            "product_ids": [catalog.p1_id],
            "start_time": "09:00:00",
            "end_time": "10:00:00",
            "weekday": 2,
            "recurring_weeks": 3,
            "start_date": "2024-01-01"
        },
        headers=manager_headers
    )
    assert created.status_code == 201
    result = created.json()
    assert result["created"] == 1
    assert result["failed"] == 1
    assert result["items"][0]["dates"] == ["2024-01-03", "2024-01-10", "2024-01-17"]
    parent_id = result["parent_id"]

    heads = client.get("/api/v1/visits/weekly-assignments", headers=manager_headers)
    assert [(h["id"], h["member_count"]) for h in heads.json()] == [(parent_id, 1)]

    updated = client.put(
        f"/api/v1/visits/weekly-assignments/{parent_id}",
        json={"start_time": "08:00:00"},
        headers=manager_headers
    )
    assert updated.status_code == 200
    assert updated.json()[0]["start_time"] == "08:00:00"

    deleted = client.delete(f"/api/v1/visits/weekly-assignments/{parent_id}", headers=manager_headers)
    assert deleted.status_code == 200
    assert deleted.json()["deleted"] == 1


def test_api_weekly_series_negative_weeks(client, catalog, manager_headers):
    response = client.post(
        "/api/v1/visits/weekly-assignments",
        json={
            "representative_id": catalog.rep_id,
            "doctor_ids": [catalog.doctor_id],
            "start_time": "09:00:00",
            "end_time": "10:00:00",
            "weekday": 2,
            "recurring_weeks": -2,
            "start_date": "2024-01-01"
        },
        headers=manager_headers
    )
    assert response.status_code == 400

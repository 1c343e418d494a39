from datetime import datetime, timezone
from pathlib import Path

import pytest

from src.fieldroute.models.domain import Coordinates
from src.fieldroute.persistence import database
from src.fieldroute.persistence.filesystem import FileStorage
from src.fieldroute.services.routing.models import Route, Stop


def _route() -> Route:
    return Route(
        id="route_abc",
        date="2026-10-20",
        stops=[
            Stop(
                id="stop_1",
                claim_id="claim-B",
                address="9 Lakeview Ave",
                coordinates=Coordinates(33.75, -84.39),
                order=0,
                arrival_time=datetime(2026, 10, 20, 9, 30, tzinfo=timezone.utc),
                departure_time=datetime(2026, 10, 20, 10, 0, tzinfo=timezone.utc),
            ),
            Stop(id="stop_0", claim_id="claim-A", address="Unknown", coordinates=None, order=1),
        ],
        total_distance_km=12.5,
        estimated_duration_min=79,
        optimized=True,
    )


def test_file_storage_creates_run_directory(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="route_test")

    assert run_dir.exists()
    assert run_dir.is_dir()
    assert run_dir.parent == tmp_path / "outputs"


def test_file_storage_writes_json_and_csv(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="route_test")

    storage.write_json(run_dir / "summary.json", {"hello": "world"})
    storage.write_csv(run_dir / "stops.csv", "a,b\n1,2\n")

    assert (run_dir / "summary.json").read_text(encoding="utf-8") == '{\n  "hello": "world"\n}'
    assert (run_dir / "stops.csv").read_text(encoding="utf-8") == "a,b\n1,2\n"


def test_route_record_shape():
    record = database.route_to_record(_route())

    assert record["date"] == "2026-10-20"
    assert record["optimized_order"] == ["claim-B", "claim-A"]
    assert record["total_distance_km"] == 12.5
    assert record["estimated_duration_minutes"] == 79
    stops = record["metadata"]["stops"]
    assert [stop["claim_id"] for stop in stops] == ["claim-B", "claim-A"]
    assert stops[0]["coordinates"] == {"latitude": 33.75, "longitude": -84.39}
    assert stops[0]["arrival_time"] == "2026-10-20T09:30:00+00:00"
    assert stops[1]["coordinates"] is None


def test_save_route_returns_database_id(monkeypatch, fake_supabase):
    monkeypatch.setattr(database, "get_supabase_client", lambda: fake_supabase)

    route_id = database.save_route(_route())

    assert route_id == "routes-1"
    stored = fake_supabase.tables["routes"][0]
    assert stored["optimized_order"] == ["claim-B", "claim-A"]


def test_save_route_propagates_store_errors(monkeypatch, fake_supabase):
    failure = RuntimeError("insert rejected")
    fake_supabase.error = failure
    monkeypatch.setattr(database, "get_supabase_client", lambda: fake_supabase)

    with pytest.raises(RuntimeError) as excinfo:
        database.save_route(_route())
    assert excinfo.value is failure


def test_save_route_requires_configured_database(monkeypatch):
    monkeypatch.setattr(database, "get_supabase_client", lambda: None)

    with pytest.raises(RuntimeError, match="not configured"):
        database.save_route(_route())


def test_saved_route_round_trips_through_database(monkeypatch, fake_supabase):
    monkeypatch.setattr(database, "get_supabase_client", lambda: fake_supabase)
    route_id = database.save_route(_route())

    record = database.get_route_from_database(route_id)
    restored = database.route_from_record(record)

    assert restored.id == route_id
    assert [stop.id for stop in restored.stops] == ["stop_1", "stop_0"]
    assert restored.stops[0].coordinates == Coordinates(33.75, -84.39)
    assert restored.stops[0].arrival_time == datetime(2026, 10, 20, 9, 30, tzinfo=timezone.utc)
    assert restored.optimized is True
    assert database.get_routes_from_database(route_date="2026-10-20") == [record]
    assert database.get_routes_from_database(route_date="2026-10-21") == []
    assert database.get_route_from_database("missing") is None


def test_run_directory_prefix_cannot_leave_outputs(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path / "data")

    with pytest.raises(ValueError):
        storage.make_run_directory(prefix="../../escaped/pwn")

    assert not (tmp_path / "escaped").exists()
    assert list((tmp_path / "data" / "outputs").iterdir()) == []


def test_route_from_record_requires_a_date():
    with pytest.raises(ValueError, match="no date"):
        database.route_from_record({"id": "db-1", "metadata": {"stops": []}})

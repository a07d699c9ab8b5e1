import threading

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from conftest import make_game
from league_tracker.errors import StoreError
from league_tracker.store import MemorySnapshotStore, SqlSnapshotStore


@pytest.fixture(params=["memory", "sql"])
def store(request, memory_store, sql_store):
    return memory_store if request.param == "memory" else sql_store


def ids(games):
    return [game.game_id for game in games]


def test_new_store_reads_empty(store):
    assert store.read_all() == []
    assert store.count() == 0
    assert store.is_empty()


def test_read_all_orders_by_date_then_time(store):
    store.replace_all(
        [
            make_game("late", "A", "B", date="2025-06-08", time="18:00"),
            make_game("early-evening", "C", "D", date="2025-06-01", time="18:00"),
            make_game("early-noon", "E", "F", date="2025-06-01", time="12:00"),
        ]
    )
    assert ids(store.read_all()) == ["early-noon", "early-evening", "late"]


def test_replace_discards_previous_set(store):
    store.replace_all([make_game("g1", "A", "B"), make_game("g2", "C", "D")])
    store.replace_all([make_game("g3", "E", "F")])
    assert ids(store.read_all()) == ["g3"]


def test_replace_with_empty_set_clears(store):
    store.replace_all([make_game("g1", "A", "B")])
    assert store.replace_all([]) == 0
    assert store.is_empty()


def test_replace_is_idempotent(store):
    games = [make_game("g1", "A", "B", 10, 3), make_game("g2", "C", "D", date="2025-06-02")]
    store.replace_all(games)
    first = store.read_all()
    store.replace_all(games)
    assert store.read_all() == first == games


def test_one_record_per_game_id(store):
    stored = store.replace_all([make_game("g1", "A", "B", 0, 0), make_game("g1", "A", "B", 14, 7)])
    games = store.read_all()
    assert stored == 1
    assert len(games) == 1
    assert (games[0].home_score, games[0].away_score) == (14, 7)


def test_round_trip_keeps_all_fields(sql_store):
    game = make_game("g1", "Vienna Vikings", "Rhein Fire", 24, 21, week=4)
    sql_store.replace_all([game])
    assert sql_store.read_all() == [game]


def test_failed_replace_keeps_previous_snapshot(sql_store, monkeypatch):
    sql_store.replace_all([make_game("g1", "A", "B"), make_game("g2", "C", "D")])

    def broken_add_all(self, instances):
        raise OperationalError("INSERT INTO schedule", {}, Exception("disk I/O error"))

    monkeypatch.setattr(Session, "add_all", broken_add_all)

    with pytest.raises(StoreError):
        sql_store.replace_all([make_game("g3", "E", "F")])

    monkeypatch.undo()
    assert ids(sql_store.read_all()) == ["g1", "g2"]


def test_data_survives_reopening_the_database(tmp_path):
    url = f"sqlite:///{tmp_path / 'football.db'}"
    store = SqlSnapshotStore.from_url(url)
    store.replace_all([make_game("g1", "A", "B", 3, 0)])
    store.close()

    reopened = SqlSnapshotStore.from_url(url)
    try:
        assert ids(reopened.read_all()) == ["g1"]
    finally:
        reopened.close()


def test_memory_store_accepts_initial_records():
    store = MemorySnapshotStore([make_game("g1", "A", "B")])
    assert store.count() == 1


def test_concurrent_readers_never_see_partial_sets(store):
    old = [make_game(f"old-{i}", "A", "B", date=f"2025-06-0{i + 1}") for i in range(3)]
    new = [make_game(f"new-{i}", "C", "D", date=f"2025-07-0{i + 1}") for i in range(5)]
    allowed = {tuple(ids(old)), tuple(ids(new))}
    store.replace_all(old)

    seen = []
    readers_started = threading.Barrier(4)
    stop = threading.Event()

    def writer():
        readers_started.wait(5)
        i = 0
        while (len(seen) < 200 or i < 50) and i < 100000:
            store.replace_all(new if i % 2 == 0 else old)
            i += 1
        stop.set()

    def reader():
        readers_started.wait(5)
        while not stop.is_set():
            seen.append(tuple(ids(store.read_all())))

    threads = [threading.Thread(target=reader) for _ in range(3)] + [threading.Thread(target=writer)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert len(seen) >= 200
    assert set(seen) <= allowed


def test_concurrent_writers_leave_one_complete_set(store):
    sets = [[make_game(f"w{n}-{i}", "A", "B") for i in range(4)] for n in range(6)]
    threads = [threading.Thread(target=store.replace_all, args=(games,)) for games in sets]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    final = ids(store.read_all())
    assert final in [ids(sorted(games, key=lambda g: g.sort_key)) for games in sets]

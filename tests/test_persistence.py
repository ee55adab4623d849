import json

import pytest

from hackathon_store.models import EventState, UserRole
from hackathon_store.storage import InMemoryStorage, JSONFileStorage, StorageKeys
from hackathon_store.store import EventStore


def snapshot(storage):
    return {key: storage.get(key) for key in storage.keys()}


def reopen(storage, defaults, clock, **kwargs):
    kwargs.setdefault("seed_demo", False)
    return EventStore(storage=storage, event_defaults=defaults, clock=clock, **kwargs)


def test_fresh_store_writes_nothing_until_mutated(store, storage):
    assert storage.keys() == []
    assert store.get_current_state() == EventState.DRAFT
    assert store.get_config().name == "Test Hack"


def test_every_mutation_rewrites_all_keys(store, storage, make_user):
    make_user()
    assert sorted(storage.keys()) == sorted(StorageKeys.ALL)


def test_state_survives_reload(store, storage, defaults, clock, advance, make_user, make_team):
    user = make_user()
    team = make_team("Persisted", size=2)
    advance(EventState.REGISTRATION_OPEN)
    store.login(user.email).unwrap()

    reloaded = reopen(storage, defaults, clock)

    assert reloaded.get_config() == store.get_config()
    assert reloaded.get_config().state_history[0].state == EventState.DRAFT
    assert reloaded.get_team_by_id(team.id) == team
    assert reloaded.get_all_users() == store.get_all_users()
    assert reloaded.get_current_user().id == user.id


def test_logout_survives_reload(store, storage, defaults, clock, make_user):
    make_user()
    store.logout()
    assert reopen(storage, defaults, clock).get_current_user() is None


@pytest.mark.parametrize("raw", ["not json", '[{"id": 1}]', '{"unexpected": "shape"}'])
def test_corrupt_key_falls_back_to_default(store, storage, defaults, clock, make_user, make_team, raw):
    make_user()
    make_team("Survivor")
    storage.set(StorageKeys.USERS, raw)

    reloaded = reopen(storage, defaults, clock)

    assert reloaded.get_all_users() == []
    assert [t.name for t in reloaded.get_all_teams()] == ["Survivor"]


def test_corrupt_config_gets_fresh_draft(storage, defaults, clock):
    storage.set(StorageKeys.CONFIG, "{")
    store = reopen(storage, defaults, clock)
    assert store.get_current_state() == EventState.DRAFT
    assert store.get_config().state_history == []


def test_failed_operation_leaves_storage_untouched(store, storage, make_user):
    user = make_user()
    before = snapshot(storage)

    assert not store.register({"email": user.email, "name": "Dup"})
    assert not store.create_team("   ", user.id)
    assert not store.transition(EventState.RESULTS_PUBLISHED, "admin")
    assert not store.join_team("NOPE-0000", user.id)

    assert snapshot(storage) == before


def test_json_file_storage_roundtrip(tmp_path):
    backend = JSONFileStorage(str(tmp_path / "data"))

    assert backend.get("missing") is None
    backend.set("alpha", json.dumps({"a": 1}))
    backend.save_json("beta", [1, 2])

    assert backend.keys() == ["alpha", "beta"]
    assert backend.load_json("alpha", dict) == {"a": 1}
    assert (tmp_path / "data" / "beta.json").read_text(encoding="utf-8") == "[1, 2]"

    backend.remove("alpha")
    backend.remove("alpha")
    assert backend.keys() == ["beta"]


def test_store_reloads_from_files(tmp_path, defaults, clock):
    data_dir = str(tmp_path)
    store = reopen(JSONFileStorage(data_dir), defaults, clock)
    user = store.register({"email": "file@example.com", "name": "File User"}).unwrap()
    store.transition(EventState.REGISTRATION_OPEN, "admin").unwrap()

    reloaded = reopen(JSONFileStorage(data_dir), defaults, clock)

    assert reloaded.get_current_state() == EventState.REGISTRATION_OPEN
    assert reloaded.get_user_by_id(user.id) == user
    assert reloaded.get_current_user().id == user.id


def test_in_memory_initial_contents_are_copied():
    initial = {"k": "v"}
    backend = InMemoryStorage(initial)
    backend.set("k", "changed")
    assert initial == {"k": "v"}


# ----- demo data -----

def test_demo_seed(defaults, clock):
    store = reopen(InMemoryStorage(), defaults, clock, seed_demo=True)

    users = store.get_all_users()
    admins = [u for u in users if u.role == UserRole.ADMIN]
    judges = store.get_judges()
    teams = store.get_all_teams()

    assert [a.email for a in admins] == ["admin@glhackathon.com"]
    assert [j.id for j in judges] == [f"judge-{i}" for i in range(1, 6)]
    assert store.get_user_by_email("drsharma@glhackathon.com").name == "Dr. Sharma"
    assert [t.id for t in teams] == [f"team-{i}" for i in range(1, 7)]
    assert len(store.get_participants()) == 19

    code_ninjas = store.get_team_by_id("team-1")
    assert code_ninjas.name == "Code Ninjas"
    assert code_ninjas.leader_id == "user-0-0"
    assert code_ninjas.invite_code.startswith("CODEN-")
    assert [m.name for m in store.get_team_members("team-1")] == ["Anish K.", "Priya M.", "Rahul S."]
    assert store.get_user_by_id("user-0-2").skills == ["React", "Python", "Node.js"]
    assert store.get_current_state() == EventState.DRAFT


def test_demo_seed_skipped_when_users_exist(storage, defaults, clock, store, make_user):
    make_user()
    reloaded = reopen(storage, defaults, clock, seed_demo=True)
    assert len(reloaded.get_all_users()) == 1


def test_reset_reseeds_by_default(store, storage, advance, make_user):
    make_user()
    advance(EventState.REGISTRATION_OPEN)

    store.reset_all_data()

    assert store.get_current_state() == EventState.DRAFT
    assert store.get_current_user() is None
    assert len(store.get_judges()) == 5
    assert len(store.get_all_teams()) == 6
    assert sorted(storage.keys()) == sorted(StorageKeys.ALL)


def test_reset_without_demo(store, advance, make_team):
    make_team()
    advance(EventState.REGISTRATION_OPEN)

    store.reset_all_data(seed_demo=False)

    assert store.get_all_users() == []
    assert store.get_all_teams() == []
    assert store.get_config().state_history == []
    assert store.get_config().name == "Test Hack"

"""Tests for the console realm controller."""

from datetime import timedelta

import pytest

from empire_sim.config import SimulationConfig
from empire_sim.main import Realm, handle_advance


@pytest.fixture
def realm(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    realm = Realm(config=SimulationConfig(), seed=1)
    realm.seed_demo()
    yield realm
    realm.close()


class TestRealm:

    def test_demo_realm(self, realm):
        names = sorted(p.name for p in realm.provinces())
        assert names == ["Highmarch", "Saltmere", "Thornwood"]
        assert realm.run(realm.store.list_province_ids(user_id="player"))

    def test_fuzzy_match(self, realm):
        assert realm.fuzzy_match_province("highmarch").name == "Highmarch"
        assert realm.fuzzy_match_province("Saltmer").name == "Saltmere"
        assert realm.fuzzy_match_province("qqqqqqq") is None

    def test_save_and_load(self, realm, tmp_path):
        province = realm.fuzzy_match_province("Thornwood")
        assert realm.save("before")
        assert (tmp_path / "saves" / "before.json").exists()

        realm.run(realm.store.adjust_resources(province.id, {"gold": -400}, reason="spent"))
        realm.clock.advance(timedelta(hours=3))
        saved_at = realm.clock.now() - timedelta(hours=3)

        assert realm.load("before")
        assert realm.fuzzy_match_province("Thornwood").resource("gold") == 400
        assert realm.clock.now() == saved_at
        assert realm.scheduler.store is realm.store
        assert realm.governors.store is realm.store

    def test_missing_save(self, realm):
        assert not realm.load("nowhere")

    def test_list_saves(self, realm):
        assert realm.list_saves() == []
        realm.save("one")
        realm.save("two")
        assert sorted(realm.list_saves()) == ["one", "two"]

    def test_advance(self, realm):
        start = realm.clock.now()
        handle_advance(realm, ["advance", "45"])
        assert realm.clock.now() == start + timedelta(minutes=45)
        handle_advance(realm, ["advance", "soon"])
        handle_advance(realm, ["advance", "0"])
        assert realm.clock.now() == start + timedelta(minutes=45)

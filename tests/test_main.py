import json

import pytest

from inventory_monitor import main as monitor
from inventory_monitor.ledger import load_ledger, save_ledger
from inventory_monitor.scraper import fetch_listings

from conftest import FakeSession, make_item, make_listing, make_response

LIMIT = 28000


def _cycle(seen, listings):
    sent = []
    monitor.run_cycle(seen, fetch=lambda: list(listings), notify=sent.append, price_limit=LIMIT, max_entries=0)
    return sent


def test_scenario_a_new_listing():
    seen = {}
    sent = _cycle(seen, [make_listing("V1", 25000)])
    assert [l.vin for l in sent] == ["V1"]
    assert seen == {"V1": 25000}


def test_scenario_b_unchanged_listing():
    seen = {"V1": 25000}
    assert _cycle(seen, [make_listing("V1", 25000)]) == []
    assert seen == {"V1": 25000}


def test_scenario_c_price_drop():
    seen = {"V1": 25000}
    sent = _cycle(seen, [make_listing("V1", 24000)])
    assert len(sent) == 1
    assert seen == {"V1": 24000}


def test_over_limit_is_ignored():
    seen = {}
    assert _cycle(seen, [make_listing("V1", 28000), make_listing("V2", 35000)]) == []
    assert seen == {}


def test_scenario_e_malformed_json():
    seen = {"V1": 25000}
    session = FakeSession(make_response(200, b'{"results": [ {"VIN": '))
    sent = []
    monitor.run_cycle(
        seen,
        fetch=lambda: fetch_listings("https://inventory.example", session=session),
        notify=sent.append,
        price_limit=LIMIT,
    )
    assert sent == []
    assert seen == {"V1": 25000}


def test_run_cycle_default_notifier_posts(monkeypatch):
    posted = []
    monkeypatch.setattr(monitor.notifier, "send_listing_alert",
                        lambda listing, url=None: posted.append((listing.vin, url)))
    monkeypatch.setattr(monitor.config, "NTFY_URL", "https://ntfy.example/t")
    seen = {}
    monitor.run_cycle(seen, fetch=lambda: [make_listing("V9", 1000)], price_limit=LIMIT)
    assert posted == [("V9", "https://ntfy.example/t")]


def test_run_forever_persists_between_cycles(tmp_path):
    path = tmp_path / "seen.json"
    save_ledger({"V0": 20000}, path)
    batches = [
        [make_listing("V0", 20000), make_listing("V1", 25000)],
        [make_listing("V1", 25000), make_listing("V2", 26000)],
    ]
    sent, sleeps = [], []

    result = monitor.run_forever(
        path,
        interval_minutes=10,
        max_cycles=2,
        sleep=sleeps.append,
        fetch=lambda: batches.pop(0),
        notify=lambda l: sent.append(l.vin),
        price_limit=LIMIT,
    )

    assert sent == ["V1", "V2"]
    assert sleeps == [600]
    assert result == {"V0": 20000, "V1": 25000, "V2": 26000}
    assert load_ledger(path) == result


def test_run_forever_survives_cycle_errors(tmp_path):
    path = tmp_path / "seen.json"
    calls = {"n": 0}

    def flaky_fetch():
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("unexpected")
        return [make_listing("V1", 25000)]

    result = monitor.run_forever(
        path, interval_minutes=0, max_cycles=2, sleep=lambda s: None,
        fetch=flaky_fetch, notify=lambda l: None, price_limit=LIMIT,
    )
    assert calls["n"] == 2
    assert result == {"V1": 25000}
    assert json.loads(path.read_text(encoding="utf-8")) == {"V1": 25000}


def test_run_forever_saves_on_interrupt(tmp_path):
    path = tmp_path / "seen.json"

    def interrupt(seconds):
        raise KeyboardInterrupt

    result = monitor.run_forever(
        path, interval_minutes=10, sleep=interrupt,
        fetch=lambda: [make_listing("V1", 25000)], notify=lambda l: None, price_limit=LIMIT,
    )
    assert result == {"V1": 25000}
    assert load_ledger(path) == {"V1": 25000}


def test_run_forever_starts_fresh_from_corrupt_ledger(tmp_path):
    path = tmp_path / "seen.json"
    path.write_text("garbage", encoding="utf-8")
    sent = []
    monitor.run_forever(
        path, max_cycles=1, sleep=lambda s: None,
        fetch=lambda: [make_listing("V1", 25000)], notify=lambda l: sent.append(l.vin), price_limit=LIMIT,
    )
    assert sent == ["V1"]
    assert load_ledger(path) == {"V1": 25000}


def test_main_run_once(monkeypatch):
    captured = {}
    monkeypatch.setattr(monitor.config, "RUN_ONCE", True)
    monkeypatch.setattr(monitor, "run_forever", lambda **kw: captured.update(kw))
    monkeypatch.setattr(monitor.signal, "signal", lambda *a: None)
    assert monitor.main() == 0
    assert captured == {"max_cycles": 1}


def test_validate_rejects_missing_ntfy_url(monkeypatch):
    monkeypatch.setattr(monitor.config, "NTFY_URL", "")
    with pytest.raises(RuntimeError):
        monitor.config.validate()

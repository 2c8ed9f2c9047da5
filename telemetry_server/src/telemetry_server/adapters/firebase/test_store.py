from unittest.mock import Mock, patch

import pytest
import requests

from telemetry_server.adapters.firebase.store import FirebaseRealtimeStore


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def stream_session():
    return Mock(spec=requests.Session)


@pytest.fixture
def store(session, stream_session):
    return FirebaseRealtimeStore(
        "http://db.example/",
        auth_token="tok",
        timeout=5.0,
        session=session,
        session_factory=lambda: stream_session,
    )


def test_shallow_get(store, session):
    session.get.return_value.json.return_value = {"dev-1": True}

    assert store.get("sensors", shallow=True) == {"dev-1": True}
    session.get.assert_called_once_with(
        "http://db.example/sensors.json",
        params={"shallow": "true", "auth": "tok"},
        timeout=5.0,
    )


def test_query_last_sends_ordered_limit(store, session):
    session.get.return_value.json.return_value = {"k": {"timestamp": 1}}

    assert store.query_last("sensors/dev-1", "timestamp", 500) == {"k": {"timestamp": 1}}
    _, kwargs = session.get.call_args
    assert kwargs["params"] == {"orderBy": '"timestamp"', "limitToLast": "500", "auth": "tok"}


def test_query_last_absent_and_non_map_nodes(store, session):
    session.get.return_value.json.return_value = None
    assert store.query_last("sensors/x", "timestamp", 5) is None

    session.get.return_value.json.return_value = [1, 2]
    assert store.query_last("sensors/x", "timestamp", 5) == {}


def test_http_errors_propagate(store, session):
    session.get.return_value.raise_for_status.side_effect = requests.HTTPError("401")
    with pytest.raises(requests.HTTPError):
        store.get("sensors")


def test_writes_use_put_patch_post(store, session):
    session.post.return_value.json.return_value = {"name": "-Nabc"}

    store.set("admin/maintenanceSettings", {"dashboard": True})
    store.update("admin/maintenanceHistory/k", {"endTime": 5})
    key = store.push("admin/maintenanceHistory", {"startTime": 1})

    assert key == "-Nabc"
    session.put.assert_called_once_with(
        "http://db.example/admin/maintenanceSettings.json",
        params={"auth": "tok"},
        json={"dashboard": True},
        timeout=5.0,
    )
    assert session.patch.call_args.kwargs["json"] == {"endTime": 5}
    assert session.post.call_args.args[0] == "http://db.example/admin/maintenanceHistory.json"


def test_subscribe_requeries_window_on_its_own_session(store, session, stream_session):
    stream_session.get.return_value.json.return_value = {"k": {"aqi": 1}}
    changes = []

    with patch("telemetry_server.adapters.firebase.store.StreamListener") as listener_cls:
        unsubscribe = store.subscribe("sensors/dev-1", "timestamp", 10, changes.append)

        listener_cls.return_value.start.assert_called_once()
        args, kwargs = listener_cls.call_args
        assert args[0] is stream_session
        assert args[1] == "http://db.example/sensors/dev-1.json"
        assert args[2]["limitToLast"] == "10"
        on_event = args[3]

        on_event("put", {"path": "/", "data": None})
        assert changes == [{"k": {"aqi": 1}}]
        session.get.assert_not_called()

        stream_session.get.side_effect = requests.ConnectionError("gone")
        on_event("patch", {})
        assert len(changes) == 1

        unsubscribe()
        listener_cls.return_value.stop.assert_called_once()
        stream_session.close.assert_called_once()
        session.close.assert_not_called()

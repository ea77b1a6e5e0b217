import json

import pytest
from fastapi.testclient import TestClient

from status_overview.main import create_app
from status_overview.overview_config import (
    INVALID_LINK_MESSAGE,
    InvalidOverviewLinkError,
    OverviewConfigStore,
    is_acceptable_link,
    is_valid_url,
    link_root,
)
from status_overview.security import PermissionEvaluator
from status_overview.snapshot_cache import SnapshotCache

ADMIN_HEADERS = {"Authorization": "Bearer admin-token"}
READ_HEADERS = {"Authorization": "Bearer read-token"}


class UnusedRuntime:
    async def list_nodes(self, context):
        raise AssertionError("Runtime should not be queried by config endpoints")

    async def to_computer(self, node, context):
        raise AssertionError("Runtime should not be queried by config endpoints")

    async def get_controller(self, context):
        raise AssertionError("Runtime should not be queried by config endpoints")

    async def list_plugins(self, context):
        raise AssertionError("Runtime should not be queried by config endpoints")

    async def get_version(self, context):
        raise AssertionError("Runtime should not be queried by config endpoints")


def _client(store: OverviewConfigStore) -> TestClient:
    app = create_app(
        runtime=UnusedRuntime(),
        permissions=PermissionEvaluator(read_token="read-token", admin_token="admin-token"),
        overview_config=store,
        snapshot_cache=SnapshotCache(),
    )
    return TestClient(app)


@pytest.mark.parametrize(
    "url",
    [
        "https://abc.de",
        "https://abc.de/x",
        "http://localhost:8080/status?view=all",
        "https://user@dash.example.com/path",
    ],
)
def test_valid_urls(url):
    assert is_valid_url(url)


@pytest.mark.parametrize(
    "url",
    [
        None,
        "",
        "abc.de",
        "https://",
        "ftp://abc.de/file",
        "https://abc .de",
        " https://abc.de",
        "https://abc.de\n",
        "javascript:alert(1)",
    ],
)
def test_invalid_urls(url):
    assert not is_valid_url(url)


def test_empty_link_is_acceptable_but_not_valid():
    assert is_acceptable_link("")
    assert not is_valid_url("")


def test_link_root_keeps_scheme_and_authority():
    assert link_root("https://abc.de/x") == "https://abc.de"
    assert link_root("http://dash.example.com:8443/a/b?c=d#e") == "http://dash.example.com:8443"
    assert link_root("") == ""


def test_store_defaults_to_empty_link(tmp_path):
    store = OverviewConfigStore(str(tmp_path / "missing.json"))

    assert store.overview_link() == ""
    assert store.link_root() == ""


def test_store_persists_link(tmp_path):
    path = tmp_path / "config" / "status_overview.json"
    OverviewConfigStore(str(path)).set_overview_link("https://abc.de/x")

    reloaded = OverviewConfigStore(str(path))

    assert reloaded.overview_link() == "https://abc.de/x"
    assert reloaded.link_root() == "https://abc.de"
    assert json.loads(path.read_text(encoding="utf-8")) == {"overviewLink": "https://abc.de/x"}


def test_store_rejects_invalid_link_and_keeps_previous(tmp_path):
    store = OverviewConfigStore(str(tmp_path / "status_overview.json"))
    store.set_overview_link("https://abc.de/x")

    with pytest.raises(InvalidOverviewLinkError):
        store.set_overview_link("not a url")

    assert store.overview_link() == "https://abc.de/x"


def test_store_clears_link_with_empty_or_none(tmp_path):
    store = OverviewConfigStore(str(tmp_path / "status_overview.json"))
    store.set_overview_link("https://abc.de/x")

    cleared = store.set_overview_link(None)

    assert cleared.overview_link == ""
    assert cleared.link_root == ""
    assert store.overview_link() == ""


def test_store_rejects_non_object_file(tmp_path):
    path = tmp_path / "status_overview.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError):
        OverviewConfigStore(str(path)).overview_link()


def test_admin_config_requires_admin_token(tmp_path):
    client = _client(OverviewConfigStore(str(tmp_path / "status_overview.json")))

    assert client.get("/api/admin/status-overview/config").status_code == 403
    assert client.get("/api/admin/status-overview/config", headers=READ_HEADERS).status_code == 403
    response = client.put(
        "/api/admin/status-overview/config",
        headers=READ_HEADERS,
        json={"overviewLink": "https://abc.de"},
    )
    assert response.status_code == 403


def test_admin_can_update_and_read_config(tmp_path):
    store = OverviewConfigStore(str(tmp_path / "status_overview.json"))
    client = _client(store)

    saved = client.put(
        "/api/admin/status-overview/config",
        headers=ADMIN_HEADERS,
        json={"overviewLink": "https://abc.de/x"},
    )
    current = client.get("/api/admin/status-overview/config", headers=ADMIN_HEADERS)

    assert saved.status_code == 200
    assert saved.json() == {"overviewLink": "https://abc.de/x", "linkRoot": "https://abc.de"}
    assert current.json() == saved.json()
    assert store.overview_link() == "https://abc.de/x"


def test_admin_update_with_invalid_link_is_rejected(tmp_path):
    store = OverviewConfigStore(str(tmp_path / "status_overview.json"))
    store.set_overview_link("https://abc.de/x")
    client = _client(store)

    response = client.put(
        "/api/admin/status-overview/config",
        headers=ADMIN_HEADERS,
        json={"overviewLink": "abc.de"},
    )

    assert response.status_code == 400
    assert response.json() == {"detail": INVALID_LINK_MESSAGE}
    assert store.overview_link() == "https://abc.de/x"


def test_admin_update_with_null_link_clears_it(tmp_path):
    store = OverviewConfigStore(str(tmp_path / "status_overview.json"))
    store.set_overview_link("https://abc.de/x")
    client = _client(store)

    response = client.put("/api/admin/status-overview/config", headers=ADMIN_HEADERS, json={"overviewLink": None})

    assert response.status_code == 200
    assert response.json() == {"overviewLink": "", "linkRoot": ""}


def test_updated_link_drives_status_link_endpoint(tmp_path):
    client = _client(OverviewConfigStore(str(tmp_path / "status_overview.json")))

    client.put(
        "/api/admin/status-overview/config",
        headers=ADMIN_HEADERS,
        json={"overviewLink": "https://dash.example.com/jenkins"},
    )
    response = client.get("/status-overview/link", headers=READ_HEADERS)

    assert response.json()["urlName"] == "https://dash.example.com/jenkins"


@pytest.mark.parametrize(
    ("link", "expected"),
    [
        ("https://abc.de/x", {"kind": "ok", "message": None}),
        ("", {"kind": "ok", "message": None}),
        ("abc.de", {"kind": "error", "message": INVALID_LINK_MESSAGE}),
    ],
)
def test_admin_check_reports_link_validity(tmp_path, link, expected):
    client = _client(OverviewConfigStore(str(tmp_path / "status_overview.json")))

    response = client.get(
        "/api/admin/status-overview/config/check",
        headers=ADMIN_HEADERS,
        params={"overviewLink": link},
    )

    assert response.status_code == 200
    assert response.json() == expected


def test_link_root_is_empty_for_invalid_link():
    assert link_root("abc") == ""
    assert link_root("ftp://abc.de/file") == ""


def test_store_link_root_ignores_hand_edited_invalid_link(tmp_path):
    path = tmp_path / "status_overview.json"
    path.write_text(json.dumps({"overviewLink": "abc"}), encoding="utf-8")

    assert OverviewConfigStore(str(path)).link_root() == ""


def test_store_link_root_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "status_overview.json"
    path.write_text("{not json", encoding="utf-8")
    store = OverviewConfigStore(str(path))

    assert store.link_root() == ""
    with pytest.raises(ValueError):
        store.overview_link()

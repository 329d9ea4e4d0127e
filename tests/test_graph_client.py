import pytest

from core import config, graph_client
from core.errors import ConfigurationError

GRAPH_SETTINGS = (
    "MICROSOFT_GRAPH_TENANT_ID",
    "MICROSOFT_GRAPH_APP_ID",
    "MICROSOFT_GRAPH_CLIENT_SECRET",
)


@pytest.fixture(autouse=True)
def fresh_client(monkeypatch):
    monkeypatch.setattr(graph_client, "_graph_client", None)
    monkeypatch.setattr(graph_client, "_credential", None)


def test_missing_credentials(monkeypatch):
    for name in GRAPH_SETTINGS:
        monkeypatch.setitem(config._SETTING_VALUES, name, "")

    with pytest.raises(ConfigurationError, match="MICROSOFT_GRAPH_TENANT_ID"):
        graph_client.get_graph_client()


@pytest.mark.anyio
async def test_client_is_shared_until_closed(monkeypatch):
    for name in GRAPH_SETTINGS:
        monkeypatch.setitem(config._SETTING_VALUES, name, "set")
    monkeypatch.setattr(graph_client, "GRAPH_TENANT_ID", "contoso.onmicrosoft.com")
    monkeypatch.setattr(graph_client, "GRAPH_APP_ID", "00000000-0000-0000-0000-000000000001")
    monkeypatch.setattr(graph_client, "GRAPH_CLIENT_SECRET", "not-a-real-secret")

    client = graph_client.get_graph_client()
    assert graph_client.get_graph_client() is client

    await graph_client.close_graph_client()
    assert graph_client._graph_client is None
    assert graph_client._credential is None

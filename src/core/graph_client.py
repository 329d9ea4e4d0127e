"""
MS Graph client for the calendar source and summary mail.

Built lazily on first use, so ledger-only scripts never need Graph credentials.
"""

from azure.identity.aio import ClientSecretCredential
from msgraph import GraphServiceClient

from core.config import GRAPH_APP_ID, GRAPH_CLIENT_SECRET, GRAPH_TENANT_ID, require_settings

# App-only access: permissions come from the app registration
GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]

_credential: ClientSecretCredential | None = None
_graph_client: GraphServiceClient | None = None


def get_graph_client() -> GraphServiceClient:
    """Get or create the MS Graph client (lazy initialization)."""
    global _credential, _graph_client
    if _graph_client is None:
        require_settings(
            "MICROSOFT_GRAPH_TENANT_ID",
            "MICROSOFT_GRAPH_APP_ID",
            "MICROSOFT_GRAPH_CLIENT_SECRET",
        )
        _credential = ClientSecretCredential(
            tenant_id=GRAPH_TENANT_ID,
            client_id=GRAPH_APP_ID,
            client_secret=GRAPH_CLIENT_SECRET,
        )
        _graph_client = GraphServiceClient(credentials=_credential, scopes=GRAPH_SCOPES)
    return _graph_client


async def close_graph_client() -> None:
    """Close the credential's transport; the next get_graph_client() starts over."""
    global _credential, _graph_client
    if _credential is not None:
        await _credential.close()
    _credential = None
    _graph_client = None

"""
Admin content services: collection cache, edit drafts, access gate, dashboard
"""
from .access_gate import AccessGate, EntryDecision, GateState
from .auth_client import AuthClient
from .collection_store import CollectionStore
from .dashboard import DashboardController, TABS
from .edit_session import EditMode, EditSession
from .site_content import SiteContent

__all__ = [
    'AccessGate',
    'AuthClient',
    'CollectionStore',
    'DashboardController',
    'EditMode',
    'EditSession',
    'EntryDecision',
    'GateState',
    'SiteContent',
    'TABS',
]

from .auth import AuthHandoff, AuthMessage, TokenSession, build_authorization_url, parse_callback_fragment
from .meta_graph import MetaGraphClient
from .proxy import AIProxyClient, resolve_proxy_endpoint

__all__ = [
    "AIProxyClient",
    "resolve_proxy_endpoint",
    "MetaGraphClient",
    "TokenSession",
    "AuthHandoff",
    "AuthMessage",
    "build_authorization_url",
    "parse_callback_fragment",
]

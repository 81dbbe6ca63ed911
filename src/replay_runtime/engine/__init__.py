"""
Engine module - The runtime behavior embedded in every generated script.

Components:
- RequestCounter: pending xhr/fetch request count
- IdleMonitor: waits for the page to go network-idle
- LocatorResolver: ranked candidate locators to one element
- HttpRequestExecutor: declarative request specs to responses
- FactReconciler: UI/DB/API agreement on one count
- ReplaySession: all of the above bound to one page
"""

from replay_runtime.engine.request_counter import RequestCounter
from replay_runtime.engine.idle_monitor import IdleMonitor
from replay_runtime.engine.locator_resolver import (
    LocatorResolver,
    ResolvedElement,
    resolve_candidates,
)
from replay_runtime.engine.request_spec import (
    AuthType,
    BodyType,
    KeyValue,
    FormField,
    TokenStorageRef,
    BasicAuthStorageRef,
    RequestAuth,
    RequestBody,
    RequestSpec,
)
from replay_runtime.engine.request_executor import (
    HttpRequestExecutor,
    RawResponse,
    build_url,
    build_headers,
    build_body,
    basic_credentials,
)
from replay_runtime.engine.fact_reconciler import (
    FactReconciler,
    ReconciliationResult,
    parse_int,
    strip_tags,
)

__all__ = [
    "RequestCounter",
    "IdleMonitor",
    "LocatorResolver",
    "ResolvedElement",
    "resolve_candidates",
    "AuthType",
    "BodyType",
    "KeyValue",
    "FormField",
    "TokenStorageRef",
    "BasicAuthStorageRef",
    "RequestAuth",
    "RequestBody",
    "RequestSpec",
    "HttpRequestExecutor",
    "RawResponse",
    "build_url",
    "build_headers",
    "build_body",
    "basic_credentials",
    "FactReconciler",
    "ReconciliationResult",
    "parse_int",
    "strip_tags",
]

"""authz-simulator — see what a query returns under someone else's permissions.

Runs a query as a specific user, a role, the public (anonymous) role,
or the caller itself, without authenticating as that identity, and
compares the result with the administrator's own view. Field-level
denials are recovered from by retrying once without the forbidden
fields; differences are reported as hints.

Example::

    from authz_simulator import Simulator, SimulationRequest

    simulator = Simulator(executor, directory=directory)
    result = await simulator.simulate(
        SimulationRequest(mode="user", collection="posts", user_id="u1"),
        caller=admin_accountability,
    )
    for hint in result.hints:
        print(hint.field, hint.kind, hint.note)
"""

from importlib.metadata import PackageNotFoundError, version

from authz_simulator._accountability import Accountability, build_accountability
from authz_simulator._hints import Hint, diff_rows
from authz_simulator._types import QueryExecutor, UserDirectory, UserRecord
from authz_simulator.config._config import SimulatorConfig, configure
from authz_simulator.exceptions import (
    AuthorizationDenied,
    CollectionAccessDenied,
    DelegateError,
    FieldAccessDenied,
    InvalidQueryError,
    InvalidRequestError,
    SimulationForbidden,
    SimulatorError,
    UnresolvedIdentity,
)
from authz_simulator.query._model import Query
from authz_simulator.recovery._extract import extract_forbidden_fields
from authz_simulator.recovery._strip import StripResult, strip_forbidden_fields
from authz_simulator.simulation._models import SimulationRequest, SimulationResult
from authz_simulator.simulation._orchestrator import Simulator, simulate

try:
    __version__ = version("authz-simulator")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "__version__",
    "Accountability",
    "AuthorizationDenied",
    "CollectionAccessDenied",
    "DelegateError",
    "FieldAccessDenied",
    "Hint",
    "InvalidQueryError",
    "InvalidRequestError",
    "Query",
    "QueryExecutor",
    "SimulationForbidden",
    "SimulationRequest",
    "SimulationResult",
    "Simulator",
    "SimulatorConfig",
    "SimulatorError",
    "StripResult",
    "UnresolvedIdentity",
    "UserDirectory",
    "UserRecord",
    "build_accountability",
    "configure",
    "diff_rows",
    "extract_forbidden_fields",
    "simulate",
    "strip_forbidden_fields",
]

"""authz-simulator testing utilities — accountability factories, fakes, and fixtures.

Provides test helpers for code that runs permission simulations:

- **Factories**: ``make_admin``, ``make_user``, ``make_anonymous``.
- **Fakes**: ``ScriptedExecutor`` replays executor responses and records
  calls; ``InMemoryDirectory`` resolves users from a dict.
- **Fixtures**: ``admin_accountability``, ``scripted_executor``,
  ``user_directory``, ``isolated_simulator_config``.

Example::

    from authz_simulator.testing import ScriptedExecutor, make_admin

    async def test_public_sees_nothing():
        executor = ScriptedExecutor([[], [{"id": 1}]])
        result = await simulate(SimulationRequest(mode="public", collection="posts"),
                                make_admin(), executor=executor)
        assert result.simulated_items == []
"""

from authz_simulator.testing._actors import make_admin, make_anonymous, make_user
from authz_simulator.testing._fakes import ExecutorCall, InMemoryDirectory, ScriptedExecutor
from authz_simulator.testing._fixtures import (
    admin_accountability,
    isolated_simulator_config,
    scripted_executor,
    user_directory,
)
from authz_simulator.testing._isolation import isolated_config

__all__ = [
    "ExecutorCall",
    "InMemoryDirectory",
    "ScriptedExecutor",
    "admin_accountability",
    "isolated_config",
    "isolated_simulator_config",
    "make_admin",
    "make_anonymous",
    "make_user",
    "scripted_executor",
    "user_directory",
]

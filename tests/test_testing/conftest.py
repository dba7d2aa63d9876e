"""Import fixtures from authz_simulator.testing for test discovery."""

from authz_simulator.testing._fixtures import (
    admin_accountability,
    isolated_simulator_config,
    scripted_executor,
    user_directory,
)

__all__ = [
    "admin_accountability",
    "isolated_simulator_config",
    "scripted_executor",
    "user_directory",
]

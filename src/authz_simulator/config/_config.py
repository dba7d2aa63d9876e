"""Layered configuration for authz-simulator."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "SimulatorConfig",
    "configure",
    "get_global_config",
    "_reset_global_config",
    "_set_global_config",
]


@dataclass(frozen=True, slots=True)
class SimulatorConfig:
    """Simulator settings with merge semantics (global -> router/simulator).

    Attributes:
        name: Service name reported by the health endpoint.
        include_baseline_default: Whether a request without
            ``includeRequester`` also runs the caller's own query.
        log_payload_max_length: Truncation limit for JSON payloads in logs.
        default_limit: Row limit the SQL executor applies when a query
            does not set ``limit``.

    Example::

        config = SimulatorConfig(include_baseline_default=False)
        merged = config.merge(log_payload_max_length=500)
    """

    name: str = "Policy/Permission Simulator Endpoint"
    include_baseline_default: bool = True
    log_payload_max_length: int = 4000
    default_limit: int = 100

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("name must be a non-empty string")
        if self.log_payload_max_length <= 0:
            raise ValueError(
                f"log_payload_max_length must be positive, got {self.log_payload_max_length!r}"
            )
        if self.default_limit <= 0:
            raise ValueError(f"default_limit must be positive, got {self.default_limit!r}")

    def merge(
        self,
        *,
        name: str | None = None,
        include_baseline_default: bool | None = None,
        log_payload_max_length: int | None = None,
        default_limit: int | None = None,
    ) -> SimulatorConfig:
        """Return a new config with non-None overrides applied.

        Args:
            name: Override for name (ignored if None).
            include_baseline_default: Override for include_baseline_default (ignored if None).
            log_payload_max_length: Override for log_payload_max_length (ignored if None).
            default_limit: Override for default_limit (ignored if None).

        Returns:
            A new ``SimulatorConfig`` with overrides merged.
        """
        return SimulatorConfig(
            name=name if name is not None else self.name,
            include_baseline_default=(
                include_baseline_default
                if include_baseline_default is not None
                else self.include_baseline_default
            ),
            log_payload_max_length=(
                log_payload_max_length
                if log_payload_max_length is not None
                else self.log_payload_max_length
            ),
            default_limit=default_limit if default_limit is not None else self.default_limit,
        )


# ---------------------------------------------------------------------------
# Global configuration singleton
# ---------------------------------------------------------------------------

_global_config = SimulatorConfig()


def get_global_config() -> SimulatorConfig:
    """Return the current global configuration."""
    return _global_config


def configure(
    *,
    name: str | None = None,
    include_baseline_default: bool | None = None,
    log_payload_max_length: int | None = None,
    default_limit: int | None = None,
) -> SimulatorConfig:
    """Update the global configuration by merging overrides.

    Only non-None values are applied. Returns the new global config.

    Example::

        configure(include_baseline_default=False)
        # Requests now skip the baseline query unless they ask for it
    """
    global _global_config
    _global_config = _global_config.merge(
        name=name,
        include_baseline_default=include_baseline_default,
        log_payload_max_length=log_payload_max_length,
        default_limit=default_limit,
    )
    return _global_config


def _set_global_config(cfg: SimulatorConfig) -> None:
    """Replace global config with an exact snapshot. For testing only."""
    global _global_config
    _global_config = cfg


def _reset_global_config() -> None:
    """Reset global config to defaults. For testing only."""
    global _global_config
    _global_config = SimulatorConfig()

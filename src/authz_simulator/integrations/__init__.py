"""Framework integrations for authz-simulator."""

"""Car-service management backend: tenants, vehicle catalog and pricing."""

__version__ = "0.1.0"

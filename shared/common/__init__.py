# Shared Common Library for the pet spa booking service.
# Exception handling, middleware, pagination, health checks and small
# utilities used by the service code.

__version__ = "1.0.0"

__all__ = [
    '__version__',
]

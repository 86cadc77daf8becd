# backend/app/errors.py
from typing import Optional


class PathfinderError(ValueError):
    """Expected, reportable routing failure. `code` is stable and safe to expose."""

    code = "PATHFINDER_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return self.message


class MapNotFound(PathfinderError):
    code = "MAP_NOT_FOUND"


class NodeNotFound(PathfinderError):
    code = "NODE_NOT_FOUND"


class NoPathFound(PathfinderError):
    code = "NO_PATH"


class NoRouteBetweenMaps(PathfinderError):
    code = "NO_ROUTE_BETWEEN_MAPS"


class GatewayNotFound(PathfinderError):
    code = "GATEWAY_NOT_FOUND"


class InvalidInput(PathfinderError):
    code = "INVALID_INPUT"


INTERNAL_ERROR = "INTERNAL_ERROR"

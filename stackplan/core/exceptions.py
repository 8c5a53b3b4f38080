from __future__ import annotations

__all__ = [
    "BaseError",
    "BadRequestError",
    "BlockedByFailedDependencyError",
    "ConflictError",
    "CyclicDependencyError",
    "DuplicateIdentifierError",
    "GraphFinalizedError",
    "GraphNotFinalizedError",
    "LoadError",
    "NotFoundError",
    "PreconditionFailedError",
    "UnknownResourceError",
    "UnresolvedReferenceError",
]


class BaseError(Exception):
    status_code: int = 500


class BadRequestError(BaseError):
    status_code = 400


class NotFoundError(BaseError):
    status_code = 404


class ConflictError(BaseError):
    status_code = 409


class PreconditionFailedError(BaseError):
    status_code = 412


class LoadError(BaseError):
    status_code = 500


class DuplicateIdentifierError(ConflictError):
    def __init__(self, id: str):
        super().__init__(f"Resource {id} already registered")
        self.id = id


class UnknownResourceError(NotFoundError):
    def __init__(self, id: str):
        super().__init__(f"Resource {id} not registered")
        self.id = id


class GraphNotFinalizedError(PreconditionFailedError):
    def __init__(self):
        super().__init__("Graph not finalized")


class GraphFinalizedError(ConflictError):
    def __init__(self):
        super().__init__("Graph already finalized")


class CyclicDependencyError(BadRequestError):
    """Dependency edges form a cycle.

    Attributes:
        cycle: Identifiers in cycle order. The last identifier
            depends on the first one.
    """

    def __init__(self, cycle: list[str]):
        path = " -> ".join([*cycle, cycle[0]]) if cycle else ""
        super().__init__(f"Cyclic dependency: {path}")
        self.cycle = list(cycle)


class UnresolvedReferenceError(BadRequestError):
    def __init__(self, message: str, id: str | None = None):
        super().__init__(message)
        self.id = id


class BlockedByFailedDependencyError(PreconditionFailedError):
    """Resources cannot be planned because a dependency failed health checks.

    Attributes:
        failed: Resources whose health check reported FAILED.
        blocked: Every resource transitively depending on a failed one.
    """

    def __init__(self, failed: list[str], blocked: list[str]):
        super().__init__(
            f"Failed: {', '.join(failed)}. Blocked: {', '.join(blocked)}"
        )
        self.failed = list(failed)
        self.blocked = list(blocked)

    @property
    def identifiers(self) -> set[str]:
        return set(self.failed) | set(self.blocked)

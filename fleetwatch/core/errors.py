"""
Error taxonomy for FleetWatch.

Only ValidationError and AuthorizationError (with ForbiddenError) are
meant to reach API callers; evaluation and sink errors are absorbed
and logged by the pipeline.
"""


class FleetWatchError(Exception):
    """FleetWatch base exception"""


class ValidationError(FleetWatchError):
    """Reading failed a field or range check"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class AuthorizationError(FleetWatchError):
    """Credential missing or invalid"""


class ForbiddenError(AuthorizationError):
    """Authenticated, but the role lacks the required capability"""


class EvaluationError(FleetWatchError):
    """An evaluator failed internally"""


class GeometryError(EvaluationError):
    """Malformed polygon or path"""


class SinkError(FleetWatchError):
    """A store read or write failed"""

    def __init__(self, table: str, message: str):
        super().__init__(f"{table}: {message}")
        self.table = table

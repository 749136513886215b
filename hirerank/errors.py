"""
Errors raised by the scoring engine.
"""


class ResourceNotFoundError(LookupError):
    """Raised when a job, candidate or application id does not resolve."""

    def __init__(self, resource: str, field: str, value):
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(f"{resource} not found with {field} : '{value}'")

"""Domain exceptions raised by the subscription and storage layers."""


class ValidationError(Exception):
    """A write was rejected for a user-correctable reason."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class UnsupportedResourceTypeError(ValidationError):
    """The resource type is unknown or has no storage handler."""


class IndexInconsistencyError(Exception):
    """Index mutation requested that does not match the committed resource state."""


class ResourceNotFoundError(Exception):
    """No resource exists for the given identity."""

    message = "Resource {resource_type}/{resource_id} not found"

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            self.message.format(resource_type=resource_type, resource_id=resource_id)
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ResourceGoneError(ResourceNotFoundError):
    """The resource exists but has been logically deleted."""

    message = "Resource {resource_type}/{resource_id} is deleted"

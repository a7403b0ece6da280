"""Subscription validation run before every subscription write."""

from dataclasses import dataclass
from typing import Any

import pydantic
from loguru import logger

from app.core.exceptions import UnsupportedResourceTypeError, ValidationError
from app.fhir.registry import HandlerRegistry, ResourceTypeDescriptor, ResourceTypeRegistry
from app.schemas.subscription import SubscriptionDefinition
from app.subscription.channel import ChannelValidator
from app.subscription.criteria import CriteriaParser, ParsedCriteria

UNSUPPORTED_TYPE = "criteria contains invalid/unsupported resource type: {type}"
STATUS_MISSING = "status must be populated"


@dataclass(frozen=True)
class ValidatedSubscription:
    """Outcome of a successful validation."""

    descriptor: ResourceTypeDescriptor
    criteria: ParsedCriteria


def parse_definition(content: dict[str, Any]) -> SubscriptionDefinition:
    """Parse a FHIR JSON body into a SubscriptionDefinition.

    Structural problems (wrong resourceType, unknown enum codes) are reported
    as ValidationError naming the first offending field.
    """
    try:
        return SubscriptionDefinition.model_validate(content)
    except pydantic.ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise ValidationError(
            f"invalid Subscription resource: {location}: {error['msg']}"
        ) from e


class SubscriptionValidator:
    """Accepts or rejects a subscription definition.

    Checks run in a fixed order and the first violation wins:

    1. criteria syntax (populated, ``{ResourceType}?[params]``)
    2. channel (type populated, rest-hook payload and endpoint)
    3. criteria resource type is known and has a storage handler
    4. status populated
    """

    def __init__(
        self,
        type_registry: ResourceTypeRegistry,
        handlers: HandlerRegistry,
        channel_validator: ChannelValidator | None = None,
        criteria_parser: CriteriaParser | None = None,
        log=logger,
    ):
        self.type_registry = type_registry
        self.handlers = handlers
        self.channel_validator = channel_validator or ChannelValidator()
        self.criteria_parser = criteria_parser or CriteriaParser()
        self.log = log

    def validate(self, definition: SubscriptionDefinition) -> ResourceTypeDescriptor:
        """Validate and return the descriptor of the watched resource type."""
        return self.inspect(definition).descriptor

    def inspect(self, definition: SubscriptionDefinition) -> ValidatedSubscription:
        """Validate and return the descriptor together with the parsed criteria."""
        try:
            criteria = self.criteria_parser.parse(definition.criteria)
            self.channel_validator.validate(definition.channel)
            descriptor = self._resolve(criteria.resource_type)
            if definition.status is None:
                raise ValidationError(STATUS_MISSING)
        except ValidationError as e:
            self.log.info(f"Subscription rejected: {e.reason}")
            raise

        return ValidatedSubscription(descriptor=descriptor, criteria=criteria)

    def _resolve(self, resource_type: str) -> ResourceTypeDescriptor:
        descriptor = self.type_registry.resolve(resource_type)
        if descriptor is None:
            raise ValidationError(UNSUPPORTED_TYPE.format(type=resource_type))

        if self.handlers.handler_for(descriptor) is None:
            raise UnsupportedResourceTypeError(UNSUPPORTED_TYPE.format(type=descriptor.name))

        return descriptor

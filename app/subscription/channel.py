"""Validation of the subscription delivery channel."""

from typing import Callable

from app.core.exceptions import ValidationError
from app.fhir.encoding import Encoding, recognize_encoding
from app.schemas.subscription import SubscriptionChannel, SubscriptionChannelType
from app.subscription.criteria import is_blank

CHANNEL_TYPE_MISSING = "channel.type must be populated"
PAYLOAD_MISSING = "channel.payload must be populated for rest-hook subscriptions"
PAYLOAD_INVALID = "invalid value for channel.payload: {value}"
ENDPOINT_MISSING = "channel.endpoint must be defined"


class ChannelValidator:
    """Checks channel fields according to the channel type."""

    def __init__(
        self,
        recognize: Callable[[str | None], Encoding | None] = recognize_encoding,
    ):
        self._recognize = recognize

    def validate(self, channel: SubscriptionChannel) -> None:
        if channel.type is None:
            raise ValidationError(CHANNEL_TYPE_MISSING)

        if channel.type == SubscriptionChannelType.REST_HOOK:
            self._validate_payload(channel)
            self._validate_endpoint(channel)

    def _validate_payload(self, channel: SubscriptionChannel) -> None:
        if is_blank(channel.payload):
            raise ValidationError(PAYLOAD_MISSING)
        if self._recognize(channel.payload) is None:
            raise ValidationError(PAYLOAD_INVALID.format(value=channel.payload))

    def _validate_endpoint(self, channel: SubscriptionChannel) -> None:
        if is_blank(channel.endpoint):
            raise ValidationError(ENDPOINT_MISSING)

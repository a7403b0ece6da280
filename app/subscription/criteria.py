"""Parsing of subscription criteria strings."""

from dataclasses import dataclass, field
from urllib.parse import parse_qsl

from app.core.exceptions import ValidationError

CRITERIA_MISSING = "criteria must be populated"
CRITERIA_MALFORMED = "criteria must be in the form {ResourceType}?[params]"


def is_blank(value: str | None) -> bool:
    """True for None, empty, or whitespace-only strings."""
    return value is None or not value.strip()


@dataclass(frozen=True)
class ParsedCriteria:
    """Criteria split into resource type and search parameters."""

    resource_type: str
    params: list[tuple[str, str]] = field(default_factory=list)

    @property
    def query(self) -> str:
        return "&".join(f"{name}={value}" for name, value in self.params)


class CriteriaParser:
    """Parses ``{ResourceType}?{params}`` criteria strings."""

    def parse(self, criteria: str | None) -> ParsedCriteria:
        if is_blank(criteria):
            raise ValidationError(CRITERIA_MISSING)

        # A resource type needs at least two characters before the separator
        sep = criteria.find("?")
        if sep <= 1:
            raise ValidationError(CRITERIA_MALFORMED)

        resource_type = criteria[:sep]
        if "/" in resource_type:
            raise ValidationError(CRITERIA_MALFORMED)

        params = parse_qsl(criteria[sep + 1 :], keep_blank_values=True)
        return ParsedCriteria(resource_type=resource_type, params=params)

"""Resource type registry and storage handler lookup."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from app.services.resource_hooks import ResourceHooks

# FHIR R4 resource types recognized when no YAML override is configured
DEFAULT_RESOURCE_TYPES: tuple[str, ...] = (
    "Account",
    "AllergyIntolerance",
    "Appointment",
    "AuditEvent",
    "Basic",
    "Binary",
    "Bundle",
    "CarePlan",
    "CareTeam",
    "Claim",
    "Communication",
    "Composition",
    "Condition",
    "Consent",
    "Coverage",
    "Device",
    "DiagnosticReport",
    "DocumentReference",
    "Encounter",
    "Endpoint",
    "EpisodeOfCare",
    "Flag",
    "Goal",
    "Group",
    "ImagingStudy",
    "Immunization",
    "Location",
    "Medication",
    "MedicationAdministration",
    "MedicationDispense",
    "MedicationRequest",
    "MedicationStatement",
    "Observation",
    "Organization",
    "Patient",
    "Practitioner",
    "PractitionerRole",
    "Procedure",
    "Questionnaire",
    "QuestionnaireResponse",
    "RelatedPerson",
    "Schedule",
    "ServiceRequest",
    "Slot",
    "Specimen",
    "Subscription",
    "Task",
)


@dataclass(frozen=True)
class ResourceTypeDescriptor:
    """Resolved resource type."""

    name: str

    @property
    def profile(self) -> str:
        return f"http://hl7.org/fhir/StructureDefinition/{self.name}"


class ResourceTypeRegistry:
    """Resolves resource type names case-insensitively to descriptors."""

    def __init__(self, resource_types: Iterable[str] = DEFAULT_RESOURCE_TYPES):
        self._types = {name.lower(): ResourceTypeDescriptor(name) for name in resource_types}

    def resolve(self, type_name: str) -> ResourceTypeDescriptor | None:
        """Return the descriptor for a type name, or None if unknown."""
        return self._types.get(type_name.lower())

    def __contains__(self, type_name: str) -> bool:
        return self.resolve(type_name) is not None

    def __len__(self) -> int:
        return len(self._types)


@dataclass
class ResourceHandler:
    """Storage handler for one resource type and the hooks run on its writes."""

    resource_type: str
    hooks: list[ResourceHooks] = field(default_factory=list)


class HandlerRegistry:
    """Storage handlers keyed by resource type name."""

    def __init__(self, handlers: Iterable[ResourceHandler] = ()):
        self._handlers: dict[str, ResourceHandler] = {}
        for handler in handlers:
            self.register(handler)

    def register(self, handler: ResourceHandler) -> ResourceHandler:
        self._handlers[handler.resource_type] = handler
        return handler

    def add_hooks(self, resource_type: str, *hooks: ResourceHooks) -> ResourceHandler:
        """Attach hooks to a type, registering a handler for it if needed."""
        handler = self._handlers.get(resource_type)
        if handler is None:
            handler = self.register(ResourceHandler(resource_type))
        handler.hooks.extend(hooks)
        return handler

    def handler_for(self, descriptor: ResourceTypeDescriptor) -> ResourceHandler | None:
        return self._handlers.get(descriptor.name)

    def get(self, resource_type: str) -> ResourceHandler | None:
        return self._handlers.get(resource_type)

"""FHIR metadata helpers: payload encodings and resource type registries."""

from app.fhir.encoding import Encoding, recognize_encoding
from app.fhir.registry import (
    HandlerRegistry,
    ResourceHandler,
    ResourceTypeDescriptor,
    ResourceTypeRegistry,
)

__all__ = [
    "Encoding",
    "HandlerRegistry",
    "ResourceHandler",
    "ResourceTypeDescriptor",
    "ResourceTypeRegistry",
    "recognize_encoding",
]

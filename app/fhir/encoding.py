"""Recognition of FHIR payload encodings from MIME types or short codes."""

from enum import Enum


class Encoding(str, Enum):
    """Wire encodings a notification payload may use."""

    JSON = "json"
    XML = "xml"


_CONTENT_TYPES: dict[str, Encoding] = {
    "application/fhir+json": Encoding.JSON,
    "application/json+fhir": Encoding.JSON,  # DSTU2 style
    "application/json": Encoding.JSON,
    "json": Encoding.JSON,
    "application/fhir+xml": Encoding.XML,
    "application/xml+fhir": Encoding.XML,  # DSTU2 style
    "application/xml": Encoding.XML,
    "xml": Encoding.XML,
}


def recognize_encoding(value: str | None) -> Encoding | None:
    """Map a MIME type or format code to an encoding.

    Parameters such as ``; charset=utf-8`` are ignored. Returns None when the
    value is not recognized.
    """
    if not value:
        return None
    mime = value.split(";", 1)[0].strip().lower()
    return _CONTENT_TYPES.get(mime)

"""Site content document names."""

CONTENT_DOCUMENTS = ("gallery", "videos", "featured", "services")


def document_filename(name: str) -> str:
    """Return the stored filename for a content document."""
    return f"{name}.json"


def document_from_filename(filename: str) -> str | None:
    """Map a requested filename back to an allowed document name."""
    if not filename.endswith(".json"):
        return None
    name = filename[: -len(".json")]
    return name if name in CONTENT_DOCUMENTS else None

"""Startup profile rules: section updates, completeness, uploaded files."""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from incubridge import config
from incubridge.errors import ValidationFailed
from incubridge.models import Startup, utcnow

logger = logging.getLogger(__name__)

# Checked fields are 16, the denominator stays 20 so a "complete" profile
# needs 16/20 = 80%.
COMPLETENESS_TOTAL_FIELDS = 20
COMPLETE_THRESHOLD = 80

DOCUMENT_TYPES = (
    "pitchDeck",
    "businessModelCanvas",
    "financialSummary",
    "incorporationCertificate",
    "gstCertificate",
)
OTHER_DOCUMENT_TYPE = "other"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def compute_completeness(startup: Startup) -> int:
    documents = startup.documents or {}
    social = startup.social_links or {}
    checks = [
        startup.name,
        startup.tagline,
        startup.website,
        startup.logo,
        startup.problem_statement,
        startup.solution,
        startup.founders,
        (startup.team_size or 0) > 1,
        (startup.active_users or 0) > 0,
        (startup.monthly_revenue or 0) > 0,
        startup.burn_rate,
        startup.tam,
        startup.current_ask,
        documents.get("pitchDeck"),
        documents.get("businessModelCanvas"),
        social.get("linkedin"),
    ]
    filled = sum(1 for c in checks if c)
    return round(filled / COMPLETENESS_TOTAL_FIELDS * 100)


def refresh_completeness(startup: Startup) -> None:
    startup.profile_completeness = compute_completeness(startup)
    startup.is_profile_complete = startup.profile_completeness >= COMPLETE_THRESHOLD
    startup.updated_at = utcnow()


def apply_update(startup: Startup, update: BaseModel) -> list[str]:
    """Copy the fields explicitly set on *update* onto *startup*.

    Returns the names of the changed columns.
    """
    data = update.model_dump(exclude_unset=True, mode="json")
    # Nested JSON (founders, rounds, ...) is stored whole with its wire keys
    full = update.model_dump(mode="json", by_alias=True)
    fields = type(update).model_fields
    for field, value in data.items():
        if isinstance(value, (list, dict)):
            data[field] = full[fields[field].alias or field]
    # Date columns need real date objects, not ISO strings
    if "founded_date" in data:
        data["founded_date"] = getattr(update, "founded_date")
    if "visibility" in data:
        data["profile_visibility"] = data.pop("visibility")

    for field, value in data.items():
        if field == "name" and not value:
            continue
        setattr(startup, field, value)

    refresh_completeness(startup)
    return list(data)


# ---------------------------------------------------------------------------
# Uploads -- stored on disk, served statically under /uploads
# ---------------------------------------------------------------------------

def _safe_filename(original: str) -> str:
    name = Path(original or "upload").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._") or "upload"
    return name[-120:]


def store_upload(
    filename: Optional[str],
    content: bytes,
    upload_dir: Optional[Path] = None,
) -> str:
    """Validate and write an uploaded file; returns its public ``/uploads/...`` path."""
    if not filename:
        raise ValidationFailed("No file uploaded")

    ext = Path(filename).suffix.lower()
    if ext not in config.ALLOWED_UPLOAD_EXTENSIONS:
        raise ValidationFailed(
            "Invalid file type",
            {"allowed": sorted(config.ALLOWED_UPLOAD_EXTENSIONS)},
        )
    if not content:
        raise ValidationFailed("No file uploaded")
    if len(content) > config.MAX_UPLOAD_BYTES:
        raise ValidationFailed(
            "File too large",
            {"max_bytes": config.MAX_UPLOAD_BYTES},
        )

    target_dir = Path(upload_dir or config.UPLOAD_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)
    stored_name = f"{int(time.time() * 1000)}-{_safe_filename(filename)}"
    (target_dir / stored_name).write_bytes(content)

    logger.info("Stored upload %s (%d bytes)", stored_name, len(content))
    return f"/uploads/{stored_name}"


def check_document_type(document_type: str) -> None:
    if document_type not in DOCUMENT_TYPES and document_type != OTHER_DOCUMENT_TYPE:
        raise ValidationFailed(
            "Invalid document type",
            {"allowed": list(DOCUMENT_TYPES) + [OTHER_DOCUMENT_TYPE]},
        )


def attach_document(startup: Startup, document_type: str, url: str, name: str = "") -> None:
    check_document_type(document_type)
    documents = dict(startup.documents or {})
    if document_type == OTHER_DOCUMENT_TYPE:
        others = list(documents.get("otherDocuments", []))
        others.append({"name": name or Path(url).name, "url": url})
        documents["otherDocuments"] = others
    else:
        documents[document_type] = url
    # Reassign so the JSON column is flagged dirty
    startup.documents = documents
    refresh_completeness(startup)

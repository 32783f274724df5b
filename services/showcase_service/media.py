"""
Project media link validation and normalization.

Images and documents must be hosted on Google Drive, videos on YouTube.
Media lists arrive either as real lists or as JSON-encoded strings (multipart
forms, legacy rows) and are stored as JSON text.
"""
import enum
import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

GOOGLE_DRIVE_HOST = "drive.google.com"

# Not anchored: share links are often pasted without scheme or "www."
YOUTUBE_LINK_RE = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)[\w-]+")
DRIVE_FILE_ID_RE = re.compile(r"/file/d/([\w-]+)")


def is_acceptable_image_or_document_link(url: Any) -> bool:
    if not isinstance(url, str) or not url:
        return False
    return GOOGLE_DRIVE_HOST in url


def is_acceptable_video_link(url: Any) -> bool:
    if not isinstance(url, str) or not url:
        return False
    return YOUTUBE_LINK_RE.search(url) is not None


def to_drive_direct_link(url: Optional[str]) -> Optional[str]:
    """Turn a Drive share link (``/file/d/<id>/view``) into a direct-view link."""
    if not url:
        return None
    if "drive.google.com/uc?id=" in url:
        return url
    match = DRIVE_FILE_ID_RE.search(url)
    if match:
        return f"https://drive.google.com/uc?id={match.group(1)}&export=view"
    return url


class MediaKind(str, enum.Enum):
    IMAGES = "images"
    VIDEOS = "videos"
    DOCUMENTS = "documents"


LINK_PREDICATES: Dict[MediaKind, Callable[[Any], bool]] = {
    MediaKind.IMAGES: is_acceptable_image_or_document_link,
    MediaKind.VIDEOS: is_acceptable_video_link,
    MediaKind.DOCUMENTS: is_acceptable_image_or_document_link,
}


class RejectReason(str, enum.Enum):
    MALFORMED_JSON = "malformed_json"
    NOT_A_LIST = "not_a_list"
    BLANK = "blank"
    NOT_A_STRING = "not_a_string"
    WRONG_HOST = "wrong_host"


@dataclass
class RejectedEntry:
    index: Optional[int]
    value: Any
    reason: RejectReason

    def to_dict(self) -> dict:
        return {"index": self.index, "value": self.value, "reason": self.reason.value}


@dataclass
class MediaReport:
    kind: MediaKind
    accepted: List[str] = field(default_factory=list)
    rejected: List[RejectedEntry] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected


class MediaValidationError(ValueError):
    """Raised in strict mode when any media entry was dropped."""

    def __init__(self, reports: List[MediaReport]):
        self.reports = [report for report in reports if not report.ok]
        super().__init__("Invalid media entries")

    def to_detail(self) -> list:
        return [
            {"field": report.kind.value, "rejected": [entry.to_dict() for entry in report.rejected]}
            for report in self.reports
        ]


def inspect_media_list(raw: Any, kind: MediaKind) -> MediaReport:
    """Validate raw media input and report every dropped entry with its reason."""
    kind = MediaKind(kind)
    report = MediaReport(kind=kind)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return report

    value = raw
    if isinstance(raw, str):
        try:
            value = json.loads(raw)
        except ValueError:
            report.rejected.append(RejectedEntry(None, raw, RejectReason.MALFORMED_JSON))
            return report

    if not isinstance(value, (list, tuple)):
        report.rejected.append(RejectedEntry(None, value, RejectReason.NOT_A_LIST))
        return report

    predicate = LINK_PREDICATES[kind]
    for index, entry in enumerate(value):
        if entry is None or entry is False or (isinstance(entry, str) and not entry.strip()):
            report.rejected.append(RejectedEntry(index, entry, RejectReason.BLANK))
        elif not isinstance(entry, str):
            report.rejected.append(RejectedEntry(index, entry, RejectReason.NOT_A_STRING))
        elif not predicate(entry):
            report.rejected.append(RejectedEntry(index, entry, RejectReason.WRONG_HOST))
        else:
            report.accepted.append(entry)
    return report


def normalize_media_list(raw: Any, kind: MediaKind) -> List[str]:
    """Lenient normalization: invalid input degrades to dropped entries, never an error."""
    return inspect_media_list(raw, kind).accepted


def normalize_media_fields(values: Dict[MediaKind, Any], strict: bool = False) -> Dict[MediaKind, List[str]]:
    reports = [inspect_media_list(raw, kind) for kind, raw in values.items()]
    if strict and not all(report.ok for report in reports):
        raise MediaValidationError(reports)
    return {report.kind: report.accepted for report in reports}


def encode_media_list(urls: Optional[List[str]]) -> str:
    return json.dumps(list(urls or []))


def decode_json_list(raw: Any) -> list:
    """Read a JSON text column that should hold a list; anything else is empty."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return raw
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return []
    return value if isinstance(value, list) else []

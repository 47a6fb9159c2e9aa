"""Parse and render JSON documents, and read/write them on disk."""

from __future__ import annotations

import json
import os
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from pydantic import TypeAdapter, ValidationError

from .schema import CertificateResponsePayload, DomainPayload
from .translator import domains_from_payload, domains_to_document

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ldapmerge.domain.model import Domain

log = getLogger(__name__)

OUTPUT_INDENT: Final[int] = 4
OUTPUT_FILE_MODE: Final[int] = 0o600

_DOMAIN_LIST = TypeAdapter(list[DomainPayload])


class InvalidPayloadError(ValueError):
    """Raised when a document is not valid JSON or does not match its schema."""

    def __init__(self, source: str, detail: str) -> None:
        super().__init__(f"Invalid {source}: {detail}")
        self.source = source
        self.detail = detail


class PayloadFileError(RuntimeError):
    """Raised when a payload file cannot be read or written."""


def parse_domains(raw: str | bytes, *, source: str = "initial domains") -> list[Domain]:
    try:
        payloads = _DOMAIN_LIST.validate_json(raw)
    except ValidationError as exc:
        raise InvalidPayloadError(source, _summarise(exc)) from exc
    return domains_from_payload(payloads)


def parse_certificate_response(
    raw: str | bytes, *, source: str = "certificate response"
) -> CertificateResponsePayload:
    try:
        return CertificateResponsePayload.model_validate_json(raw)
    except ValidationError as exc:
        raise InvalidPayloadError(source, _summarise(exc)) from exc


def dump_domains(domains: Iterable[Domain], *, compact: bool = False) -> str:
    document = domains_to_document(domains)
    if compact:
        return json.dumps(document, ensure_ascii=False, separators=(",", ":"))
    return json.dumps(document, ensure_ascii=False, indent=OUTPUT_INDENT)


def load_domains_file(path: Path | str) -> list[Domain]:
    return parse_domains(_read(path, "initial"), source=f"initial file {path}")


def load_certificate_response_file(path: Path | str) -> CertificateResponsePayload:
    return parse_certificate_response(_read(path, "response"), source=f"response file {path}")


def write_domains_file(
    domains: Iterable[Domain], path: Path | str, *, compact: bool = False
) -> Path:
    """Write ``domains`` to ``path`` with mode 0600."""

    target = Path(path)
    content = dump_domains(domains, compact=compact)
    try:
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, OUTPUT_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.write("\n")
        target.chmod(OUTPUT_FILE_MODE)
    except OSError as exc:
        raise PayloadFileError(f"Failed to write {target}: {exc}") from exc
    log.debug("Wrote %d bytes to %s", len(content), target)
    return target


def _read(path: Path | str, label: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise PayloadFileError(f"Failed to read {label} file {path}: {exc}") from exc


def _summarise(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "document"
    suffix = f" (and {exc.error_count() - 1} more)" if exc.error_count() > 1 else ""
    return f"{location}: {first['msg']}{suffix}"

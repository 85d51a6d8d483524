"""
Policy reader adapters — load the PRID policy document from a file or URL.

Adapter layer — implements the PolicyReader port. Two document formats:

  YAML (.yml/.yaml):

      policy:
        NO:
          algorithm: default-eIDAS
          persistenceClass: A

  properties (.properties):

      policy.NO.algorithm=default-eIDAS
      policy.NO.persistenceClass=A

  Lines ending in a backslash continue on the next line, and a key without
  a separator reads as an empty value.

The reader only turns the document into raw PolicyEntry objects; checking
the entries is the loader's job. I/O and parse errors are captured into
Result.failure(POLICY_LOAD_ERROR, ...) — no exceptions leak to the caller.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
import structlog
import yaml
from railway import ErrorCode
from railway.result import Result
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from eidas_bridge.domain.models import PolicyEntry

log = structlog.get_logger()

_ALGORITHM_KEYS = ("algorithm",)
_PERSISTENCE_CLASS_KEYS = ("persistenceClass", "persistence-class", "persistence_class")

# policy.NO.algorithm, policy[NO].algorithm, prid.policy.NO.persistenceClass
_PROPERTY_KEY = re.compile(r"(?:prid\.)?policy(?:\.([^.\[\]]+)|\[([^\]]+)\])\.(.+)")

# key=value, key: value or key value; a bare key has an empty value
_PROPERTY_LINE = re.compile(r"([^=:\s]+)(?:\s*[=:\s]\s*(.*))?")


class PolicyFormat(str, Enum):
    YAML = "yaml"
    PROPERTIES = "properties"

    @classmethod
    def for_name(cls, name: str) -> PolicyFormat:
        """Format implied by a file name or URL path; YAML unless it ends in .properties."""
        return cls.PROPERTIES if name.lower().endswith(".properties") else cls.YAML


# ──────────────────────── Parsing ────────────────────────


def parse_policy(text: str, fmt: PolicyFormat) -> dict[str, PolicyEntry]:
    """
    Parse a policy document into raw entries keyed by country code.

    Raises ValueError (or yaml.YAMLError) for malformed documents. A document
    without any policy entries yields an empty dict.
    """
    if fmt is PolicyFormat.PROPERTIES:
        return parse_properties_policy(text)
    return parse_yaml_policy(text)


def parse_yaml_policy(text: str) -> dict[str, PolicyEntry]:
    document = yaml.safe_load(text)
    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise ValueError(f"Expected a mapping at the top of the policy document, got {type(document).__name__}")

    section = document.get("policy")
    if section is None and isinstance(document.get("prid"), Mapping):
        section = document["prid"].get("policy")
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ValueError("'policy' must be a mapping of country code to entry")

    entries: dict[str, PolicyEntry] = {}
    for key, value in section.items():
        country = _yaml_country_key(key)
        if value is None:
            entries[country] = PolicyEntry()
            continue
        if not isinstance(value, Mapping):
            raise ValueError(f"Policy entry for country {country} must be a mapping")
        entries[country] = PolicyEntry(
            algorithm=_first_value(value, _ALGORITHM_KEYS),
            persistence_class=_first_value(value, _PERSISTENCE_CLASS_KEYS),
        )
    return entries


def _yaml_country_key(key: Any) -> str:
    # YAML 1.1 reads an unquoted NO as boolean false.
    if key is False:
        return "NO"
    return str(key)


def _first_value(entry: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = entry.get(key)
        if value is not None:
            return str(value)
    return None


def _logical_lines(text: str) -> list[str]:
    # A line ending in an odd number of backslashes continues on the next one.
    lines: list[str] = []
    pending = ""
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not pending and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2:
            pending += line[:-1]
            continue
        lines.append(pending + line)
        pending = ""
    if pending:
        lines.append(pending)
    return lines


def parse_properties_policy(text: str) -> dict[str, PolicyEntry]:
    fields: dict[str, dict[str, str]] = {}
    for line in _logical_lines(text):
        match = _PROPERTY_LINE.fullmatch(line.strip())
        if match is None:
            raise ValueError(f"Malformed property line: {line!r}")
        key, value = match.group(1), (match.group(2) or "").strip()

        key_match = _PROPERTY_KEY.fullmatch(key)
        if key_match is None:
            log.debug("policy_reader.property_ignored", key=key)
            continue
        country = key_match.group(1) or key_match.group(2)
        fields.setdefault(country, {})[key_match.group(3)] = value

    return {
        country: PolicyEntry(
            algorithm=_first_value(values, _ALGORITHM_KEYS),
            persistence_class=_first_value(values, _PERSISTENCE_CLASS_KEYS),
        )
        for country, values in fields.items()
    }


# ──────────────────────── Readers ────────────────────────


class FilePolicyReader:
    """
    Read the policy document from the local file system.

    Implements the PolicyReader port. The file is read again on every call,
    so edits are picked up by the next reload.
    """

    def __init__(self, path: Path, fmt: PolicyFormat | None = None) -> None:
        self._path = path
        self._format = fmt or PolicyFormat.for_name(path.name)

    @property
    def location(self) -> str:
        return str(self._path)

    def read(self) -> Result[Mapping[str, PolicyEntry]]:
        return Result.from_computation(
            lambda: self._do_read(),
            ErrorCode.POLICY_LOAD_ERROR,
            f"Failed to read PRID policy from {self._path}",
        )

    def _do_read(self) -> Mapping[str, PolicyEntry]:
        entries = parse_policy(self._path.read_text(encoding="utf-8"), self._format)
        log.debug("policy_reader.file_read", path=str(self._path), entries=len(entries))
        return entries


class HttpPolicyReader:
    """
    Fetch the policy document via HTTP GET.

    Implements the PolicyReader port.
    Uses tenacity retry on transient network errors only; HTTP error
    statuses fail the read immediately.
    """

    def __init__(self, url: str, timeout: int = 30, fmt: PolicyFormat | None = None) -> None:
        self._url = url
        self._timeout = timeout
        self._format = fmt or PolicyFormat.for_name(urlparse(url).path)

    @property
    def location(self) -> str:
        return self._url

    def read(self) -> Result[Mapping[str, PolicyEntry]]:
        return Result.from_computation(
            lambda: parse_policy(self._do_fetch(), self._format),
            ErrorCode.POLICY_LOAD_ERROR,
            f"Failed to fetch PRID policy from {self._url}",
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=0.1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    def _do_fetch(self) -> str:
        """HTTP GET with retry — exceptions caught by from_computation."""
        with httpx.Client(timeout=self._timeout) as client:
            response = client.get(self._url)
            response.raise_for_status()
            log.info("policy_reader.fetched", url=self._url, size_bytes=len(response.content))
            return response.text


def create_policy_reader(location: str, timeout: int = 30) -> FilePolicyReader | HttpPolicyReader:
    """
    Pick the reader for a policy location.

    http(s):// URLs are fetched, file: URLs and plain paths are read from disk.
    """
    scheme = urlparse(location).scheme.lower()
    if scheme in ("http", "https"):
        return HttpPolicyReader(location, timeout=timeout)
    if scheme == "file":
        return FilePolicyReader(Path(urlparse(location).path))
    return FilePolicyReader(Path(location))

"""Data model for the ORCID v3.0 public API: work summaries and work details.

Each class mirrors one JSON object of the API. ``from_dict`` validates and
builds an instance from decoded JSON; ``to_dict`` produces the JSON form with
the exact ORCID field names, leaving out optional fields that are absent.
"""

from __future__ import annotations

import json
from dataclasses import MISSING, dataclass, field, fields
from typing import IO, Any, Callable, Generic, Iterable, TypeVar

T = TypeVar("T")
R = TypeVar("R")

_U64_MAX = 2**64 - 1


class ModelError(ValueError):
    """Raised when JSON data does not match the ORCID model."""

    def __init__(self, message: str, segments: Iterable[str | int] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.segments: tuple[str | int, ...] = tuple(segments)

    @property
    def path(self) -> str:
        """Location of the error, e.g. ``group[0].work-summary[1].put-code``."""
        parts: list[str] = []
        for segment in self.segments:
            if isinstance(segment, int):
                parts.append(f"[{segment}]")
            else:
                parts.append(f".{segment}" if parts else segment)
        return "".join(parts)

    def within(self, segment: str | int) -> ModelError:
        """Return the same error located one level deeper, under ``segment``."""
        return ModelError(self.message, (segment, *self.segments))

    def __str__(self) -> str:
        path = self.path
        return f"{path}: {self.message}" if path else self.message


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

_JSON_NAMES = ((bool, "boolean"), ((int, float), "number"), (str, "string"),
               (list, "array"), (dict, "object"))


def _describe(value: Any) -> str:
    if value is None:
        return "null"
    return next((name for kind, name in _JSON_NAMES if isinstance(value, kind)),
                type(value).__name__)


def _expect(kind: type, what: str) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        if not isinstance(value, kind) or (kind is not bool and isinstance(value, bool)):
            raise ModelError(f"invalid type: {_describe(value)}, expected {what}")
        return value

    return check


_object = _expect(dict, "an object")
_string = _expect(str, "a string")
_array = _expect(list, "an array")
_integer = _expect(int, "an unsigned integer")


def _u64(value: Any) -> int:
    if not 0 <= _integer(value) <= _U64_MAX:
        raise ModelError(f"invalid value: {value}, expected an unsigned 64-bit integer")
    return value


def _nested(segment: str | int, parse: Callable[[Any], T], value: Any) -> T:
    try:
        return parse(value)
    except ModelError as exc:
        raise exc.within(segment) from None


def _list_of(parse: Callable[[Any], T]) -> Callable[[Any], list[T]]:
    def parse_list(value: Any) -> list[T]:
        return [_nested(index, parse, item) for index, item in enumerate(_array(value))]

    return parse_list


def _string_value(data: Any) -> Value[str]:
    return Value(_nested("value", _string, Value.from_dict(data).value))


def _u64_value(data: Any) -> Value[int]:
    return Value(_nested("value", _u64, Value.from_dict(data).value))


def _dump(value: Any) -> Any:
    if isinstance(value, list):
        return [_dump(item) for item in value]
    return value.to_dict() if hasattr(value, "to_dict") else value


def null_to_empty_list(value: Any) -> list[Any]:
    """Treat a JSON ``null`` (``None``) as an empty list."""
    return [] if value is None else list(_array(value))


def _load_json(reader: IO[Any]) -> Any:
    try:
        return json.load(reader)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ModelError(str(exc)) from exc


def _f(key: str | None, parse: Callable[[Any], Any], optional: bool = False) -> Any:
    """Declare a JSON field; a ``None`` key merges the object into its parent."""
    return field(default=None if optional else MISSING,
                 metadata={"key": key, "parse": parse})


def _parse_record(cls: type[R], data: Any) -> R:
    """Build a dataclass instance from a JSON object using its field specs."""
    obj = _object(data)
    values: dict[str, Any] = {}
    for spec in fields(cls):  # type: ignore[arg-type]
        key, parse = spec.metadata["key"], spec.metadata["parse"]
        if key is None:
            values[spec.name] = parse(obj)
        elif spec.default is MISSING:
            if key not in obj:
                raise ModelError(f"missing field `{key}`")
            values[spec.name] = _nested(key, parse, obj[key])
        elif obj.get(key) is not None:
            values[spec.name] = _nested(key, parse, obj[key])
    return cls(**values)


def _dump_record(record: Any) -> dict[str, Any]:
    """Produce the JSON object of a dataclass instance from its field specs."""
    result: dict[str, Any] = {}
    for spec in fields(record):
        value, key = getattr(record, spec.name), spec.metadata["key"]
        if key is None:
            result.update(_dump(value))
        elif value is not None:
            result[key] = _dump(value)
    return result


# ---------------------------------------------------------------------------
# Leaf types
# ---------------------------------------------------------------------------


@dataclass
class Value(Generic[T]):
    """The ``{"value": ...}`` wrapper used throughout the ORCID API."""

    value: T

    @classmethod
    def from_dict(cls, data: Any) -> Value[Any]:
        obj = _object(data)
        if "value" not in obj:
            raise ModelError("missing field `value`")
        return cls(obj["value"])

    def to_dict(self) -> dict[str, Any]:
        return {"value": _dump(self.value)}


@dataclass
class ExternalId:
    external_id_type: str = _f("external-id-type", _string)
    external_id_value: str = _f("external-id-value", _string)
    external_id_relationship: str = _f("external-id-relationship", _string)
    external_id_url: Value[str] | None = _f("external-id-url", _string_value, True)

    @classmethod
    def from_dict(cls, data: Any) -> ExternalId:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


@dataclass
class SourceRef:
    uri: str | None = _f("uri", _string, True)
    path: str | None = _f("path", _string, True)
    host: str | None = _f("host", _string, True)

    @classmethod
    def from_dict(cls, data: Any) -> SourceRef:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


@dataclass
class Source:
    source_orcid: SourceRef | None = _f("source-orcid", SourceRef.from_dict, True)
    source_client_id: SourceRef | None = _f("source-client-id", SourceRef.from_dict, True)
    source_name: Value[str] | None = _f("source-name", _string_value, True)

    @classmethod
    def from_dict(cls, data: Any) -> Source:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


@dataclass
class TranslatedTitle:
    value: str = _f("value", _string)
    language_code: str = _f("language-code", _string)

    @classmethod
    def from_dict(cls, data: Any) -> TranslatedTitle:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


@dataclass
class Title:
    title: Value[str] = _f("title", _string_value)
    subtitle: Value[str] | None = _f("subtitle", _string_value, True)
    translated_title: TranslatedTitle | None = _f(
        "translated-title", TranslatedTitle.from_dict, True
    )

    @classmethod
    def from_dict(cls, data: Any) -> Title:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


@dataclass
class PublicationDate:
    year: Value[str] = _f("year", _string_value)
    month: Value[str] | None = _f("month", _string_value, True)
    day: Value[str] | None = _f("day", _string_value, True)
    media_type: str | None = _f("media-type", _string, True)

    @classmethod
    def from_dict(cls, data: Any) -> PublicationDate:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


@dataclass
class ContributorAttributes:
    contributor_sequence: str | None = _f("contributor-sequence", _string, True)
    contributor_role: str | None = _f("contributor-role", _string, True)

    @classmethod
    def from_dict(cls, data: Any) -> ContributorAttributes:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


@dataclass
class Contributor:
    contributor_orcid: SourceRef | None = _f("contributor-orcid", SourceRef.from_dict, True)
    credit_name: Value[str] | None = _f("credit-name", _string_value, True)
    contributor_email: Value[str] | None = _f("contributor-email", _string_value, True)
    contributor_attributes: ContributorAttributes | None = _f(
        "contributor-attributes", ContributorAttributes.from_dict, True
    )

    @classmethod
    def from_dict(cls, data: Any) -> Contributor:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


# ---------------------------------------------------------------------------
# Work summary / detail
# ---------------------------------------------------------------------------


@dataclass
class ExternalIds:
    external_id: list[ExternalId] | None = _f(
        "external-id", _list_of(ExternalId.from_dict), True
    )

    @classmethod
    def from_dict(cls, data: Any) -> ExternalIds:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


@dataclass
class OrcidWorkSummary:
    put_code: int = _f("put-code", _u64)
    created_date: Value[int] = _f("created-date", _u64_value)
    last_modified_date: Value[int] = _f("last-modified-date", _u64_value)
    source: Source = _f("source", Source.from_dict)
    title: Title = _f("title", Title.from_dict)
    external_ids: ExternalIds = _f("external-ids", ExternalIds.from_dict)
    work_type: str = _f("type", _string)
    visibility: str = _f("visibility", _string)
    path: str = _f("path", _string)
    publication_date: PublicationDate | None = _f(
        "publication-date", PublicationDate.from_dict, True
    )
    display_index: str | None = _f("display-index", _string, True)

    @classmethod
    def from_dict(cls, data: Any) -> OrcidWorkSummary:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


@dataclass
class Citation:
    citation_type: str = _f("citation-type", _string)
    citation_value: str = _f("citation-value", _string)

    @classmethod
    def from_dict(cls, data: Any) -> Citation:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


@dataclass
class Contributors:
    contributor: list[Contributor] | None = _f(
        "contributor", _list_of(Contributor.from_dict), True
    )

    @classmethod
    def from_dict(cls, data: Any) -> Contributors:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


@dataclass
class OrcidWorkDetail:
    """A full work record: the summary fields plus the detail-only fields."""

    summary: OrcidWorkSummary = _f(None, OrcidWorkSummary.from_dict)
    journal_title: Value[str] | None = _f("journal-title", _string_value, True)
    short_description: str | None = _f("short-description", _string, True)
    citation: Citation | None = _f("citation", Citation.from_dict, True)
    url: Value[str] | None = _f("url", _string_value, True)
    contributors: Contributors | None = _f("contributors", Contributors.from_dict, True)
    language_code: str | None = _f("language-code", _string, True)
    country: Value[str] | None = _f("country", _string_value, True)

    @classmethod
    def from_dict(cls, data: Any) -> OrcidWorkDetail:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)

    @classmethod
    def from_reader(cls, reader: IO[Any]) -> OrcidWorkDetail:
        return cls.from_dict(_load_json(reader))


# ---------------------------------------------------------------------------
# /works top-level list
# ---------------------------------------------------------------------------


@dataclass
class WorkGroup:
    last_modified_date: Value[int] = _f("last-modified-date", _u64_value)
    external_ids: ExternalIds = _f("external-ids", ExternalIds.from_dict)
    work_summary: list[OrcidWorkSummary] = _f(
        "work-summary", _list_of(OrcidWorkSummary.from_dict)
    )

    @classmethod
    def from_dict(cls, data: Any) -> WorkGroup:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)


@dataclass
class OrcidWorks:
    last_modified_date: Value[int] = _f("last-modified-date", _u64_value)
    group: list[WorkGroup] = _f("group", _list_of(WorkGroup.from_dict))
    path: str = _f("path", _string)

    @classmethod
    def from_dict(cls, data: Any) -> OrcidWorks:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)

    @classmethod
    def from_reader(cls, reader: IO[Any]) -> OrcidWorks:
        return cls.from_dict(_load_json(reader))


# ---------------------------------------------------------------------------
# On-disk container
# ---------------------------------------------------------------------------


@dataclass
class OrcidWorkDetailFile:
    """On-disk JSON wrapper: ``{"records": [...]}``."""

    records: list[OrcidWorkDetail] = _f("records", _list_of(OrcidWorkDetail.from_dict))

    @classmethod
    def from_dict(cls, data: Any) -> OrcidWorkDetailFile:
        return _parse_record(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _dump_record(self)

    @classmethod
    def from_reader(cls, reader: IO[Any]) -> OrcidWorkDetailFile:
        return cls.from_dict(_load_json(reader))

    def into_map(self) -> dict[int, OrcidWorkDetail]:
        """Map put-code to detail, ordered by put-code; later records win."""
        by_code = {record.summary.put_code: record for record in self.records}
        return dict(sorted(by_code.items()))
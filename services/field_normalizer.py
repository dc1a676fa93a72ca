"""Map loosely structured provider payloads onto ``ExtractedFields``.

Providers rename keys between API generations, so every target field probes
an ordered list of synonyms and keeps the first usable value. List entries
may be bare scalars or objects; both resolve to the same entry shape.
Nothing in here raises on bad input: unknown shapes map to absent fields.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Callable, Dict, List, Optional, TypeVar

from models.extracted_fields import (
    EducationEntry,
    ExperienceEntry,
    ExtractedFields,
    LanguageEntry,
)
from utils.number_parsing import parse_count


T = TypeVar("T")

FULL_NAME_KEYS = ("name", "full_name", "fullName")
HEADLINE_KEYS = ("headline", "title", "position")
CURRENT_POSITION_KEYS = ("current_position", "current_title", "job_title")
CURRENT_COMPANY_KEYS = ("current_company", "current_company_name", "company")
LOCATION_KEYS = ("location", "city", "geo")
COUNTRY_KEYS = ("country", "country_code", "country_name")
EMAIL_KEYS = ("email", "email_address")
PHONE_KEYS = ("phone", "phone_number")
WEBSITE_KEYS = ("website", "websites", "personal_website")
EXPERIENCE_KEYS = ("experience", "experiences", "positions")
EDUCATION_KEYS = ("education", "educations", "schools")
SKILL_KEYS = ("skills",)
LANGUAGE_KEYS = ("languages",)
CONNECTIONS_KEYS = ("connections_count", "connections", "connection_count")
PROFILE_URL_KEYS = ("profile_url", "url", "linkedin_url", "input_url")
PHOTO_URL_KEYS = ("photo_url", "image", "avatar", "profile_pic_url")

NAME_KEYS = ("name", "title")
NESTED_LOCATION_KEYS = ("name", "title", "city")
START_KEYS = ("start_date", "starts_at", "start")
END_KEYS = ("end_date", "ends_at", "end")


def _text(value: Any) -> Optional[str]:
    """Scalar to stripped text; containers, booleans and blanks become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, (int, float)):
        try:
            return str(value)
        except ValueError:
            # int too long for str conversion
            return None
    return None


def _first(data: Mapping, keys: Sequence[str], convert: Callable[[Any], Optional[T]]) -> Optional[T]:
    for key in keys:
        if key not in data:
            continue
        converted = convert(data[key])
        if converted is not None:
            return converted
    return None


def _first_text(data: Mapping, keys: Sequence[str]) -> Optional[str]:
    return _first(data, keys, _text)


def _text_or_name(value: Any) -> Optional[str]:
    """Text value, or the name/title of a nested object (``{"name": "Acme"}``)."""
    if isinstance(value, Mapping):
        return _first_text(value, NAME_KEYS)
    if isinstance(value, list):
        for item in value:
            found = _text_or_name(item)
            if found:
                return found
        return None
    return _text(value)


def _date(value: Any) -> Optional[str]:
    # {"year": 2020, "month": 3} is common in newer payloads
    if isinstance(value, Mapping):
        year = _text(value.get("year"))
        if not year:
            return None
        month = parse_count(value.get("month"))
        return f"{year}-{month:02d}" if month else year
    return _text(value)


def _experience_entry(item: Any) -> Optional[ExperienceEntry]:
    if isinstance(item, Mapping):
        entry = ExperienceEntry(
            title=_first_text(item, ("title", "position", "role")),
            company=_first(item, ("company", "company_name", "organization"), _text_or_name),
            start_date=_first(item, START_KEYS, _date),
            end_date=_first(item, END_KEYS, _date),
            location=_first(item, ("location",), _text_or_name),
            description=_first_text(item, ("description", "description_html", "summary")),
        )
        return entry if entry.title or entry.company else None
    title = _text(item)
    return ExperienceEntry(title=title) if title else None


def _education_entry(item: Any) -> Optional[EducationEntry]:
    if isinstance(item, Mapping):
        entry = EducationEntry(
            school=_first(item, ("school", "school_name", "institution", "title", "name"), _text_or_name),
            degree=_first_text(item, ("degree", "degree_name")),
            field=_first_text(item, ("field", "field_of_study", "major")),
            start_date=_first(item, START_KEYS, _date),
            end_date=_first(item, END_KEYS, _date),
        )
        return entry if entry.school or entry.degree else None
    school = _text(item)
    return EducationEntry(school=school) if school else None


def _skill(item: Any) -> Optional[str]:
    if isinstance(item, Mapping):
        return _first_text(item, ("name", "title", "skill"))
    return _text(item)


def _language_entry(item: Any) -> Optional[LanguageEntry]:
    if isinstance(item, Mapping):
        language = _first_text(item, ("language", "name", "title"))
        if not language:
            return None
        return LanguageEntry(language=language, proficiency=_first_text(item, ("proficiency", "level", "subtitle")))
    language = _text(item)
    return LanguageEntry(language=language) if language else None


def _entries(data: Mapping, keys: Sequence[str], build: Callable[[Any], Optional[T]]) -> Optional[List[T]]:
    for key in keys:
        if key not in data or not isinstance(data[key], list):
            continue
        built = [build(item) for item in data[key]]
        return [entry for entry in built if entry is not None]
    return None


def _position_field(data: Mapping, key: str) -> Optional[str]:
    # current_position may be a string or {"title": ..., "company": ...}
    for name in CURRENT_POSITION_KEYS:
        value = data.get(name)
        if isinstance(value, Mapping):
            found = _text_or_name(value.get(key))
            if found:
                return found
    return None


def _text_or_url(value: Any) -> Optional[str]:
    # websites: ["https://..."] or [{"url": "https://..."}]
    if isinstance(value, list):
        for item in value:
            found = _first_text(item, ("url", "link")) if isinstance(item, Mapping) else _text(item)
            if found:
                return found
        return None
    if isinstance(value, Mapping):
        return _first_text(value, ("url", "link"))
    return _text(value)


def _root(raw: Any) -> Mapping:
    if isinstance(raw, Mapping):
        return raw
    if isinstance(raw, list):
        for item in raw:
            if isinstance(item, Mapping):
                return item
    return {}


def normalize(raw: Any) -> ExtractedFields:
    """Project a raw provider payload onto ``ExtractedFields``. Total: never raises."""
    data = _root(raw)
    location = data.get("location")

    fields: Dict[str, Any] = {
        "full_name": _first_text(data, FULL_NAME_KEYS),
        "headline": _first_text(data, HEADLINE_KEYS),
        "current_position": _position_field(data, "title") or _first_text(data, CURRENT_POSITION_KEYS),
        "current_company": _position_field(data, "company") or _first(data, CURRENT_COMPANY_KEYS, _text_or_name),
        "location": (
            _first_text(location, NESTED_LOCATION_KEYS) if isinstance(location, Mapping) else None
        ) or _first_text(data, LOCATION_KEYS),
        "country": (
            _first_text(location, COUNTRY_KEYS) if isinstance(location, Mapping) else None
        ) or _first_text(data, COUNTRY_KEYS),
        "email": _first_text(data, EMAIL_KEYS),
        "phone": _first_text(data, PHONE_KEYS),
        "website": _first(data, WEBSITE_KEYS, _text_or_url),
        "experience": _entries(data, EXPERIENCE_KEYS, _experience_entry),
        "education": _entries(data, EDUCATION_KEYS, _education_entry),
        "skills": _entries(data, SKILL_KEYS, _skill),
        "languages": _entries(data, LANGUAGE_KEYS, _language_entry),
        "connections_count": _first(data, CONNECTIONS_KEYS, parse_count),
        "profile_url": _first_text(data, PROFILE_URL_KEYS),
        "photo_url": _first_text(data, PHOTO_URL_KEYS),
    }
    return ExtractedFields(**fields)


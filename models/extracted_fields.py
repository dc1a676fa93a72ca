from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ExperienceEntry(BaseModel):
    title: str | None = None
    company: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    location: str | None = None
    description: str | None = None

    model_config = ConfigDict(extra="forbid")


class EducationEntry(BaseModel):
    school: str | None = None
    degree: str | None = None
    field: str | None = None
    start_date: str | None = None
    end_date: str | None = None

    model_config = ConfigDict(extra="forbid")


class LanguageEntry(BaseModel):
    language: str
    proficiency: str | None = None

    model_config = ConfigDict(extra="forbid")


class ExtractedFields(BaseModel):
    """Provider-agnostic projection of a professional profile.

    Every field is optional: the provider payload is untrusted and only
    partially structured.
    """

    full_name: str | None = None
    headline: str | None = None
    current_position: str | None = None
    current_company: str | None = None
    location: str | None = None
    country: str | None = None
    email: str | None = None
    phone: str | None = None
    website: str | None = None
    experience: list[ExperienceEntry] | None = None
    education: list[EducationEntry] | None = None
    skills: list[str] | None = None
    languages: list[LanguageEntry] | None = None
    connections_count: int | None = Field(default=None, ge=0)
    profile_url: str | None = None
    photo_url: str | None = None

    model_config = ConfigDict(extra="forbid")

    def brief(self) -> dict[str, int]:
        return {
            "experience_count": len(self.experience or []),
            "education_count": len(self.education or []),
            "skills_count": len(self.skills or []),
        }

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PlatformModel(BaseModel):
    """Platform API payloads use camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Speaker(PlatformModel):
    id: int
    name: str
    type: str
    party: str
    organization: str


class Segment(PlatformModel):
    id: int
    speaker: Speaker | None = None
    start_time: str
    end_time: str
    transcript: str
    transcript_en: str | None = None
    thumbnail_url: str


class Committee(PlatformModel):
    name: str
    acronym: str


class Meeting(PlatformModel):
    id: int
    meeting_date: str
    committee: Committee
    parlvu_meeting_id: int
    parlvu_link: str
    meeting_start_time: str
    has_completed_processing: bool
    summary: str


class AlertMatch(PlatformModel):
    id: int
    alert: int
    phrase: str
    external_user_id: str
    source: str
    matched_text: str
    start_position: int
    end_position: int
    created_at: str
    segment: Segment


class FullMeetingResponse(Meeting):
    alert_matches: list[AlertMatch] = Field(default_factory=list)


class MatchGroup(PlatformModel):
    phrase: str
    matches: list[AlertMatch] = Field(default_factory=list)


class GazetteEdition(PlatformModel):
    id: int
    edition_date: str
    volume: int
    issue_number: int
    edition_url: str


class GazetteItem(PlatformModel):
    id: int
    gazette_id: str
    content_text: str
    edition: GazetteEdition
    item_title: str
    item_url: str
    section_type: str
    department_agency: str


class GazetteAlertMatch(PlatformModel):
    id: int
    alert: int
    phrase: str
    external_user_id: str
    source: Literal["canada_gazette"] = "canada_gazette"
    matched_text: str
    start_position: int
    end_position: int
    created_at: str
    gazette_item: GazetteItem


class FullGazetteEditionResponse(GazetteEdition):
    alert_matches: list[GazetteAlertMatch] = Field(default_factory=list)


class GovtRelease(PlatformModel):
    id: int
    title: str
    url: str
    department: str
    published_at: str
    content_text: str
    summary: str | None = None


class GovtReleaseAlertMatch(PlatformModel):
    id: int
    alert: int
    phrase: str
    external_user_id: str
    source: Literal["govt_release"] = "govt_release"
    matched_text: str
    start_position: int
    end_position: int
    created_at: str
    govt_release: GovtRelease

from __future__ import annotations

import json
from typing import Any, Literal, Union

from pydantic import BaseModel, ValidationError

from hillmonitor.domain.errors import InvalidRequestError


class MeetingProcessedData(BaseModel):
    meeting_id: int


class GazetteProcessedData(BaseModel):
    edition_id: int


class GovtReleaseProcessedData(BaseModel):
    release_id: int


class MeetingProcessedEvent(BaseModel):
    event: Literal["meeting.processed"]
    data: MeetingProcessedData


class GazetteProcessedEvent(BaseModel):
    event: Literal["gazette.processed"]
    data: GazetteProcessedData


class GovtReleaseProcessedEvent(BaseModel):
    event: Literal["govt_release.processed"]
    data: GovtReleaseProcessedData


class UnknownWebhookEvent(BaseModel):
    """Any syntactically valid payload whose event tag is not recognised."""
    event: str
    data: Any = None


WebhookPayload = Union[
    MeetingProcessedEvent,
    GazetteProcessedEvent,
    GovtReleaseProcessedEvent,
    UnknownWebhookEvent,
]

WEBHOOK_EVENT_MODELS: dict[str, type[BaseModel]] = {
    "meeting.processed": MeetingProcessedEvent,
    "gazette.processed": GazetteProcessedEvent,
    "govt_release.processed": GovtReleaseProcessedEvent,
}


def parse_webhook_payload(raw_body: str | bytes) -> WebhookPayload:
    """Parse a verified webhook body into exactly one payload variant."""
    try:
        payload = json.loads(raw_body)
    except ValueError as exc:
        raise InvalidRequestError("Invalid JSON payload") from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("event"), str):
        raise InvalidRequestError("Invalid JSON payload")

    model = WEBHOOK_EVENT_MODELS.get(payload["event"], UnknownWebhookEvent)
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidRequestError("Invalid JSON payload") from exc

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

import events
from errors import MalformedMessage


class OfferPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")
    offer: Any


class AnswerPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")
    answer: Any


class CandidatePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")
    candidate: Any


class JoinAsPublisher(BaseModel):
    type: Literal[events.JOIN_AS_PUBLISHER]
    data: str


class JoinAsViewer(BaseModel):
    type: Literal[events.JOIN_AS_VIEWER]
    data: str


class StartStream(BaseModel):
    type: Literal[events.START_STREAM]
    data: str


class StopStream(BaseModel):
    type: Literal[events.STOP_STREAM]
    data: str


class LeaveRoom(BaseModel):
    type: Literal[events.LEAVE_ROOM]
    data: str


class WebRTCOffer(BaseModel):
    type: Literal[events.WEBRTC_OFFER]
    data: OfferPayload


class WebRTCAnswer(BaseModel):
    type: Literal[events.WEBRTC_ANSWER]
    data: AnswerPayload


class IceCandidate(BaseModel):
    type: Literal[events.ICE_CANDIDATE]
    data: CandidatePayload


InboundMessage = Annotated[
    Union[
        JoinAsPublisher,
        JoinAsViewer,
        StartStream,
        StopStream,
        LeaveRoom,
        WebRTCOffer,
        WebRTCAnswer,
        IceCandidate,
    ],
    Field(discriminator="type"),
]

inbound_adapter = TypeAdapter(InboundMessage)


def parse_message(raw: str):
    """Parse one inbound text frame into its typed message model.

    Raises MalformedMessage for invalid JSON, unknown event types and
    payloads of the wrong shape.
    """
    try:
        return inbound_adapter.validate_json(raw)
    except ValidationError as e:
        raise MalformedMessage(f"Invalid signaling frame: {e.error_count()} error(s)") from e


def outbound(event: str, data: Any = None) -> dict:
    return {"type": event, "data": data}

"""Voice command schemas."""

from pydantic import BaseModel, Field


class TranscriptRequest(BaseModel):
    transcript: str = Field(..., max_length=1000)


class VoiceCommandResponse(BaseModel):
    action: str
    value: str | None = None


class VoiceHelpResponse(BaseModel):
    messages: list[str]


class SpeechErrorResponse(BaseModel):
    code: str
    message: str

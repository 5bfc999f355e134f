"""Voice command API endpoints.

Transcription happens on the device; these endpoints only interpret
transcripts and describe recognition errors.
"""

from fastapi import APIRouter

from yafoy.schemas.voice import (
    SpeechErrorResponse,
    TranscriptRequest,
    VoiceCommandResponse,
    VoiceHelpResponse,
)
from yafoy.utils.voice_commands import HELP_MESSAGES, describe_speech_error, match_voice_command

router = APIRouter()


@router.post("/commands", response_model=VoiceCommandResponse)
async def interpret_transcript(request: TranscriptRequest):
    """Match a transcript against the command table."""
    command = match_voice_command(request.transcript)
    return VoiceCommandResponse(action=command.action, value=command.value)


@router.get("/help", response_model=VoiceHelpResponse)
async def voice_help():
    return VoiceHelpResponse(messages=HELP_MESSAGES)


@router.get("/errors/{code}", response_model=SpeechErrorResponse)
async def speech_error(code: str):
    return SpeechErrorResponse(code=code, message=describe_speech_error(code))

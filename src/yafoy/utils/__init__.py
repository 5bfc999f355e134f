"""Pure helpers with no I/O: content policy, voice commands, stream decoding."""

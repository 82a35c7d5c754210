"""Session message shape and the speaker grouping shared by the pipeline."""

from collections.abc import Iterable

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter


class SessionMessage(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    speaker: str = Field(validation_alias=AliasChoices("speaker", "speakerLabel", "speaker_label"))
    content: str = Field(
        default="", validation_alias=AliasChoices("content", "textContent", "text_content")
    )


_message_list = TypeAdapter(list[SessionMessage])


def parse_messages(messages: Iterable) -> list[SessionMessage]:
    """Validate raw session messages.

    Raises TypeError for a non-list input and pydantic.ValidationError for a
    malformed element. Neither is retried or swallowed.
    """
    if not isinstance(messages, (list, tuple)):
        raise TypeError(f"messages must be a list, got {type(messages).__name__}")
    return _message_list.validate_python(list(messages))


def group_by_speaker(messages: list[SessionMessage]) -> dict[str, list[str]]:
    """Collect message content per speaker, preserving first-seen speaker order."""
    grouped: dict[str, list[str]] = {}
    for msg in messages:
        grouped.setdefault(msg.speaker, []).append(msg.content)
    return grouped


def format_transcript(messages: list[SessionMessage]) -> str:
    """Render one ``Speaker: text`` line per message.

    Line breaks inside a message are folded into spaces so every line keeps
    its speaker prefix.
    """
    return "\n".join(f"{msg.speaker}: {' '.join(msg.content.split())}" for msg in messages)

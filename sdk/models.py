"""Pydantic data models for the subset of the Telegram Bot API used by tgpoll.

Every class mirrors an object from https://core.telegram.org/bots/api and is
used by :class:`sdk.client.TelegramClient` to validate responses and to
serialise request bodies.  The schema is an external, versioned contract:
fields the platform adds later are dropped by most models, but
:class:`Update` keeps them as extras so unmodelled update kinds still reach
the handlers as :attr:`UpdateKind.UNKNOWN`.
"""

from __future__ import annotations

import enum
from typing import Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, Field, model_validator

T = TypeVar("T")


# ── Response envelope ────────────────────────────────────────────────────────


class Response(BaseModel, Generic[T]):
    """Envelope wrapping every Bot API answer.

    ``ok`` is always present.  On failure ``description`` explains the error;
    on success the payload is in ``result``.
    """

    ok: bool
    description: Optional[str] = None
    error_code: Optional[int] = None
    result: Optional[T] = None

    model_config = {"populate_by_name": True}


# ── Available types ──────────────────────────────────────────────────────────


class User(BaseModel):
    """This object represents a Telegram user or bot."""

    id: int
    is_bot: bool = False
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None

    model_config = {"populate_by_name": True}


class Chat(BaseModel):
    """This object represents a chat."""

    id: int
    type: str
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    all_members_are_administrators: Optional[bool] = None

    model_config = {"populate_by_name": True}


class MessageEntity(BaseModel):
    """This object represents one special entity in a text message. For example, hashtags, usernames, URLs, etc."""

    type: str
    offset: int
    length: int
    url: Optional[str] = None
    user: Optional["User"] = None

    model_config = {"populate_by_name": True}


class PhotoSize(BaseModel):
    """This object represents one size of a photo or a file / sticker thumbnail."""

    file_id: str
    file_unique_id: str
    width: int
    height: int
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Animation(BaseModel):
    """This object represents an animation file (GIF or H.264/MPEG-4 AVC video without sound)."""

    file_id: str
    file_unique_id: str
    width: int
    height: int
    duration: int
    thumb: Optional["PhotoSize"] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Audio(BaseModel):
    """This object represents an audio file to be treated as music by the Telegram clients."""

    file_id: str
    file_unique_id: str
    duration: int
    performer: Optional[str] = None
    title: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Document(BaseModel):
    """This object represents a general file (as opposed to photos, voice messages and audio files)."""

    file_id: str
    file_unique_id: str
    thumb: Optional["PhotoSize"] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Sticker(BaseModel):
    """This object represents a sticker."""

    file_id: str
    file_unique_id: str
    width: int
    height: int
    is_animated: bool = False
    thumb: Optional["PhotoSize"] = None
    emoji: Optional[str] = None
    set_name: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Video(BaseModel):
    """This object represents a video file."""

    file_id: str
    file_unique_id: str
    width: int
    height: int
    duration: int
    thumb: Optional["PhotoSize"] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Voice(BaseModel):
    """This object represents a voice note."""

    file_id: str
    file_unique_id: str
    duration: int
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Contact(BaseModel):
    """This object represents a phone contact."""

    phone_number: str
    first_name: str
    last_name: Optional[str] = None
    user_id: Optional[int] = None

    model_config = {"populate_by_name": True}


class Location(BaseModel):
    """This object represents a point on the map."""

    longitude: float
    latitude: float

    model_config = {"populate_by_name": True}


class Venue(BaseModel):
    """This object represents a venue."""

    location: "Location"
    title: str
    address: str
    foursquare_id: Optional[str] = None

    model_config = {"populate_by_name": True}


class Game(BaseModel):
    """This object represents a game. Use BotFather to create and edit games, their short names will act as unique identifiers."""

    title: str
    description: str
    photo: List["PhotoSize"]
    text: Optional[str] = None
    text_entities: Optional[List["MessageEntity"]] = None
    animation: Optional["Animation"] = None

    model_config = {"populate_by_name": True}


class Message(BaseModel):
    """This object represents a message."""

    message_id: int
    date: int
    chat: "Chat"
    from_field: Optional["User"] = Field(None, alias="from")
    forward_from: Optional["User"] = None
    forward_from_chat: Optional["Chat"] = None
    forward_date: Optional[int] = None
    reply_to_message: Optional["Message"] = None
    edit_date: Optional[int] = None
    text: Optional[str] = None
    entities: Optional[List["MessageEntity"]] = None
    audio: Optional["Audio"] = None
    document: Optional["Document"] = None
    game: Optional["Game"] = None
    photo: Optional[List["PhotoSize"]] = None
    sticker: Optional["Sticker"] = None
    video: Optional["Video"] = None
    voice: Optional["Voice"] = None
    caption: Optional[str] = None
    contact: Optional["Contact"] = None
    location: Optional["Location"] = None
    venue: Optional["Venue"] = None
    new_chat_member: Optional["User"] = None
    left_chat_member: Optional["User"] = None
    new_chat_title: Optional[str] = None
    new_chat_photo: Optional[List["PhotoSize"]] = None
    delete_chat_photo: Optional[bool] = None
    group_chat_created: Optional[bool] = None
    supergroup_chat_created: Optional[bool] = None
    channel_chat_created: Optional[bool] = None
    migrate_to_chat_id: Optional[int] = None
    migrate_from_chat_id: Optional[int] = None
    pinned_message: Optional["Message"] = None

    model_config = {"populate_by_name": True}


class InlineQuery(BaseModel):
    """This object represents an incoming inline query. When the user sends an empty query, your bot could return some default or trending results."""

    id: str
    from_field: "User" = Field(..., alias="from")
    query: str
    offset: str
    location: Optional["Location"] = None

    model_config = {"populate_by_name": True}


class ChosenInlineResult(BaseModel):
    """Represents a result of an inline query that was chosen by the user and sent to their chat partner."""

    result_id: str
    from_field: "User" = Field(..., alias="from")
    query: str
    location: Optional["Location"] = None
    inline_message_id: Optional[str] = None

    model_config = {"populate_by_name": True}


class CallbackQuery(BaseModel):
    """This object represents an incoming callback query from a callback button in an inline keyboard.

    Exactly one of ``data`` or ``game_short_name`` is present.
    """

    id: str
    from_field: "User" = Field(..., alias="from")
    chat_instance: str
    message: Optional["Message"] = None
    inline_message_id: Optional[str] = None
    data: Optional[str] = None
    game_short_name: Optional[str] = None

    model_config = {"populate_by_name": True}


class KeyboardButton(BaseModel):
    """This object represents one button of the reply keyboard."""

    text: str
    request_contact: Optional[bool] = None
    request_location: Optional[bool] = None

    model_config = {"populate_by_name": True}


class ReplyKeyboardMarkup(BaseModel):
    """This object represents a custom keyboard with reply options."""

    keyboard: List[List["KeyboardButton"]]
    resize_keyboard: Optional[bool] = None
    one_time_keyboard: Optional[bool] = None
    selective: Optional[bool] = None

    model_config = {"populate_by_name": True}


class InlineKeyboardButton(BaseModel):
    """This object represents one button of an inline keyboard. You **must** use exactly one of the optional fields."""

    text: str
    url: Optional[str] = None
    callback_data: Optional[str] = None
    switch_inline_query: Optional[str] = None
    switch_inline_query_current_chat: Optional[str] = None

    model_config = {"populate_by_name": True}


class InlineKeyboardMarkup(BaseModel):
    """This object represents an inline keyboard that appears right next to the message it belongs to."""

    inline_keyboard: List[List["InlineKeyboardButton"]]

    model_config = {"populate_by_name": True}


# ── Update (tagged union over the payload kinds) ─────────────────────────────


class UpdateKind(str, enum.Enum):
    """Which payload an :class:`Update` carries.

    ``UNKNOWN`` covers updates whose payload type is not modelled here
    (channel posts, polls, payments, …); the raw fields stay reachable as
    model extras.
    """

    MESSAGE = "message"
    EDITED_MESSAGE = "edited_message"
    INLINE_QUERY = "inline_query"
    CHOSEN_INLINE_RESULT = "chosen_inline_result"
    CALLBACK_QUERY = "callback_query"
    UNKNOWN = "unknown"


_PAYLOAD_KINDS: tuple[UpdateKind, ...] = tuple(k for k in UpdateKind if k is not UpdateKind.UNKNOWN)


class Update(BaseModel):
    """This object represents an incoming update.

    At most **one** of the payload fields may be present.  Use :attr:`kind`
    and :attr:`payload` instead of probing the optional fields::

        match update.kind:
            case UpdateKind.MESSAGE:
                ...
            case UpdateKind.CALLBACK_QUERY:
                ...
            case _:
                ...
    """

    update_id: int
    message: Optional["Message"] = None
    edited_message: Optional["Message"] = None
    inline_query: Optional["InlineQuery"] = None
    chosen_inline_result: Optional["ChosenInlineResult"] = None
    callback_query: Optional["CallbackQuery"] = None

    model_config = {"populate_by_name": True, "frozen": True, "extra": "allow"}

    @model_validator(mode="after")
    def _at_most_one_payload(self) -> "Update":
        present = [kind.value for kind in _PAYLOAD_KINDS if getattr(self, kind.value) is not None]
        if len(present) > 1:
            raise ValueError(f"update {self.update_id} carries more than one payload: {', '.join(present)}")
        return self

    @property
    def kind(self) -> UpdateKind:
        """The payload variant carried by this update."""
        for kind in _PAYLOAD_KINDS:
            if getattr(self, kind.value) is not None:
                return kind
        return UpdateKind.UNKNOWN

    @property
    def payload(self) -> Union["Message", "InlineQuery", "ChosenInlineResult", "CallbackQuery", None]:
        """The populated payload model, or ``None`` for :attr:`UpdateKind.UNKNOWN`."""
        kind = self.kind
        if kind is UpdateKind.UNKNOWN:
            return None
        return getattr(self, kind.value)


class UpdateBatch(list):
    """Updates decoded from one ``getUpdates`` answer, in platform order.

    Updates that failed validation are not in the list; their identifiers
    are kept in :attr:`skipped_ids` so the caller can still acknowledge them.
    """

    def __init__(self, updates=(), skipped_ids=()) -> None:
        super().__init__(updates)
        self.skipped_ids: List[int] = list(skipped_ids)


# ── Request bodies ───────────────────────────────────────────────────────────


class SendMessageRequest(BaseModel):
    """Parameters of ``sendMessage``."""

    chat_id: Union[int, str]
    text: str
    parse_mode: Optional[str] = None
    disable_web_page_preview: Optional[bool] = None
    disable_notification: Optional[bool] = None
    reply_to_message_id: Optional[int] = None
    reply_markup: Optional[Union["InlineKeyboardMarkup", "ReplyKeyboardMarkup"]] = None

    model_config = {"populate_by_name": True}


class ForwardMessageRequest(BaseModel):
    """Parameters of ``forwardMessage``."""

    chat_id: Union[int, str]
    from_chat_id: Union[int, str]
    message_id: int
    disable_notification: Optional[bool] = None

    model_config = {"populate_by_name": True}


class SendStickerRequest(BaseModel):
    """Parameters of ``sendSticker``.

    ``sticker`` is a ``file_id`` already stored on Telegram or an HTTP URL
    of a ``.webp`` file; uploads are not supported.
    """

    chat_id: Union[int, str]
    sticker: str
    disable_notification: Optional[bool] = None
    reply_to_message_id: Optional[int] = None
    reply_markup: Optional[Union["InlineKeyboardMarkup", "ReplyKeyboardMarkup"]] = None

    model_config = {"populate_by_name": True}


class AnswerCallbackQueryRequest(BaseModel):
    """Parameters of ``answerCallbackQuery``."""

    callback_query_id: str
    text: Optional[str] = None
    show_alert: Optional[bool] = None
    url: Optional[str] = None
    cache_time: Optional[int] = None

    model_config = {"populate_by_name": True}

"""Wire models for the relay WebSocket protocol.

Every message is a JSON object with a ``type`` discriminator. Keys are
camelCase on the wire and snake_case in Python.
"""

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    StrictBool,
    TypeAdapter,
    field_validator,
    model_serializer,
)
from pydantic.alias_generators import to_camel

# JSON integers only: no floats, numeric strings or booleans.
_Count = Annotated[int, Field(strict=True, ge=0)]
_GameId = Annotated[str, Field(min_length=1, max_length=50)]
_ClientId = Annotated[str, Field(min_length=1, max_length=50)]


class RequestType(StrEnum):
    CREATE_GAME = "createGame"
    UPDATE_GAME_INFO = "updateGameInfo"
    LIST_GAMES = "listGames"
    JOIN_GAME = "joinGame"
    ACCEPT_JOIN = "acceptJoin"
    REJECT_JOIN = "rejectJoin"
    WEBRTC_SIGNALING = "webrtcSignaling"


class ResponseType(StrEnum):
    ERROR = "error"
    GAME_CREATED = "gameCreated"
    GAME_LIST = "gameList"
    NEW_CLIENT = "newClient"
    ACCEPT_JOIN = "acceptJoin"
    REJECT_JOIN = "rejectJoin"
    WEBRTC_SIGNALING = "webrtcSignaling"
    CLIENT_VANISHED = "clientVanished"
    PING = "ping"


class ErrorReason(StrEnum):
    INVALID_MESSAGE = "Invalid message"
    GAME_ID_TAKEN = "Game with this id already exists"
    GAME_NOT_FOUND = "No such game"
    ALREADY_JOINED = "Already joining this game"
    ALREADY_IN_GAME = "Already hosting or joined a game"
    HOST_VANISHED = "Host vanished"
    RATE_LIMITED = "Too many messages"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests (client -> server) ---


class CreateGameRequest(_WireModel):
    type: Literal[RequestType.CREATE_GAME] = RequestType.CREATE_GAME
    server_name: str
    max_players: _Count
    requires_password: StrictBool = False
    game_id: _GameId | None = None

    @field_validator("game_id", mode="before")
    @classmethod
    def empty_game_id_means_random(cls, v: Any) -> Any:  # noqa: ANN401
        return None if v == "" else v


class UpdateGameInfoRequest(_WireModel):
    type: Literal[RequestType.UPDATE_GAME_INFO] = RequestType.UPDATE_GAME_INFO
    server_name: str
    player_amount: _Count
    max_players: _Count
    requires_password: StrictBool = False


class ListGamesRequest(_WireModel):
    type: Literal[RequestType.LIST_GAMES] = RequestType.LIST_GAMES


class JoinGameRequest(_WireModel):
    type: Literal[RequestType.JOIN_GAME] = RequestType.JOIN_GAME
    game_id: _GameId
    password: str | None = None


class AcceptJoinRequest(_WireModel):
    type: Literal[RequestType.ACCEPT_JOIN] = RequestType.ACCEPT_JOIN
    game_id: str
    client_id: _ClientId


class RejectJoinRequest(_WireModel):
    type: Literal[RequestType.REJECT_JOIN] = RequestType.REJECT_JOIN
    game_id: str
    client_id: _ClientId
    reason: str


class WebrtcSignalingRequest(_WireModel):
    """Opaque SDP/ICE payload.

    A non-null ``clientId`` marks a host addressing one of its clients;
    without it the sender is a client addressing its host.
    """

    type: Literal[RequestType.WEBRTC_SIGNALING] = RequestType.WEBRTC_SIGNALING
    client_id: str | None = None
    description: Any = None
    candidate: Any = None

    @property
    def payload(self) -> dict[str, Any]:
        """Signaling fields present in the request, explicit nulls included."""
        return {name: getattr(self, name) for name in ("description", "candidate") if name in self.model_fields_set}


RelayRequest = Annotated[
    CreateGameRequest
    | UpdateGameInfoRequest
    | ListGamesRequest
    | JoinGameRequest
    | AcceptJoinRequest
    | RejectJoinRequest
    | WebrtcSignalingRequest,
    Field(discriminator="type"),
]

request_adapter: TypeAdapter[RelayRequest] = TypeAdapter(RelayRequest)


# --- Responses (server -> client) ---


class ErrorResponse(_WireModel):
    type: Literal[ResponseType.ERROR] = ResponseType.ERROR
    reason: ErrorReason


class GameCreatedResponse(_WireModel):
    type: Literal[ResponseType.GAME_CREATED] = ResponseType.GAME_CREATED
    game_id: str


class GameListEntry(_WireModel):
    game_id: str
    server_name: str
    player_amount: int
    max_players: int
    requires_password: bool


class GameListResponse(_WireModel):
    type: Literal[ResponseType.GAME_LIST] = ResponseType.GAME_LIST
    games: list[GameListEntry]


class NewClientResponse(_WireModel):
    type: Literal[ResponseType.NEW_CLIENT] = ResponseType.NEW_CLIENT
    game_id: str
    client_id: str
    password: str | None


class AcceptJoinResponse(_WireModel):
    type: Literal[ResponseType.ACCEPT_JOIN] = ResponseType.ACCEPT_JOIN
    game_id: str


class RejectJoinResponse(_WireModel):
    type: Literal[ResponseType.REJECT_JOIN] = ResponseType.REJECT_JOIN
    game_id: str
    reason: str


class _SignalingResponse(_WireModel):
    description: Any = None
    candidate: Any = None

    @model_serializer(mode="wrap")
    def _omit_absent_payload(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for name in ("description", "candidate"):
            if name not in self.model_fields_set:
                data.pop(name, None)
        return data


class SignalingToClientResponse(_SignalingResponse):
    """Host -> client leg. Carries no clientId."""

    type: Literal[ResponseType.WEBRTC_SIGNALING] = ResponseType.WEBRTC_SIGNALING
    game_id: str


class SignalingToHostResponse(_SignalingResponse):
    """Client -> host leg, annotated with the sending client's id."""

    type: Literal[ResponseType.WEBRTC_SIGNALING] = ResponseType.WEBRTC_SIGNALING
    game_id: str
    client_id: str


class ClientVanishedResponse(_WireModel):
    type: Literal[ResponseType.CLIENT_VANISHED] = ResponseType.CLIENT_VANISHED
    game_id: str
    client_id: str


class PingResponse(_WireModel):
    type: Literal[ResponseType.PING] = ResponseType.PING


RelayResponse = (
    ErrorResponse
    | GameCreatedResponse
    | GameListResponse
    | NewClientResponse
    | AcceptJoinResponse
    | RejectJoinResponse
    | SignalingToClientResponse
    | SignalingToHostResponse
    | ClientVanishedResponse
    | PingResponse
)

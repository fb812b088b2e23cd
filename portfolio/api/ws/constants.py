from enum import Enum


class MessageType(str, Enum):
    """
    Envelope ``type`` values with registered handlers.

    Attributes:
        USER: In-memory user presence directory; ``id`` is the user id.
        ORGANIZATION: Organizations collection; ``id`` is the entity id.
        PRODUCT: Products collection; ``id`` is the entity id.
        SKILL: Skills collection; ``id`` is the entity id.
        USER_STORY: User stories collection; ``id`` is the entity id.
    """

    USER = "user"
    ORGANIZATION = "organization"
    PRODUCT = "product"
    SKILL = "skill"
    USER_STORY = "user_story"

    def __str__(self) -> str:
        return self.value


class CrudAction(str, Enum):
    """
    ``data.action`` values accepted by CRUD handlers.

    For persisted types, LIST and CREATE treat the envelope ``id`` as a
    client correlation token that is echoed back; GET, UPDATE and DELETE
    treat it as the entity id.
    """

    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ConnectionState(str, Enum):
    """
    Lifecycle of one WebSocket connection.

    CONNECTING -> OPEN -> CLOSED. Once CLOSED, further close
    notifications are ignored.
    """

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"

"""
EPP Command Catalog

Maps each verb to the command that builds its request and to the name of
the typed response class an object module provides for it.
"""

from types import ModuleType
from typing import Dict, NamedTuple, Optional, Type

from lxml import etree

from epp_session.exceptions import EPPInvalidOperationError
from epp_session.models import Response
from epp_session.objects import ObjectType, object_type_of

TRANSFER_OPERATIONS = ("request", "query", "cancel", "approve", "reject")


class Command:
    """
    A business command: verb plus object payload.

    Built just before sending and discarded once the response is wrapped.
    The payload builds its own namespaced element inside the verb element.
    """

    verb: str = None

    def __init__(self, payload):
        if not callable(getattr(payload, "build", None)):
            raise EPPInvalidOperationError(f"{type(payload).__name__} is not an object payload")
        payload_verb = getattr(payload, "verb", self.verb)
        if payload_verb != self.verb:
            raise EPPInvalidOperationError(
                f"{type(payload).__name__} payload is for {payload_verb}, not {self.verb}"
            )
        self.payload = payload

    @property
    def object_type(self) -> Optional[ObjectType]:
        return object_type_of(self.payload)

    @property
    def attributes(self) -> Dict[str, str]:
        """Attributes of the verb element, e.g. transfer op."""
        return {}

    def build(self, parent: etree._Element) -> None:
        self.payload.build(parent)

    def __repr__(self):
        return f"<{type(self).__name__} {self.payload!r}>"


class Check(Command):
    verb = "check"


class Create(Command):
    verb = "create"


class Delete(Command):
    verb = "delete"


class Info(Command):
    verb = "info"


class Renew(Command):
    verb = "renew"


class Update(Command):
    verb = "update"


class Transfer(Command):
    """Transfer with sub-operation request, query, cancel, approve or reject."""

    verb = "transfer"

    def __init__(self, op: str, payload):
        if op not in TRANSFER_OPERATIONS:
            raise EPPInvalidOperationError(
                f"Invalid transfer operation {op!r}, expected one of {', '.join(TRANSFER_OPERATIONS)}"
            )
        super().__init__(payload)
        self.op = op

    @property
    def attributes(self) -> Dict[str, str]:
        return {"op": self.op}

    def __repr__(self):
        return f"<Transfer op={self.op} {self.payload!r}>"


class Poll(Command):
    """Poll request, or acknowledgement when a message ID is given."""

    verb = "poll"

    def __init__(self, msg_id: str = None):
        if msg_id is not None and not str(msg_id).strip():
            raise EPPInvalidOperationError("Message ID to acknowledge must not be empty")
        self.payload = None
        self.msg_id = str(msg_id) if msg_id is not None else None

    @property
    def object_type(self) -> Optional[ObjectType]:
        return None

    @property
    def attributes(self) -> Dict[str, str]:
        if self.msg_id is None:
            return {"op": "req"}
        return {"op": "ack", "msgID": self.msg_id}

    def build(self, parent: etree._Element) -> None:
        pass

    def __repr__(self):
        return f"<Poll {self.attributes}>"


class CatalogEntry(NamedTuple):
    command: Type[Command]
    response: Optional[str]  # typed response class name on the object module


CATALOG: Dict[str, CatalogEntry] = {
    "check": CatalogEntry(Check, "CheckResponse"),
    "create": CatalogEntry(Create, "CreateResponse"),
    "delete": CatalogEntry(Delete, "DeleteResponse"),
    "info": CatalogEntry(Info, "InfoResponse"),
    "renew": CatalogEntry(Renew, "RenewResponse"),
    "transfer": CatalogEntry(Transfer, "TransferResponse"),
    "update": CatalogEntry(Update, "UpdateResponse"),
    "poll": CatalogEntry(Poll, None),
}


def _entry(verb: str) -> CatalogEntry:
    try:
        return CATALOG[verb]
    except KeyError:
        raise EPPInvalidOperationError(f"Unknown command: {verb!r}") from None


def build_command(verb: str, *args) -> Command:
    """Build the command for a verb, e.g. build_command("transfer", "query", payload)."""
    return _entry(verb).command(*args)


def wrap_response(verb: str, module: ModuleType, response: Response):
    """Wrap a raw response in the object module's typed response for the verb."""
    name = _entry(verb).response
    if name is None:
        return response
    return getattr(module, name)(response)

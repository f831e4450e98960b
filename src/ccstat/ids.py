import sys
from dataclasses import dataclass
from typing import NewType

MessageId = NewType("MessageId", str)
RequestId = NewType("RequestId", str)
ModelId = NewType("ModelId", str)


@dataclass(frozen=True, slots=True)
class SessionId:
    """
    SessionId identifies the session that owns a usage log file.

    It is compared on every ingested record, so the underlying string
    is interned: copies of the same id share one str object and the
    equality check short-circuits on identity before comparing content.
    Equality and hashing are still defined by content only.
    """

    value: "str"

    def __post_init__(self) -> "None":
        object.__setattr__(self, "value", sys.intern(self.value))

    def __str__(self) -> "str":
        return self.value


@dataclass(frozen=True, slots=True)
class UniqueHash:
    """
    UniqueHash is the identity of a usage record used to recognise
    re-delivered log lines. Derived from the (message id, request id)
    pair.
    """

    value: "str"

    @classmethod
    def from_ids(cls, message_id: "str", request_id: "str") -> "UniqueHash":
        return cls(f"{message_id}:{request_id}")

    @classmethod
    def from_ids_if_present(
        cls,
        message_id: "str | None",
        request_id: "str | None",
    ) -> "UniqueHash | None":
        """
        returns None unless both ids are present. Records missing
        either id carry no reliable identity and are never deduplicated.
        """
        if message_id is None or request_id is None:
            return None
        return cls.from_ids(message_id, request_id)

    def __str__(self) -> "str":
        return self.value

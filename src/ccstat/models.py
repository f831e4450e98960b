import json
import math
from dataclasses import dataclass
from typing import Any, NoReturn

from ccstat.errors import RecordParseError
from ccstat.ids import MessageId, ModelId, RequestId, SessionId, UniqueHash


def _optional_str(obj: "dict[str, Any]", key: "str") -> "str | None":
    value = obj.get(key)
    if value is None or isinstance(value, str):
        return value
    raise RecordParseError(f"{key!r} must be a string, got {type(value).__name__}")


def _optional_object(obj: "dict[str, Any]", key: "str") -> "dict[str, Any] | None":
    value = obj.get(key)
    if value is None or isinstance(value, dict):
        return value
    raise RecordParseError(f"{key!r} must be an object, got {type(value).__name__}")


def _token_count(obj: "dict[str, Any]", key: "str") -> "int":
    value = obj.get(key)
    if value is None:
        return 0
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise RecordParseError(f"{key!r} must be a non-negative integer, got {value!r}")
    return value


@dataclass(frozen=True, slots=True)
class TokenUsage:
    """
    TokenUsage holds the token counts of a single assistant message.

    The cache write count comes in two schemas. The older one carries a
    single flat cache_creation_input_tokens count, the newer one adds a
    cache_creation object split into a 5-minute and a 1-hour retention
    tier. The per-tier fields are always filled in: from the nested object
    when present, otherwise the flat count is attributed to the 5-minute
    tier.
    """

    input_tokens: "int" = 0
    output_tokens: "int" = 0
    cache_creation_input_tokens: "int" = 0
    cache_creation_5m_tokens: "int" = 0
    cache_creation_1h_tokens: "int" = 0
    cache_read_input_tokens: "int" = 0

    @classmethod
    def from_dict(cls, obj: "dict[str, Any]") -> "TokenUsage":
        flat = _token_count(obj, "cache_creation_input_tokens")
        split = _optional_object(obj, "cache_creation")
        if split is not None:
            tier_5m = _token_count(split, "ephemeral_5m_input_tokens")
            tier_1h = _token_count(split, "ephemeral_1h_input_tokens")
        else:
            tier_5m, tier_1h = flat, 0

        return cls(
            input_tokens=_token_count(obj, "input_tokens"),
            output_tokens=_token_count(obj, "output_tokens"),
            cache_creation_input_tokens=flat,
            cache_creation_5m_tokens=tier_5m,
            cache_creation_1h_tokens=tier_1h,
            cache_read_input_tokens=_token_count(obj, "cache_read_input_tokens"),
        )

    @property
    def total_tokens(self) -> "int":
        return (
            self.input_tokens
            + self.output_tokens
            + self.cache_creation_5m_tokens
            + self.cache_creation_1h_tokens
            + self.cache_read_input_tokens
        )


@dataclass(frozen=True, slots=True)
class Message:
    id: "MessageId | None" = None
    model: "ModelId | None" = None
    usage: "TokenUsage | None" = None

    @classmethod
    def from_dict(cls, obj: "dict[str, Any]") -> "Message":
        usage = _optional_object(obj, "usage")
        message_id = _optional_str(obj, "id")
        model = _optional_str(obj, "model")
        return cls(
            id=MessageId(message_id) if message_id is not None else None,
            model=ModelId(model) if model is not None else None,
            usage=TokenUsage.from_dict(usage) if usage is not None else None,
        )


@dataclass(frozen=True, slots=True)
class UsageRecordData:
    """
    UsageRecordData is one parsed line of a usage log. Every field is
    optional since upstream logs are written on a best-effort basis.
    """

    # ISO-8601 string, kept verbatim; ordering relies on its fixed width
    timestamp: "str | None" = None
    model: "ModelId | None" = None
    cost_usd: "float | None" = None
    message: "Message | None" = None
    request_id: "RequestId | None" = None

    @classmethod
    def from_dict(cls, obj: "dict[str, Any]") -> "UsageRecordData":
        cost = obj.get("costUSD")
        if cost is not None and (
            isinstance(cost, bool) or not isinstance(cost, (int, float))
        ):
            raise RecordParseError(f"'costUSD' must be a number, got {cost!r}")
        if cost is not None and not math.isfinite(cost):
            raise RecordParseError(f"'costUSD' must be finite, got {cost!r}")

        message = _optional_object(obj, "message")
        model = _optional_str(obj, "model")
        request_id = _optional_str(obj, "requestId")
        return cls(
            timestamp=_optional_str(obj, "timestamp"),
            model=ModelId(model) if model is not None else None,
            cost_usd=float(cost) if cost is not None else None,
            message=Message.from_dict(message) if message is not None else None,
            request_id=RequestId(request_id) if request_id is not None else None,
        )

    @staticmethod
    def _reject_constant(name: "str") -> "NoReturn":
        raise RecordParseError(f"non-finite number {name} is not valid JSON")

    @classmethod
    def from_json(cls, line: "str") -> "UsageRecordData":
        """
        parses a single JSONL line. Raises RecordParseError for anything
        that is not a well-formed usage record, including the partial
        lines found at the tail of a log that is still being written.
        """
        try:
            obj = json.loads(line, parse_constant=cls._reject_constant)
        except json.JSONDecodeError as e:
            raise RecordParseError(f"invalid JSON: {e}") from e

        if not isinstance(obj, dict):
            raise RecordParseError("usage record must be a JSON object")
        return cls.from_dict(obj)

    @property
    def effective_model(self) -> "ModelId | None":
        """
        model used for pricing: the nested message's model wins, the
        outer model field is the fallback.
        """
        if self.message is not None and self.message.model is not None:
            return self.message.model
        return self.model

    @property
    def unique_hash(self) -> "UniqueHash | None":
        message_id = self.message.id if self.message is not None else None
        return UniqueHash.from_ids_if_present(message_id, self.request_id)


@dataclass(frozen=True, slots=True)
class UsageRecord:
    """
    UsageRecord is a parsed log line tagged with the session that owns
    the file it came from. The file-derived session id is authoritative,
    whatever session id the line itself may carry.
    """

    session_id: "SessionId"
    data: "UsageRecordData"

    @property
    def timestamp(self) -> "str | None":
        return self.data.timestamp

    @property
    def unique_hash(self) -> "UniqueHash | None":
        return self.data.unique_hash

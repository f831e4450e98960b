from dataclasses import dataclass
from functools import cache
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True, slots=True)
class ModelPricing:
    """
    ModelPricing holds the per-token USD rates of one model family.
    """

    input_cost_per_token: "float"
    output_cost_per_token: "float"
    # cache writes retained for 5 minutes
    cache_creation_5m_cost_per_token: "float"
    cache_read_cost_per_token: "float"
    # cache writes retained for 1 hour; None prices them at the 5m rate
    cache_creation_1h_cost_per_token: "float | None" = None

    @classmethod
    def zero(cls) -> "ModelPricing":
        return cls(0.0, 0.0, 0.0, 0.0, 0.0)

    @property
    def cache_creation_1h_rate(self) -> "float":
        if self.cache_creation_1h_cost_per_token is None:
            return self.cache_creation_5m_cost_per_token
        return self.cache_creation_1h_cost_per_token


@dataclass(frozen=True)
class PricingTable:
    """
    PricingTable maps model identifiers to their pricing.

    Resolution is an ordered rule list and the order matters, since a
    model string can match several rules:
     - exact match on a table key
     - substring match, the model contains a key or a key contains the
     model; first key in table order wins
     - keyword family, e.g. anything containing "opus" gets the opus row
     - the all-zero default for models nobody knows about
    """

    prices: "Mapping[str, ModelPricing]"
    # (lowercase keyword, table key) pairs, checked in order
    families: "tuple[tuple[str, str], ...]" = ()
    default: "ModelPricing" = ModelPricing.zero()

    def __post_init__(self) -> "None":
        object.__setattr__(self, "prices", MappingProxyType(dict(self.prices)))
        for keyword, key in self.families:
            if key not in self.prices:
                raise ValueError(f"family {keyword!r} points to unknown model {key!r}")

    def resolve(self, model: "str") -> "ModelPricing":
        if not model:
            return self.default

        pricing = self.prices.get(model)
        if pricing is not None:
            return pricing

        for key, pricing in self.prices.items():
            if key in model or model in key:
                return pricing

        lowered = model.lower()
        for keyword, key in self.families:
            if keyword in lowered:
                return self.prices[key]

        return self.default


OPUS_4_1 = ModelPricing(
    input_cost_per_token=0.000015,
    output_cost_per_token=0.000075,
    cache_creation_5m_cost_per_token=0.00001875,
    cache_read_cost_per_token=0.0000015,
    cache_creation_1h_cost_per_token=0.00003,
)

SONNET_4 = ModelPricing(
    input_cost_per_token=0.000003,
    output_cost_per_token=0.000015,
    cache_creation_5m_cost_per_token=0.00000375,
    cache_read_cost_per_token=0.0000003,
    cache_creation_1h_cost_per_token=0.000006,
)

HAIKU_3_5 = ModelPricing(
    input_cost_per_token=0.0000008,
    output_cost_per_token=0.000004,
    cache_creation_5m_cost_per_token=0.000001,
    cache_read_cost_per_token=0.00000008,
    cache_creation_1h_cost_per_token=0.0000016,
)


@cache
def default_pricing_table() -> "PricingTable":
    """
    builds the process-wide pricing table. Cached, so every caller
    shares the same read-only instance.
    """
    return PricingTable(
        prices={
            "claude-opus-4-1-20250805": OPUS_4_1,
            "claude-opus-4-20250514": OPUS_4_1,
            "claude-sonnet-4-20250514": SONNET_4,
            "claude-3-opus-20240229": OPUS_4_1,
            "claude-3-7-sonnet-20250219": SONNET_4,
            "claude-3-5-sonnet-20241022": SONNET_4,
            "claude-3-5-haiku-20241022": HAIKU_3_5,
        },
        families=(
            ("opus", "claude-opus-4-1-20250805"),
            ("sonnet", "claude-sonnet-4-20250514"),
            ("haiku", "claude-3-5-haiku-20241022"),
        ),
    )

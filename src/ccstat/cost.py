from typing import Iterable

from ccstat.models import TokenUsage, UsageRecord
from ccstat.pricing import ModelPricing, PricingTable


def calculate_cost(tokens: "TokenUsage", pricing: "ModelPricing") -> "float":
    """
    weights each token tier by its per-token rate.
    """
    return (
        tokens.input_tokens * pricing.input_cost_per_token
        + tokens.output_tokens * pricing.output_cost_per_token
        + tokens.cache_creation_5m_tokens * pricing.cache_creation_5m_cost_per_token
        + tokens.cache_creation_1h_tokens * pricing.cache_creation_1h_rate
        + tokens.cache_read_input_tokens * pricing.cache_read_cost_per_token
    )


class CostCalculator:
    """
    CostCalculator turns usage records into USD amounts using an
    injected, read-only pricing table.
    """

    def __init__(self, pricing: "PricingTable") -> "None":
        self._pricing = pricing

    @property
    def pricing(self) -> "PricingTable":
        return self._pricing

    def cost(self, record: "UsageRecord") -> "float":
        """
        returns the pre-computed costUSD when the record carries one,
        upstream is authoritative. Otherwise prices the token usage of
        the record's model. Records without usage or without a model
        cost nothing, and so do unknown models.
        """
        data = record.data
        if data.cost_usd is not None:
            return data.cost_usd

        usage = data.message.usage if data.message is not None else None
        model = data.effective_model
        if usage is None or model is None:
            return 0.0

        return calculate_cost(usage, self._pricing.resolve(model))

    def total(self, records: "Iterable[UsageRecord]") -> "float":
        return sum((self.cost(r) for r in records), 0.0)

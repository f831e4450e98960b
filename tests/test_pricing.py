import pytest

from ccstat.pricing import (
    HAIKU_3_5,
    OPUS_4_1,
    SONNET_4,
    ModelPricing,
    PricingTable,
    default_pricing_table,
)

ALPHA = ModelPricing(1.0, 2.0, 3.0, 4.0)
BETA = ModelPricing(10.0, 20.0, 30.0, 40.0)


@pytest.fixture()
def table() -> "PricingTable":
    return PricingTable(
        prices={"alpha-opus-1": ALPHA, "beta-sonnet-2": BETA},
        families=(("opus", "alpha-opus-1"), ("sonnet", "beta-sonnet-2")),
    )


class TestPricingTableResolve:
    def test_exact_match(self, table: "PricingTable") -> "None":
        assert table.resolve("beta-sonnet-2") is BETA

    def test_model_contains_key(self, table: "PricingTable") -> "None":
        assert table.resolve("vendor/beta-sonnet-2-latest") is BETA

    def test_key_contains_model(self, table: "PricingTable") -> "None":
        assert table.resolve("alpha-opus") is ALPHA

    def test_keyword_family_is_case_insensitive(self, table: "PricingTable") -> "None":
        assert table.resolve("Some-OPUS-Next") is ALPHA
        assert table.resolve("new-sonnet-9") is BETA

    def test_substring_beats_keyword(self, table: "PricingTable") -> "None":
        # contains the beta key and the "opus" keyword
        assert table.resolve("beta-sonnet-2-opus-distilled") is BETA

    def test_unknown_model_gets_zero_default(self, table: "PricingTable") -> "None":
        assert table.resolve("gpt-4o") == ModelPricing.zero()

    def test_empty_model_gets_zero_default(self, table: "PricingTable") -> "None":
        assert table.resolve("") == ModelPricing.zero()

    def test_family_must_point_to_known_model(self) -> "None":
        with pytest.raises(ValueError):
            PricingTable(prices={"a": ALPHA}, families=(("opus", "missing"),))

    def test_table_is_read_only(self, table: "PricingTable") -> "None":
        with pytest.raises(TypeError):
            table.prices["gamma"] = ALPHA  # type: ignore[index]


class TestModelPricing:
    def test_1h_rate_falls_back_to_5m_rate(self) -> "None":
        assert ALPHA.cache_creation_1h_rate == 3.0

    def test_explicit_1h_rate(self) -> "None":
        assert OPUS_4_1.cache_creation_1h_rate == 0.00003


class TestDefaultPricingTable:
    def test_is_built_once(self) -> "None":
        assert default_pricing_table() is default_pricing_table()

    def test_known_models(self) -> "None":
        table = default_pricing_table()
        assert table.resolve("claude-opus-4-1-20250805") == OPUS_4_1
        assert table.resolve("claude-sonnet-4-20250514") == SONNET_4
        assert table.resolve("claude-3-5-haiku-20241022") == HAIKU_3_5

    def test_family_fallbacks(self) -> "None":
        table = default_pricing_table()
        assert table.resolve("claude-opus-5-20990101") == OPUS_4_1
        assert table.resolve("claude-sonnet-9") == SONNET_4
        assert table.resolve("claude-haiku-4-5") == HAIKU_3_5

    def test_unknown_model(self) -> "None":
        assert default_pricing_table().resolve("<synthetic>") == ModelPricing.zero()

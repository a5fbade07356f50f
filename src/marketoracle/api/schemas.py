"""
Pydantic models for HTTP request bodies.

Field aliases follow the dashboard's camelCase wire format.
"""

from pydantic import BaseModel, Field, field_validator


class ScanRequest(BaseModel):
    """Body of POST /arbitrage-scanner."""

    asset: str | None = None
    min_profit_bps: float = Field(alias="minProfitBps")
    chains: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @field_validator("asset", mode="after")
    @classmethod
    def blank_asset_is_none(cls, v: str | None) -> str | None:
        """Treat an empty asset as "scan the default basket"."""
        if v is not None and not v.strip():
            return None
        return v


class BatchPriceRequest(BaseModel):
    """Body of POST /oracle-refprice/batch."""

    symbols: list[str] = Field(min_length=1, max_length=50)

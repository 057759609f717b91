from __future__ import annotations

from dataclasses import dataclass

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# --- Holdings (loaded once from the setup file) -------------------------------


class LocalCurrency(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, examples=["EUR"])
    symbol: str | None = Field(None, examples=["€"])
    decimals: int = Field(2, ge=0, le=12)
    symbol_first: bool = Field(True, validation_alias=AliasChoices("symbol_first", "symbolFirst"))

    @property
    def query_code(self) -> str:
        return self.id.upper()

    @property
    def field_code(self) -> str:
        return self.id.lower()

    def format(self, amount: float) -> str:
        number = f"{amount:,.{self.decimals}f}"
        if self.symbol is None:
            return f"{number} {self.query_code}"
        return f"{self.symbol}{number}" if self.symbol_first else f"{number} {self.symbol}"


@dataclass(frozen=True)
class StaticAmount:
    amount: float


@dataclass(frozen=True)
class LedgerAmount:
    account_id: str


AmountSource = StaticAmount | LedgerAmount


class OwnedAsset(BaseModel):
    model_config = ConfigDict(frozen=True)

    asset_id: str = Field(..., min_length=1, validation_alias=AliasChoices("asset_id", "id"), examples=["bitcoin"])
    amount: float = Field(0.0, ge=0)
    # When set, the held amount is read from the asset's ledger and `amount` is ignored
    external_account_id: str | None = Field(
        None,
        validation_alias=AliasChoices("external_account_id", "externalAccountId", "stellarAccountId"),
    )

    @property
    def amount_source(self) -> AmountSource:
        if self.external_account_id:
            return LedgerAmount(self.external_account_id)
        return StaticAmount(self.amount)


class HoldingsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    local_currency: LocalCurrency = Field(
        ..., validation_alias=AliasChoices("local_currency", "localCurrency")
    )
    owned_assets: tuple[OwnedAsset, ...] = Field(
        (), validation_alias=AliasChoices("owned_assets", "currenciesOwned")
    )


# --- Per-cycle results --------------------------------------------------------


class PriceRecord(BaseModel):
    """Ticker entry from the price API. Unknown fields are kept as-is for display."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    name: str = ""
    symbol: str = ""
    rank: int | None = None
    price: float = Field(..., ge=0)
    percent_change_1h: float | None = None
    percent_change_24h: float | None = None
    percent_change_7d: float | None = None


class CurrencyLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    record: PriceRecord
    amount: float = Field(..., ge=0)

    @property
    def net_worth(self) -> float:
        return self.amount * self.record.price

    def describe(self, currency: LocalCurrency) -> str:
        label = f"{self.record.name or self.record.id} ({self.record.symbol})" if self.record.symbol else self.record.id
        change = ""
        if self.record.percent_change_24h is not None:
            change = f" [{self.record.percent_change_24h:+.2f}% 24h]"
        return f"{label}: {self.amount:g} x {currency.format(self.record.price)} = {currency.format(self.net_worth)}{change}"


class Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    lines: tuple[CurrencyLine, ...]
    local_currency: LocalCurrency
    fetched_at: int

    @property
    def total_net_worth(self) -> float:
        return sum(line.net_worth for line in self.lines)

    def render(self) -> str:
        rows = [line.describe(self.local_currency) for line in self.lines]
        rows.append(f"Total Net Worth: {self.local_currency.format(self.total_net_worth)}")
        return "\n".join(rows)


# --- HTTP surface -------------------------------------------------------------


class SnapshotLineItem(BaseModel):
    id: str = Field(..., examples=["bitcoin"])
    name: str
    symbol: str = Field(..., examples=["BTC"])
    rank: int | None = None
    price: float = Field(..., ge=0)
    amount: float = Field(..., ge=0)
    net_worth: float = Field(..., ge=0)
    net_worth_display: str
    percent_change_1h: float | None = None
    percent_change_24h: float | None = None
    percent_change_7d: float | None = None


class SnapshotResponse(BaseModel):
    currency: str
    fetched_at: int
    count: int
    lines: list[SnapshotLineItem]
    total_net_worth: float
    total_net_worth_display: str

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> SnapshotResponse:
        currency = snapshot.local_currency
        items = [
            SnapshotLineItem(
                id=line.record.id,
                name=line.record.name,
                symbol=line.record.symbol,
                rank=line.record.rank,
                price=line.record.price,
                amount=line.amount,
                net_worth=line.net_worth,
                net_worth_display=currency.format(line.net_worth),
                percent_change_1h=line.record.percent_change_1h,
                percent_change_24h=line.record.percent_change_24h,
                percent_change_7d=line.record.percent_change_7d,
            )
            for line in snapshot.lines
        ]
        total = snapshot.total_net_worth
        return cls(
            currency=currency.query_code,
            fetched_at=snapshot.fetched_at,
            count=len(items),
            lines=items,
            total_net_worth=total,
            total_net_worth_display=currency.format(total),
        )


class ErrorResponse(BaseModel):
    kind: str = Field(..., examples=["TransportError"])
    message: str
    trace: str


class HealthResponse(BaseModel):
    ok: bool = True
    name: str
    version: str
    time: int

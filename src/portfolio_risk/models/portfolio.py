from pydantic import BaseModel, ConfigDict, Field, model_validator


class Holding(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    quantity: float = Field(ge=0.0)
    current_price: float
    purchase_price: float
    initial_investment: float | None = None

    @model_validator(mode="after")
    def _default_initial_investment(self) -> "Holding":
        if self.initial_investment is None:
            object.__setattr__(
                self, "initial_investment", self.quantity * self.purchase_price
            )
        return self

    @property
    def current_value(self) -> float:
        return self.quantity * self.current_price

    @property
    def initial_value(self) -> float:
        return self.quantity * self.purchase_price


class AssetMetrics(BaseModel):
    name: str
    current_value: float
    roi_percent: float | None = None


class PortfolioSummary(BaseModel):
    total_value: float = 0.0
    average_roi_percent: float = 0.0
    asset_count: int = 0
    assets: list[AssetMetrics] = []

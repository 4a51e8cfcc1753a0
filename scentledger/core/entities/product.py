"""Product catalog entities."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductIdentity(BaseModel):
    """Natural key used to look up inventory: (brand, name, size)."""

    model_config = ConfigDict(frozen=True)

    brand: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    size: str = ""

    @field_validator("brand", "name", "size", mode="before")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    def __str__(self) -> str:
        return " ".join(part for part in (self.brand, self.name, self.size) if part)


class Product(BaseModel):
    """A catalog entry. Allocation is keyed by its identity, not its id."""

    id: int | None = None
    sku: str | None = None
    brand: str
    name: str
    size: str = ""
    sale_price: float | None = None
    active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def identity(self) -> ProductIdentity:
        return ProductIdentity(brand=self.brand, name=self.name, size=self.size)

# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional


class ProductCreate(BaseModel):
    """Schema dla tworzenia produktu."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=200, description="Nazwa produktu")
    price: float = Field(..., ge=0, allow_inf_nan=False, description="Cena (musi być >= 0)")
    description: Optional[str] = Field(None, max_length=1000)


class ProductUpdate(BaseModel):
    """Schema dla częściowej aktualizacji produktu (PATCH)."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    description: Optional[str] = Field(None, max_length=1000)

    #walidator odpala sie tylko dla podanych pol, wiec brak pola != null
    @field_validator("name", "price")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("field cannot be null")
        return value


class ProductRef(BaseModel):
    """Schema dla komend adresujących jeden produkt."""

    id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")


class ProductPatch(ProductUpdate):
    """Aktualizacja przez kanał TCP: id + pola do zmiany."""

    id: int = Field(..., gt=0)

    def changes(self) -> ProductUpdate:
        return ProductUpdate.model_validate(self.model_dump(exclude_unset=True, exclude={"id"}))


class ProductOut(BaseModel):
    """Schema dla produktu (response)."""

    id: int
    name: str
    price: float
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

"""
Pydantic schemas for the records the backend supplies.

Bills (sales), recovery payments and returns arrive in the backend's
camelCase JSON shape. These schemas accept that shape (and plain
snake_case) and normalize values leniently: a bad amount reads as
zero and a bad date reads as None, so one broken record never blanks
a whole statement. Only structural problems (a missing id, a record
that is not an object) are validation errors.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import (
    AliasChoices,
    AliasGenerator,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from customer_ledger.models.enums import PaymentStatus, ReturnType
from customer_ledger.schemas.parsing import (
    ZERO,
    parse_amount,
    parse_datetime,
    round_money,
)


class RecordModel(BaseModel):
    """Base for backend records: camelCase in, unknown keys ignored."""

    # Output keeps snake_case field names like every other response
    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=to_camel),
        populate_by_name=True,
        extra="ignore",
    )


def _coerce_id(v):
    # Numeric ids and phones from older exports
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


def _coerce_flag(v) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in ("true", "1", "yes")
    return bool(v)


# --- Line Items ---

class LineItem(RecordModel):
    """One product line on a bill or a return."""
    product_name: str = "Product"
    variant_name: str = "Variant"
    color_name: str = "Color"
    color_code: str = ""
    quantity: int = 0
    rate: Decimal = ZERO
    subtotal: Decimal = ZERO

    @model_validator(mode="before")
    @classmethod
    def flatten_color(cls, data):
        """
        Read the backend's nested shape.

        Sale items carry product data as
        color -> variant -> product; pull the display fields up.
        """
        if not isinstance(data, dict):
            return data
        color = data.get("color")
        if not isinstance(color, dict):
            return data

        variant = color.get("variant") or {}
        product = variant.get("product") or {}
        flat = dict(data)
        flat.setdefault("productName", product.get("productName"))
        flat.setdefault("variantName", variant.get("packingSize"))
        flat.setdefault("colorName", color.get("colorName"))
        flat.setdefault("colorCode", color.get("colorCode"))
        return flat

    @field_validator(
        "product_name", "variant_name", "color_name", "color_code",
        mode="before",
    )
    @classmethod
    def text_or_default(cls, v, info: ValidationInfo):
        if v is None or v == "":
            return cls.model_fields[info.field_name].default
        return str(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def parse_quantity(cls, v) -> int:
        return int(parse_amount(v))

    @field_validator("rate", "subtotal", mode="before")
    @classmethod
    def parse_money(cls, v) -> Decimal:
        return parse_amount(v)

    @field_serializer("rate", "subtotal")
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)


# --- Bills ---

class Bill(RecordModel):
    """
    A sale, or a manual balance (cash loan) entered without a sale.

    amount_paid is the cumulative paid figure: the payment taken at
    the till plus every recovery payment recorded against the bill.
    """
    id: str = Field(min_length=1)
    customer_phone: str | None = None
    customer_name: str | None = None
    created_at: datetime | None = None
    total_amount: Decimal = ZERO
    amount_paid: Decimal = ZERO
    payment_status: PaymentStatus | str = PaymentStatus.UNPAID
    due_date: datetime | None = None
    is_manual_balance: bool = False
    notes: str | None = None
    sale_items: list[LineItem] = Field(default_factory=list)

    @field_validator("id", "customer_phone", mode="before")
    @classmethod
    def parse_id(cls, v):
        return _coerce_id(v)

    @field_validator("total_amount", "amount_paid", mode="before")
    @classmethod
    def parse_money(cls, v) -> Decimal:
        return parse_amount(v)

    @field_validator("created_at", "due_date", mode="before")
    @classmethod
    def parse_date(cls, v) -> datetime | None:
        return parse_datetime(v)

    @field_validator("payment_status", mode="before")
    @classmethod
    def parse_status(cls, v):
        if v is None or v == "":
            return PaymentStatus.UNPAID
        text = str(v).strip().lower()
        try:
            return PaymentStatus(text)
        except ValueError:
            return text

    @field_validator("is_manual_balance", mode="before")
    @classmethod
    def parse_flag(cls, v) -> bool:
        return _coerce_flag(v)

    @field_validator("sale_items", mode="before")
    @classmethod
    def items_or_empty(cls, v):
        return v or []


# --- Payments ---

class Payment(RecordModel):
    """A recovery payment recorded against an existing bill."""
    id: str = Field(min_length=1)
    sale_id: str | None = None
    customer_phone: str | None = None
    amount: Decimal = ZERO
    payment_method: str = "cash"
    notes: str | None = None
    created_at: datetime | None = None

    @field_validator("id", "sale_id", "customer_phone", mode="before")
    @classmethod
    def parse_ids(cls, v):
        return _coerce_id(v)

    @field_validator("amount", mode="before")
    @classmethod
    def parse_money(cls, v) -> Decimal:
        return parse_amount(v)

    @field_validator("payment_method", mode="before")
    @classmethod
    def method_or_cash(cls, v) -> str:
        return str(v) if v else "cash"

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_date(cls, v) -> datetime | None:
        return parse_datetime(v)


# --- Returns ---

class Return(RecordModel):
    """Goods returned against a bill, refunded as account credit."""
    id: str = Field(min_length=1)
    sale_id: str | None = None
    customer_phone: str | None = None
    customer_name: str | None = None
    total_refund: Decimal = ZERO
    return_type: ReturnType = ReturnType.ITEM
    reason: str | None = None
    refund_method: str | None = None
    return_items: list[LineItem] = Field(default_factory=list)
    created_at: datetime | None = None

    @field_validator("id", "sale_id", "customer_phone", mode="before")
    @classmethod
    def parse_ids(cls, v):
        return _coerce_id(v)

    @field_validator("total_refund", mode="before")
    @classmethod
    def parse_money(cls, v) -> Decimal:
        return parse_amount(v)

    @field_validator("return_type", mode="before")
    @classmethod
    def parse_return_type(cls, v) -> ReturnType:
        # The backend stores full bill returns as "bill"
        if isinstance(v, str) and v.strip().lower() in ("bill", "full_bill"):
            return ReturnType.FULL_BILL
        return ReturnType.ITEM

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_date(cls, v) -> datetime | None:
        return parse_datetime(v)

    @field_validator("return_items", mode="before")
    @classmethod
    def items_or_empty(cls, v):
        return v or []


# --- Snapshot ---

class CustomerSnapshot(BaseModel):
    """
    One consistent set of a customer's records.

    Mirrors the backend's combined statement payload
    ({sales, payments, returns, summary}); summary is ignored
    because every figure is recomputed from the records.
    """
    sales: list[Bill] = Field(
        default_factory=list,
        validation_alias=AliasChoices("sales", "bills"),
    )
    payments: list[Payment] = Field(default_factory=list)
    returns: list[Return] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def customer_phones(self) -> set[str]:
        """Every customer phone named by any record in the snapshot."""
        records = [*self.sales, *self.payments, *self.returns]
        return {r.customer_phone for r in records if r.customer_phone}

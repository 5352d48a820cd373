from datetime import datetime
from pydantic import BaseModel, Field

from dressrental.domain.entities.contract_type import ContractMode


class DraftRequestSchema(BaseModel):
    mode: ContractMode = ContractMode.daily
    dress_id: str
    # package mode: extra dresses, the base dress is always kept first
    dress_ids: list[str] = Field(default_factory=list)
    package_id: str | None = None
    # None keeps the default selection (add-ons flagged as included)
    addon_ids: list[str] | None = None
    start: datetime
    end: datetime | None = None
    deposit_paid_ttc: float | str | None = None
    caution_paid_ttc: float | str | None = None


class ContractCreateRequestSchema(DraftRequestSchema):
    customer_id: str
    payment_method: str = "card"


class TotalsSchema(BaseModel):
    days: int
    base_ht: float
    base_ttc: float
    addons_chargeable_ht: float
    addons_chargeable_ttc: float
    addons_included_ht: float
    addons_included_ttc: float
    total_ht: float
    total_ttc: float
    deposit_due_ht: float
    deposit_due_ttc: float
    deposit_paid_ht: float
    deposit_paid_ttc: float
    caution_due_ht: float
    caution_due_ttc: float
    caution_paid_ht: float
    caution_paid_ttc: float


class RemainingSchema(BaseModel):
    deposit_ht: float
    deposit_ttc: float
    caution_ht: float
    caution_ttc: float
    total_ht: float
    total_ttc: float
    is_fully_paid: bool


class QuoteResponseSchema(BaseModel):
    mode: ContractMode
    contract_type_id: str | None
    dress_ids: list[str]
    package_id: str | None
    addon_ids: list[str]
    totals: TotalsSchema
    remaining: RemainingSchema


class AvailabilityRequestSchema(BaseModel):
    dress_ids: list[str] = Field(min_length=1)
    start: datetime
    end: datetime | None = None


class BookingSchema(BaseModel):
    start: datetime
    end: datetime


class DressAvailabilitySchema(BaseModel):
    dress_id: str
    available: bool
    reserved_today: bool
    current_booking: BookingSchema | None = None


class AvailabilityResponseSchema(BaseModel):
    items: list[DressAvailabilitySchema]
    all_available: bool
    degraded: bool
    warning: str | None = None


class IssueSchema(BaseModel):
    code: str
    message: str


class ContractCreatedSchema(BaseModel):
    id: str
    contract_number: str
    status: str | None
    totals: TotalsSchema

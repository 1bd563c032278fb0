"""
Pydantic schemas
API request / response validation
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, EmailStr, field_validator, ConfigDict
from hotelpms.models.ontology import (
    RoomStatus, RoomType, BedType, BookingStatus, BookingSource, CommissionType,
    PaymentMethod, Currency, InvoiceStatus, LineItemCategory, GuestTier, EmployeeRole, PosUnit
)
from hotelpms.domain.booking import to_local_naive


# ============== Auth Schemas ==============

class LoginRequest(BaseModel):
    username: str
    password: str


class EmployeeResponse(BaseModel):
    id: int
    username: str
    name: str
    phone: Optional[str] = None
    role: EmployeeRole
    is_active: bool
    created_at: Optional[datetime] = None
    permissions: List[str] = []
    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    employee: EmployeeResponse


# ============== Employee Schemas ==============

class EmployeeCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=6)
    name: str = Field(..., max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    role: EmployeeRole


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    role: Optional[EmployeeRole] = None
    is_active: Optional[bool] = None


class PasswordReset(BaseModel):
    new_password: str = Field(..., min_length=6)


# ============== Room Schemas ==============

class RoomCreate(BaseModel):
    room_number: str = Field(..., max_length=10)
    room_type: RoomType
    floor: int = Field(..., ge=1)
    capacity_adults: int = Field(default=2, ge=1)
    capacity_children: int = Field(default=0, ge=0)
    max_occupancy: int = Field(default=2, ge=1)
    bed_type: BedType = BedType.DOUBLE
    bed_count: int = Field(default=1, ge=1)
    base_rate: Decimal = Field(..., ge=0)
    tax_rate: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[Currency] = None


class RoomUpdate(BaseModel):
    room_type: Optional[RoomType] = None
    capacity_adults: Optional[int] = Field(None, ge=1)
    capacity_children: Optional[int] = Field(None, ge=0)
    max_occupancy: Optional[int] = Field(None, ge=1)
    bed_type: Optional[BedType] = None
    bed_count: Optional[int] = Field(None, ge=1)
    base_rate: Optional[Decimal] = Field(None, ge=0)
    tax_rate: Optional[Decimal] = Field(None, ge=0)


class RoomStatusUpdate(BaseModel):
    status: RoomStatus


class RoomCleaned(BaseModel):
    notes: Optional[str] = None


class RoomMaintenance(BaseModel):
    notes: Optional[str] = None


class RoomResponse(BaseModel):
    id: int
    room_number: str
    room_type: RoomType
    floor: int
    capacity_adults: int
    capacity_children: int
    max_occupancy: int
    bed_type: BedType
    bed_count: int
    base_rate: Decimal
    tax_rate: Decimal
    total_rate: Decimal
    currency: Currency
    status: RoomStatus
    status_updated_at: Optional[datetime] = None
    status_updated_by: Optional[int] = None
    last_cleaned: Optional[datetime] = None
    cleaned_by: Optional[int] = None
    cleaning_notes: Optional[str] = None
    maintenance_required: bool
    maintenance_notes: Optional[str] = None
    last_maintenance: Optional[datetime] = None
    is_active: bool
    is_available: bool
    model_config = ConfigDict(from_attributes=True)


# ============== Guest Schemas ==============

class GuestCreate(BaseModel):
    first_name: str = Field(..., max_length=50)
    last_name: str = Field(..., max_length=50)
    email: EmailStr
    phone: str = Field(..., max_length=20)
    nationality: Optional[str] = Field(None, max_length=50)
    id_type: Optional[str] = Field(None, max_length=20)
    id_number: Optional[str] = Field(None, max_length=50)
    preferences: Optional[str] = None
    company_name: Optional[str] = Field(None, max_length=100)
    is_vip: bool = False
    loyalty_number: Optional[str] = Field(None, max_length=30)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class GuestUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    nationality: Optional[str] = Field(None, max_length=50)
    id_type: Optional[str] = Field(None, max_length=20)
    id_number: Optional[str] = Field(None, max_length=50)
    preferences: Optional[str] = None
    company_name: Optional[str] = Field(None, max_length=100)
    is_vip: Optional[bool] = None
    is_blacklisted: Optional[bool] = None
    blacklist_reason: Optional[str] = None


class LoyaltyPointsAdd(BaseModel):
    points: int = Field(..., ge=0)


class GuestResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    nationality: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    preferences: Optional[str] = None
    company_name: Optional[str] = None
    is_vip: bool
    loyalty_number: Optional[str] = None
    loyalty_points: int
    tier: GuestTier
    total_bookings: int
    total_revenue: Decimal
    average_stay_duration: Decimal
    last_stay_date: Optional[datetime] = None
    is_blacklisted: bool
    blacklist_reason: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ============== Booking Schemas ==============

class BookingCreate(BaseModel):
    guest_id: int
    room_id: int
    check_in: datetime
    check_out: datetime
    adults: int = Field(default=1, ge=1)
    children: int = Field(default=0, ge=0)
    infants: int = Field(default=0, ge=0)
    source: BookingSource
    discounts: Decimal = Field(default=Decimal("0"), ge=0)
    currency: Optional[Currency] = None
    special_requests: Optional[str] = None
    ota_name: Optional[str] = Field(None, max_length=50)
    ota_booking_id: Optional[str] = Field(None, max_length=50)
    ota_commission: Optional[Decimal] = Field(None, ge=0)
    ota_commission_type: Optional[CommissionType] = None

    @field_validator("check_in", "check_out")
    @classmethod
    def local_wall_clock(cls, v: datetime) -> datetime:
        return to_local_naive(v)


class BookingCancel(BaseModel):
    reason: str = Field(..., min_length=1)
    cancellation_fee: Decimal = Field(default=Decimal("0"), ge=0)
    refund_amount: Optional[Decimal] = Field(None, ge=0)


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    method: PaymentMethod
    reference: Optional[str] = Field(None, max_length=100)
    received_at: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("received_at")
    @classmethod
    def local_wall_clock(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v) if v is not None else v


class PaymentResponse(BaseModel):
    id: int
    amount: Decimal
    method: PaymentMethod
    reference: Optional[str] = None
    received_by: Optional[int] = None
    received_at: Optional[datetime] = None
    notes: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class BookingResponse(BaseModel):
    id: int
    booking_number: str
    guest_id: int
    room_id: int
    room_number: Optional[str] = None
    guest_name: Optional[str] = None
    check_in: datetime
    check_out: datetime
    actual_check_in: Optional[datetime] = None
    actual_check_out: Optional[datetime] = None
    late_check_out: bool = False
    adults: int
    children: int
    infants: int
    room_rate: Decimal
    total_nights: int
    subtotal: Decimal
    taxes: Decimal
    discounts: Decimal
    total_amount: Decimal
    currency: Currency
    source: BookingSource
    ota_name: Optional[str] = None
    ota_booking_id: Optional[str] = None
    ota_commission: Optional[Decimal] = None
    ota_commission_type: Optional[CommissionType] = None
    status: BookingStatus
    status_updated_at: Optional[datetime] = None
    status_updated_by: Optional[int] = None
    is_cancelled: bool
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    refund_amount: Optional[Decimal] = None
    cancellation_fee: Optional[Decimal] = None
    special_requests: Optional[str] = None
    payments: List[PaymentResponse] = []
    total_paid: Decimal
    outstanding_balance: Decimal
    invoice_id: Optional[int] = None


# ============== Invoice Schemas ==============

class InvoiceCreate(BaseModel):
    booking_id: int
    due_days: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class LineItemCreate(BaseModel):
    category: LineItemCategory
    description: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None


class LineItemResponse(BaseModel):
    id: int
    category: LineItemCategory
    description: str
    quantity: int
    unit_price: Decimal
    tax_rate: Decimal
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    date: Optional[datetime] = None
    added_by: Optional[int] = None
    notes: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class DiscountApply(BaseModel):
    amount: Decimal = Field(..., ge=0)


class InvoiceResponse(BaseModel):
    id: int
    invoice_number: str
    booking_id: int
    guest_id: int
    invoice_date: datetime
    due_date: datetime
    line_items: List[LineItemResponse] = []
    payments: List[PaymentResponse] = []
    subtotal: Decimal
    total_tax: Decimal
    discounts: Decimal
    total_amount: Decimal
    currency: Currency
    total_paid: Decimal
    outstanding_balance: Decimal
    last_payment_date: Optional[datetime] = None
    status: InvoiceStatus
    is_overdue: bool
    is_fully_paid: bool
    notes: Optional[str] = None


# ============== POS Schemas ==============

class PosItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    category: LineItemCategory
    subcategory: Optional[str] = Field(None, max_length=50)
    price: Decimal = Field(..., ge=0)
    tax_rate: Decimal = Field(default=Decimal("5"), ge=0)
    currency: Optional[Currency] = None
    unit: PosUnit = PosUnit.PIECE


class PosItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    subcategory: Optional[str] = Field(None, max_length=50)
    price: Optional[Decimal] = Field(None, ge=0)
    tax_rate: Optional[Decimal] = Field(None, ge=0)
    unit: Optional[PosUnit] = None
    is_available: Optional[bool] = None


class PosItemResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: LineItemCategory
    subcategory: Optional[str] = None
    price: Decimal
    tax_rate: Decimal
    total_price: Decimal
    currency: Currency
    unit: PosUnit
    is_available: bool
    is_active: bool
    total_sold: int
    total_revenue: Decimal
    last_sold: Optional[datetime] = None


class PosCharge(BaseModel):
    invoice_id: int
    item_id: int
    quantity: int = Field(default=1, ge=1)
    notes: Optional[str] = None

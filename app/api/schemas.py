"""Request bodies. JSON uses camelCase; snake_case names are accepted too."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.clock import as_naive_utc


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def pascal(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in name.split("_"))


def to_columns(body: BaseModel, exclude_unset: bool = False, exclude=None) -> Dict[str, Any]:
    """Map a body onto model column names (``early_bird_price`` -> ``EarlyBirdPrice``)."""
    out = {}
    dumped = body.model_dump(exclude_unset=exclude_unset, exclude=exclude)
    for key, value in dumped.items():
        if isinstance(value, datetime):
            value = as_naive_utc(value)
        out[pascal(key)] = value
    return out


# --- selection / registration ---------------------------------------------


class AddonSelectionIn(CamelModel):
    code: str
    quantity: int = Field(1, ge=0)
    options: Dict[str, str] = Field(default_factory=dict)


class SelectionIn(CamelModel):
    role: Optional[str] = None
    package_type: Optional[str] = None
    selected_table_number: Optional[int] = None
    wants_workshops: Optional[bool] = None
    workshop_ids: List[int] = Field(default_factory=list)
    milonga_ids: List[int] = Field(default_factory=list)
    addons: List[AddonSelectionIn] = Field(default_factory=list)
    leader_info: Optional[Dict[str, Any]] = None
    follower_info: Optional[Dict[str, Any]] = None

    def selection_kwargs(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "package_type": self.package_type,
            "selected_table_number": self.selected_table_number,
            "wants_workshops": self.wants_workshops,
            "workshop_ids": self.workshop_ids,
            "milonga_ids": self.milonga_ids,
            "addons": [a.model_dump() for a in self.addons],
            "leader_info": self.leader_info,
            "follower_info": self.follower_info,
        }


class PricingIn(SelectionIn):
    # Last total and catalog version the client displayed for this selection
    previous_total: Optional[Decimal] = None
    catalog_version: Optional[int] = None


class RegistrationIn(SelectionIn):
    payment_method: str = "stripe"
    # Accepted for compatibility; the stored total is always recomputed.
    total_amount: Optional[Decimal] = None


class PaymentStatusIn(CamelModel):
    status: str
    payment_intent_id: Optional[str] = None


class PaymentIntentIn(CamelModel):
    registration_id: str


class LoginIn(CamelModel):
    username: str
    password: str


# --- catalog admin ----------------------------------------------------------


class EventIn(CamelModel):
    name: str
    year: int
    start_date: datetime
    end_date: datetime
    registration_open_date: datetime
    registration_close_date: datetime
    venue: str
    description: Optional[str] = None
    is_active: bool = True
    is_current: bool = False
    workshop_standard_price: Decimal = Decimal("0")
    workshop_early_bird_price: Decimal = Decimal("0")
    workshop_early_bird_end_date: Optional[datetime] = None
    full_package_standard_price: Decimal = Decimal("0")
    full_package_early_bird_price: Decimal = Decimal("0")
    full_package_early_bird_end_date: Optional[datetime] = None
    full_package_24_hour_price: Decimal = Decimal("0")
    full_package_24_hour_start_date: Optional[datetime] = None
    full_package_24_hour_end_date: Optional[datetime] = None
    evening_package_standard_price: Decimal = Decimal("0")
    evening_package_early_bird_price: Decimal = Decimal("0")
    evening_package_early_bird_end_date: Optional[datetime] = None
    evening_package_24_hour_price: Decimal = Decimal("0")
    evening_package_24_hour_start_date: Optional[datetime] = None
    evening_package_24_hour_end_date: Optional[datetime] = None
    accommodation_4_nights_single_price: Decimal = Decimal("0")
    accommodation_4_nights_double_price: Decimal = Decimal("0")
    accommodation_4_nights_early_bird_single_price: Decimal = Decimal("0")
    accommodation_4_nights_early_bird_double_price: Decimal = Decimal("0")
    accommodation_4_nights_early_bird_end_date: Optional[datetime] = None
    accommodation_3_nights_single_price: Decimal = Decimal("0")
    accommodation_3_nights_double_price: Decimal = Decimal("0")
    accommodation_3_nights_early_bird_single_price: Decimal = Decimal("0")
    accommodation_3_nights_early_bird_double_price: Decimal = Decimal("0")
    accommodation_3_nights_early_bird_end_date: Optional[datetime] = None


class EventUpdate(CamelModel):
    name: Optional[str] = None
    year: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    registration_open_date: Optional[datetime] = None
    registration_close_date: Optional[datetime] = None
    venue: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    is_current: Optional[bool] = None
    workshop_standard_price: Optional[Decimal] = None
    workshop_early_bird_price: Optional[Decimal] = None
    workshop_early_bird_end_date: Optional[datetime] = None
    full_package_standard_price: Optional[Decimal] = None
    full_package_early_bird_price: Optional[Decimal] = None
    full_package_early_bird_end_date: Optional[datetime] = None
    full_package_24_hour_price: Optional[Decimal] = None
    full_package_24_hour_start_date: Optional[datetime] = None
    full_package_24_hour_end_date: Optional[datetime] = None
    evening_package_standard_price: Optional[Decimal] = None
    evening_package_early_bird_price: Optional[Decimal] = None
    evening_package_early_bird_end_date: Optional[datetime] = None
    evening_package_24_hour_price: Optional[Decimal] = None
    evening_package_24_hour_start_date: Optional[datetime] = None
    evening_package_24_hour_end_date: Optional[datetime] = None
    accommodation_4_nights_single_price: Optional[Decimal] = None
    accommodation_4_nights_double_price: Optional[Decimal] = None
    accommodation_4_nights_early_bird_single_price: Optional[Decimal] = None
    accommodation_4_nights_early_bird_double_price: Optional[Decimal] = None
    accommodation_4_nights_early_bird_end_date: Optional[datetime] = None
    accommodation_3_nights_single_price: Optional[Decimal] = None
    accommodation_3_nights_double_price: Optional[Decimal] = None
    accommodation_3_nights_early_bird_single_price: Optional[Decimal] = None
    accommodation_3_nights_early_bird_double_price: Optional[Decimal] = None
    accommodation_3_nights_early_bird_end_date: Optional[datetime] = None


class TableIn(CamelModel):
    table_number: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)
    total_seats: int = Field(6, ge=1)
    occupied_seats: int = Field(0, ge=0)
    is_vip: bool = False
    early_bird_price: Decimal = Decimal("0")
    early_bird_end_date: Optional[datetime] = None
    is_active: bool = True
    event_id: Optional[int] = None


class TableUpdate(CamelModel):
    table_number: Optional[int] = Field(None, ge=1)
    price: Optional[Decimal] = Field(None, ge=0)
    total_seats: Optional[int] = Field(None, ge=1)
    occupied_seats: Optional[int] = Field(None, ge=0)
    is_vip: Optional[bool] = None
    early_bird_price: Optional[Decimal] = None
    early_bird_end_date: Optional[datetime] = None
    is_active: Optional[bool] = None


class AddonIn(CamelModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str
    price: Decimal = Field(..., ge=0)
    description: Optional[str] = None
    category: str = "merchandise"
    kind: Optional[str] = None
    options: Optional[Dict[str, Any]] = None
    is_active: bool = True
    event_id: Optional[int] = None


class AddonUpdate(CamelModel):
    name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    category: Optional[str] = None
    kind: Optional[str] = None
    options: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None


class WorkshopIn(CamelModel):
    title: str
    instructor: str
    level: str = "intermediate"
    description: Optional[str] = None
    date: datetime
    time: str
    price: Decimal = Field(Decimal("0"), ge=0)
    capacity: int = Field(..., ge=0)
    leader_capacity: int = 0
    follower_capacity: int = 0
    event_id: Optional[int] = None


class WorkshopUpdate(CamelModel):
    title: Optional[str] = None
    instructor: Optional[str] = None
    level: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    time: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, ge=0)
    leader_capacity: Optional[int] = None
    follower_capacity: Optional[int] = None


class MilongaIn(CamelModel):
    name: str
    description: Optional[str] = None
    date: datetime
    time: str
    venue: str
    price: Decimal = Field(Decimal("0"), ge=0)
    early_bird_price: Decimal = Decimal("0")
    early_bird_end_date: Optional[datetime] = None
    type: str = "regular"
    capacity: int = Field(..., ge=0)
    event_id: Optional[int] = None


class MilongaUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    time: Optional[str] = None
    venue: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    early_bird_price: Optional[Decimal] = None
    early_bird_end_date: Optional[datetime] = None
    type: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)


class LayoutTable(CamelModel):
    id: str
    name: str = ""
    x: float
    y: float
    rotation: float = 0
    seats: int = 6
    type: str = "round"


class LayoutStage(CamelModel):
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0


class SeatingLayoutIn(CamelModel):
    tables: List[LayoutTable] = Field(default_factory=list)
    stage: Optional[LayoutStage] = None
    event_id: Optional[int] = None

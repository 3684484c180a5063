"""Row -> camelCase dict helpers shared by the routers."""

from datetime import datetime
from typing import Any, Dict, Optional

from app.models.addons import Addon
from app.models.event import Event
from app.models.gala import GalaTable
from app.models.registration import Registration
from app.models.user import AdminUser
from app.models.workshop import Milonga, Workshop
from app.services.catalog import (
    addon_entry,
    milonga_entry,
    table_entry,
    to_money,
    workshop_entry,
)


def money(value) -> float:
    return float(to_money(value))


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def event_to_dict(e: Event) -> Dict[str, Any]:
    return {
        "id": e.EventID,
        "name": e.Name,
        "year": e.Year,
        "startDate": iso(e.StartDate),
        "endDate": iso(e.EndDate),
        "registrationOpenDate": iso(e.RegistrationOpenDate),
        "registrationCloseDate": iso(e.RegistrationCloseDate),
        "description": e.Description,
        "venue": e.Venue,
        "isActive": bool(e.IsActive),
        "isCurrent": bool(e.IsCurrent),
        "workshopStandardPrice": money(e.WorkshopStandardPrice),
        "workshopEarlyBirdPrice": money(e.WorkshopEarlyBirdPrice),
        "workshopEarlyBirdEndDate": iso(e.WorkshopEarlyBirdEndDate),
        "fullPackageStandardPrice": money(e.FullPackageStandardPrice),
        "fullPackageEarlyBirdPrice": money(e.FullPackageEarlyBirdPrice),
        "fullPackageEarlyBirdEndDate": iso(e.FullPackageEarlyBirdEndDate),
        "fullPackage24HourPrice": money(e.FullPackage24HourPrice),
        "fullPackage24HourStartDate": iso(e.FullPackage24HourStartDate),
        "fullPackage24HourEndDate": iso(e.FullPackage24HourEndDate),
        "eveningPackageStandardPrice": money(e.EveningPackageStandardPrice),
        "eveningPackageEarlyBirdPrice": money(e.EveningPackageEarlyBirdPrice),
        "eveningPackageEarlyBirdEndDate": iso(e.EveningPackageEarlyBirdEndDate),
        "eveningPackage24HourPrice": money(e.EveningPackage24HourPrice),
        "eveningPackage24HourStartDate": iso(e.EveningPackage24HourStartDate),
        "eveningPackage24HourEndDate": iso(e.EveningPackage24HourEndDate),
        "accommodation4NightsSinglePrice": money(e.Accommodation4NightsSinglePrice),
        "accommodation4NightsDoublePrice": money(e.Accommodation4NightsDoublePrice),
        "accommodation4NightsEarlyBirdSinglePrice": money(e.Accommodation4NightsEarlyBirdSinglePrice),
        "accommodation4NightsEarlyBirdDoublePrice": money(e.Accommodation4NightsEarlyBirdDoublePrice),
        "accommodation4NightsEarlyBirdEndDate": iso(e.Accommodation4NightsEarlyBirdEndDate),
        "accommodation3NightsSinglePrice": money(e.Accommodation3NightsSinglePrice),
        "accommodation3NightsDoublePrice": money(e.Accommodation3NightsDoublePrice),
        "accommodation3NightsEarlyBirdSinglePrice": money(e.Accommodation3NightsEarlyBirdSinglePrice),
        "accommodation3NightsEarlyBirdDoublePrice": money(e.Accommodation3NightsEarlyBirdDoublePrice),
        "accommodation3NightsEarlyBirdEndDate": iso(e.Accommodation3NightsEarlyBirdEndDate),
    }


def table_to_dict(t: GalaTable, now: datetime) -> Dict[str, Any]:
    entry = table_entry(t)
    return {
        "id": t.TableID,
        "eventId": t.EventID,
        "tableNumber": entry.table_number,
        "totalSeats": entry.total_seats,
        "occupiedSeats": entry.occupied_seats,
        "availableSeats": entry.available_seats,
        "isVip": entry.is_vip,
        "price": float(entry.price),
        "earlyBirdPrice": float(entry.early_bird_price),
        "earlyBirdEndDate": iso(entry.early_bird_end),
        "effectivePrice": float(entry.effective_price(now)),
        "isEarlyBird": entry.is_early_bird(now),
        "isActive": bool(t.IsActive),
    }


def addon_to_dict(a: Addon) -> Dict[str, Any]:
    entry = addon_entry(a)
    return {
        "id": a.AddonID,
        "eventId": a.EventID,
        "code": entry.code,
        "name": entry.name,
        "description": a.Description,
        "price": float(entry.price),
        "category": entry.category,
        "kind": entry.kind.value,
        "sizes": list(entry.sizes),
        "options": a.Options or {},
        "isActive": bool(a.IsActive),
    }


def workshop_to_dict(w: Workshop) -> Dict[str, Any]:
    entry = workshop_entry(w)
    return {
        "id": w.WorkshopID,
        "eventId": w.EventID,
        "title": w.Title,
        "instructor": w.Instructor,
        "level": w.Level,
        "description": w.Description,
        "date": iso(w.Date),
        "time": w.Time,
        "price": float(entry.price),
        "capacity": entry.capacity,
        "enrolled": entry.enrolled,
        "spotsLeft": entry.spots_left,
        "selectable": entry.selectable,
        "leaderCapacity": w.LeaderCapacity,
        "followerCapacity": w.FollowerCapacity,
        "leadersEnrolled": w.LeadersEnrolled,
        "followersEnrolled": w.FollowersEnrolled,
    }


def milonga_to_dict(m: Milonga, now: datetime) -> Dict[str, Any]:
    entry = milonga_entry(m)
    return {
        "id": m.MilongaID,
        "eventId": m.EventID,
        "name": m.Name,
        "description": m.Description,
        "date": iso(m.Date),
        "time": m.Time,
        "venue": m.Venue,
        "price": float(entry.price),
        "earlyBirdPrice": float(entry.early_bird_price),
        "earlyBirdEndDate": iso(entry.early_bird_end),
        "effectivePrice": float(entry.effective_price(now)),
        "type": m.Type,
        "capacity": m.Capacity,
        "enrolled": m.Enrolled,
    }


def registration_to_dict(r: Registration) -> Dict[str, Any]:
    return {
        "id": r.RegistrationID,
        "eventId": r.EventID,
        "packageType": r.PackageType,
        "role": r.Role,
        "leaderInfo": r.LeaderInfo,
        "followerInfo": r.FollowerInfo,
        "workshopIds": r.WorkshopIDs or [],
        "milongaIds": r.MilongaIDs or [],
        "selectedTableNumber": r.SelectedTableNumber,
        "wantsWorkshops": r.WantsWorkshops,
        "addons": r.Addons or [],
        "priceBreakdown": r.PriceBreakdown or [],
        "totalAmount": money(r.TotalAmount),
        "currency": r.Currency,
        "paymentMethod": r.PaymentMethod,
        "paymentStatus": r.PaymentStatus,
        "stripePaymentIntentId": r.StripePaymentIntentID,
        "createdAt": iso(r.CreatedAt),
        "paidAt": iso(r.PaidAt),
    }


def admin_to_dict(a: AdminUser) -> Dict[str, Any]:
    return {
        "id": a.AdminID,
        "username": a.Username,
        "email": a.Email,
        "role": a.Role,
        "lastLoginAt": iso(a.LastLoginAt),
    }

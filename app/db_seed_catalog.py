from decimal import Decimal

from sqlalchemy.orm import Session

from app.models.addons import Addon
from app.services.event_service import get_current_event
from db import SessionLocal

ADDONS = [
    {
        "Code": "tshirt",
        "Name": "Festival T-Shirt",
        "Description": "Official festival t-shirt",
        "Price": Decimal("35.00"),
        "Category": "merchandise",
        "Kind": "sized",
        "Options": {"sizes": ["XS", "S", "M", "L", "XL", "XXL"]},
    },
    {
        "Code": "desert-transport",
        "Name": "Desert Milonga Transport",
        "Description": "Return bus to the desert milonga (one seat per dancer)",
        "Price": Decimal("75.00"),
        "Category": "transportation",
        "Kind": "transport",
        "Options": {"icon": "bus"},
    },
]


def upsert_addon(db: Session, event_id: int, data: dict) -> Addon:
    code = data["Code"].lower()
    addon = db.query(Addon).filter(Addon.EventID == event_id, Addon.Code == code).first()
    if not addon:
        addon = Addon(EventID=event_id, Code=code)
        db.add(addon)
    for k, v in data.items():
        if k == "Code":
            continue
        setattr(addon, k, v)
    setattr(addon, "IsActive", True)
    db.commit()
    return addon


def seed(db: Session) -> list:
    event = get_current_event(db)
    return [upsert_addon(db, int(event.EventID), a) for a in ADDONS]


if __name__ == "__main__":
    db = SessionLocal()
    try:
        seed(db)
        print("Seeded addons: ", ", ".join([a["Code"] for a in ADDONS]))
    finally:
        db.close()

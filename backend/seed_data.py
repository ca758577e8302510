"""
Sample data seeding script
- Shipments 12 (3 containers), Products 8, Vehicles 4, Categories 4,
  settings document, one local super admin
- Run: cd backend && python seed_data.py
"""

import random
import sys
import os
from datetime import date, datetime, timedelta, timezone

# Resolve the jaybesin package relative to backend/
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from jaybesin.database import engine, SessionLocal, Base
from jaybesin.models import (
    Category, Product, Shipment, SiteSettingsDocument, User, Vehicle,
)
from jaybesin.models.site_settings import GLOBAL_SETTINGS_KEY
from jaybesin.models.user import UserRole
from jaybesin.core.shipment_record import (
    build_shipment_payload, generate_tracking_number, sanitize_category,
    sanitize_product, sanitize_vehicle,
)
from jaybesin.core.stages import LOGISTICS_STAGES
from jaybesin.schemas.settings import SiteSettings

LOCAL_ADMIN_UID = "local-admin"

CONSIGNEES = [
    ("Kwame Mensah", "+233 24 555 0101", "Kumasi, Ashanti"),
    ("Ama Owusu", "+233 20 555 0102", "Tema, Greater Accra"),
    ("Kofi Boateng", "+233 27 555 0103", "Takoradi, Western"),
    ("Abena Asante", "+233 55 555 0104", "Cape Coast, Central"),
    ("Yaw Darko", "+233 26 555 0105", "Tamale, Northern"),
    ("Efua Adjei", "+233 24 555 0106", "Osu, Accra"),
]

CARGO = [
    ("Solar panels", 0.8), ("Phone accessories", 0.3), ("Furniture set", 2.5),
    ("Textile rolls", 1.2), ("Kitchen appliances", 1.0), ("Auto spare parts", 0.6),
    ("LED lighting", 0.4), ("Ceramic tiles", 1.8),
]

CONTAINERS = ["MSCU1234567", "MAEU7654321", "CMAU5551234"]


def seed_shipments(session, rng):
    """12 manifests spread over the stages; the first nine share 3 containers"""
    shipments = []
    now = datetime.now(timezone.utc)
    used = set()
    for idx in range(12):
        name, phone, address = CONSIGNEES[idx % len(CONSIGNEES)]
        tracking = generate_tracking_number(rng)
        while tracking in used:
            tracking = generate_tracking_number(rng)
        used.add(tracking)

        items = []
        for description, cbm in rng.sample(CARGO, rng.randint(1, 3)):
            items.append({
                "description": description,
                "quantity": rng.randint(1, 20),
                "cbm": round(cbm * rng.uniform(0.5, 2.0), 2),
                "weight": round(rng.uniform(20, 400), 1),
            })

        received = date.today() - timedelta(days=40 - idx * 3)
        payload = build_shipment_payload({
            "tracking_number": tracking,
            "date_received": received.isoformat(),
            "status": LOGISTICS_STAGES[min(idx, len(LOGISTICS_STAGES) - 1)],
            "consignee_name": name,
            "consignee_phone": phone,
            "consignee_address": address,
            "container_id": CONTAINERS[idx // 3] if idx < 9 else "",
            "rate_per_cbm": 450,
            "shipping_fee": rng.choice([0, 25, 50]),
            "items": items,
        })
        created = now - timedelta(days=40 - idx * 3)
        shipments.append(Shipment(**payload, created_at=created, last_updated=created))

    session.add_all(shipments)
    session.commit()
    print(f"  [OK] {len(shipments)} shipments")
    return shipments


def seed_catalog(session):
    """Sourcing mart products, showroom vehicles and categories"""
    categories = [Category(**sanitize_category(n)) for n in ("electronics", "solar", "furniture", "auto parts")]
    products = [
        Product(**sanitize_product(p)) for p in [
            {"name": "Tecno Spark 20", "price": 135, "category": "ELECTRONICS", "is_landed_cost": True},
            {"name": "Bluetooth Speaker", "price": 22.5, "category": "ELECTRONICS"},
            {"name": "400W Mono Panel", "price": 95, "category": "SOLAR", "is_landed_cost": True},
            {"name": "5kVA Hybrid Inverter", "price": 420, "category": "SOLAR"},
            {"name": "Office Chair", "price": 48, "category": "FURNITURE"},
            {"name": "3-Seater Sofa", "price": 310, "category": "FURNITURE", "is_landed_cost": True},
            {"name": "Brake Pad Set", "price": 18, "category": "AUTO PARTS"},
            {"name": "LED Headlight Pair", "price": 36, "category": "AUTO PARTS"},
        ]
    ]
    vehicles = [
        Vehicle(**sanitize_vehicle(v)) for v in [
            {"name": "Toyota RAV4 XLE", "year": "2019", "price": 16800, "engine": "2.5L I4",
             "vin": "2T3W1RFV8KW000001", "category": "SUV"},
            {"name": "Honda Civic EX", "year": "2018", "price": 11200, "engine": "1.5L Turbo",
             "vin": "19XFC1F30JE000002", "category": "Sedan"},
            {"name": "BYD Song Plus EV", "year": "2023", "price": 21500, "engine": "Electric",
             "fuel": "Electric", "condition": "New", "category": "SUV"},
            {"name": "Toyota Hilux", "year": "2020", "price": 24900, "engine": "2.8L Diesel",
             "fuel": "Diesel", "category": "Pickup"},
        ]
    ]
    session.add_all(categories + products + vehicles)
    session.commit()
    print(f"  [OK] {len(categories)} categories, {len(products)} products, {len(vehicles)} vehicles")
    return categories, products, vehicles


def seed_settings(session):
    session.add(SiteSettingsDocument(key=GLOBAL_SETTINGS_KEY, data=SiteSettings().model_dump()))
    session.add(User(uid=LOCAL_ADMIN_UID, email="admin@jaybesin.com", role=UserRole.SUPER_ADMIN))
    session.commit()
    print(f"  [OK] settings document, super admin '{LOCAL_ADMIN_UID}'")


def main():
    print("=" * 60)
    print("JayBesin Logistics: sample data")
    print("=" * 60)

    # Recreate every table
    print("\n[1/4] Creating tables...")
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print("  [OK] tables created")

    rng = random.Random(42)
    session = SessionLocal()
    try:
        print("\n[2/4] Shipments...")
        seed_shipments(session, rng)

        print("\n[3/4] Catalog...")
        seed_catalog(session)

        print("\n[4/4] Settings + users...")
        seed_settings(session)

        print("\n" + "=" * 60)
        print("Seeding complete!")
        print("=" * 60)

    except Exception as e:
        session.rollback()
        print(f"\n[ERROR] seeding failed: {e}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()

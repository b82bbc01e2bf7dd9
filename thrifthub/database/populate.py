from decimal import Decimal
import logging
import bcrypt
from sqlmodel import Session, select
from thrifthub.cache.cache import CacheManager
from thrifthub.configuration.settings import Configuration
from thrifthub.enums.product_category import ProductCategory
from thrifthub.enums.product_condition import ProductCondition
from thrifthub.enums.user_role import UserRole
from thrifthub.models.campus.campus import Campus
from thrifthub.models.campus.campus_zone import CampusZone
from thrifthub.models.campus.zone_adjacency import ZoneAdjacency
from thrifthub.models.product.product import Product
from thrifthub.models.user.user import User

configuration = Configuration()

CAMPUS = {"code": "UG", "name": "University of Ghana, Legon"}

ZONES = [
    {"code": "UG-COMMONWEALTH", "name": "Commonwealth Hall", "description": "Commonwealth and Volta halls", "delivery_fee": Decimal("5.00")},
    {"code": "UG-LEGON", "name": "Legon Hall", "description": "Legon Hall and annexes", "delivery_fee": Decimal("5.00")},
    {"code": "UG-AKUAFO", "name": "Akuafo Hall", "description": "Akuafo Hall and the Night Market", "delivery_fee": Decimal("6.00")},
    {"code": "UG-PENTAGON", "name": "Pentagon", "description": "Pentagon and Jubilee hostels", "delivery_fee": Decimal("8.00")},
]

# Pairs of zone codes whose riders cover for each other
ADJACENCY = [
    ("UG-COMMONWEALTH", "UG-LEGON"),
    ("UG-LEGON", "UG-AKUAFO"),
    ("UG-AKUAFO", "UG-PENTAGON"),
]

PRODUCTS = [
    {"title": "Vintage Denim Jacket", "description": "Light wash denim jacket, barely worn.", "category": ProductCategory.OUTERWEAR,
     "size": "M", "color": "Blue", "brand": "Levi's", "condition": ProductCondition.VINTAGE, "price": Decimal("120.00"), "stock": 2},
    {"title": "Kente Print Shirt", "description": "Short sleeve shirt with kente print.", "category": ProductCategory.TOPS,
     "size": "L", "color": "Multicolour", "brand": None, "condition": ProductCondition.LIKE_NEW, "price": Decimal("65.00"), "stock": 5},
    {"title": "High Waist Trousers", "description": "Black tailored trousers.", "category": ProductCategory.BOTTOMS,
     "size": "S", "color": "Black", "brand": "Zara", "condition": ProductCondition.GOOD, "price": Decimal("80.00"), "stock": 3},
    {"title": "Floral Summer Dress", "description": "Midi dress, floral pattern.", "category": ProductCategory.DRESSES,
     "size": "M", "color": "Yellow", "brand": "H&M", "condition": ProductCondition.GOOD, "price": Decimal("95.50"), "stock": 1},
    {"title": "White Sneakers", "description": "Canvas sneakers, cleaned and restored.", "category": ProductCategory.SHOES,
     "size": "42", "color": "White", "brand": "Converse", "condition": ProductCondition.FAIR, "price": Decimal("150.00"), "stock": 1},
]


def populate_database(session: Session):
    """Loads the starter data: admin account, campus zones and a few products."""
    populate_admin_user(session)
    campus = populate_campus(session)
    populate_zones(session, campus_id=campus.id)
    populate_products(session)


def populate_admin_user(session: Session) -> User:
    email = configuration.admin_email.lower()
    user = session.exec(select(User).where(User.email == email)).first()
    if user:
        return user

    user = User(
        email=email,
        password_hash=bcrypt.hashpw(configuration.admin_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8"),
        first_name="ThriftHub",
        last_name="Admin",
        role=UserRole.ADMIN,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logging.info(f"SEED >>> Admin user {email} created")
    return user


def populate_campus(session: Session) -> Campus:
    campus = session.exec(select(Campus).where(Campus.code == CAMPUS["code"])).first()
    if not campus:
        campus = Campus(**CAMPUS)
        session.add(campus)
        session.commit()
        session.refresh(campus)
    return campus


def populate_zones(session: Session, campus_id: int):
    zones = {}
    for data in ZONES:
        zone = session.exec(select(CampusZone).where(CampusZone.code == data["code"])).first()
        if not zone:
            zone = CampusZone(campus_id=campus_id, **data)
            session.add(zone)
            session.flush()
        zones[zone.code] = zone

    for first, second in ADJACENCY:
        zone_id, adjacent_id = zones[first].id, zones[second].id
        exists = session.exec(
            select(ZoneAdjacency).where(
                ZoneAdjacency.zone_id == zone_id,
                ZoneAdjacency.adjacent_zone_id == adjacent_id,
            )
        ).first()
        if not exists:
            session.add(ZoneAdjacency(zone_id=zone_id, adjacent_zone_id=adjacent_id))

    session.commit()
    CacheManager().clear_zones()


def populate_products(session: Session):
    if session.exec(select(Product)).first():
        return

    for data in PRODUCTS:
        session.add(Product(**data))
    session.commit()
    logging.info(f"SEED >>> {len(PRODUCTS)} products created")

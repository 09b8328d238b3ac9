"""
Fixtures compartidas para los tests de MS-VISITS-PY
"""
import os

# La app se importa con una base SQLite en memoria
os.environ["DATABASE_URL"] = "sqlite://"

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.config import settings
from src.main import app
from src.models import (
    Base, get_db, Manager, Representative, RepresentativeBrand,
    Specialization, Doctor, Brand, Product
)
from src.models.database import build_engine
from src.clients import notification_client
from src.utils.auth import Actor

# Una sola conexión compartida para que la app y los tests vean los mismos datos
engine = build_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency"""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Crear y limpiar base de datos antes de cada test"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def sent_notifications(monkeypatch):
    """Reemplaza el envío real por una lista en memoria"""
    sent = []

    async def fake_send(payload):
        sent.append(payload)
        return True

    monkeypatch.setattr(notification_client, "send", fake_send)
    return sent


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def catalog(db):
    """
    Catálogo mínimo:
    - Gerente M con representante R (marca B1) y representante R2 (marca B2)
    - Médico D (Cardiology) y médico D2 (sin especialización)
    - P1 (B1, prioritario para Cardiology), P2 (B1, sin prioridad), P3 (B2)
    """
    manager = Manager(full_name="Leyla Hasanova", email="manager@test.com", user_id=100)
    db.add(manager)
    db.flush()

    rep = Representative(
        first_name="Aylin", last_name="Mammadova", email="rep@test.com",
        user_id=10, manager_id=manager.id
    )
    other_rep = Representative(
        first_name="Farid", last_name="Guliyev", email="rep2@test.com",
        user_id=20, manager_id=manager.id
    )
    b1 = Brand(name="Pharma A")
    b2 = Brand(name="Pharma B")
    cardiology = Specialization(name="Cardiology", display_name="Cardiología")
    db.add_all([rep, other_rep, b1, b2, cardiology])
    db.flush()

    db.add_all([
        RepresentativeBrand(representative_id=rep.id, brand_id=b1.id),
        RepresentativeBrand(representative_id=other_rep.id, brand_id=b2.id),
    ])

    doctor = Doctor(first_name="Rashad", last_name="Aliyev", specialization_id=cardiology.id, category="A")
    doctor2 = Doctor(first_name="Nigar", last_name="Karimova", category="B")
    p1 = Product(brand_id=b1.id, name="Cardiomax", description="10 mg", priority_specializations=["Cardiology"])
    p2 = Product(brand_id=b1.id, name="Dermacare", priority_specializations=[])
    p3 = Product(brand_id=b2.id, name="Neurofix", priority_specializations=["Neurology"])
    db.add_all([doctor, doctor2, p1, p2, p3])
    db.commit()

    return SimpleNamespace(
        manager_id=manager.id,
        rep_id=rep.id,
        other_rep_id=other_rep.id,
        doctor_id=doctor.id,
        doctor2_id=doctor2.id,
        b1_id=b1.id,
        b2_id=b2.id,
        p1_id=p1.id,
        p2_id=p2.id,
        p3_id=p3.id,
    )


@pytest.fixture
def manager_actor():
    return Actor(user_id=100, email="manager@test.com", role="MANAGER")


@pytest.fixture
def rep_actor(catalog):
    return Actor(user_id=10, email="rep@test.com", role="REPRESENTATIVE", representative_id=catalog.rep_id)


@pytest.fixture
def other_rep_actor(catalog):
    return Actor(user_id=20, email="rep2@test.com", role="REPRESENTATIVE", representative_id=catalog.other_rep_id)


def make_token(email: str, role: str, user_id: int) -> str:
    return jwt.encode(
        {"sub": email, "role": role, "user_id": user_id},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def auth_headers(email: str, role: str, user_id: int) -> dict:
    return {"Authorization": f"Bearer {make_token(email, role, user_id)}"}


@pytest.fixture
def manager_headers():
    return auth_headers("manager@test.com", "MANAGER", 100)


@pytest.fixture
def rep_headers(catalog):
    return auth_headers("rep@test.com", "REP", 10)


@pytest.fixture
def other_rep_headers(catalog):
    return auth_headers("rep2@test.com", "REPRESENTATIVE", 20)

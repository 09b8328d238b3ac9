"""
Modelos de la base de datos
"""
from .database import Base, get_db, engine, SessionLocal
from .representative import Manager, Representative, RepresentativeBrand
from .doctor import Specialization, Doctor
from .product import Brand, Product
from .assignment import Assignment, VisitGoal, AssignmentProduct
from .meeting import Meeting, MeetingProduct, DiscussedProduct

__all__ = [
    "Base",
    "get_db",
    "engine",
    "SessionLocal",
    "Manager",
    "Representative",
    "RepresentativeBrand",
    "Specialization",
    "Doctor",
    "Brand",
    "Product",
    "Assignment",
    "VisitGoal",
    "AssignmentProduct",
    "Meeting",
    "MeetingProduct",
    "DiscussedProduct",
]

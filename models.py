# models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, String, DateTime, Float, ForeignKey
from sqlalchemy.orm import relationship

from db import Base


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id():
    return str(uuid.uuid4())


def _iso(ts):
    return ts.isoformat() if ts else None


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(20), nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    is_guest = Column(Boolean, nullable=False, default=False)
    profile_picture = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    rating = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    reports = relationship("Report", back_populates="user")

    def public_dict(self):
        return {"name": self.name, "email": self.email, "isGuest": bool(self.is_guest)}


class Report(Base):
    __tablename__ = "reports"
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    image_url = Column(String, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    address = Column(String, nullable=True)
    detection_result_percentage = Column(Float, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    user = relationship("User", back_populates="reports")

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "imageUrl": self.image_url,
            "location": {
                "latitude": self.latitude,
                "longitude": self.longitude,
                "address": self.address or "",
            },
            "detectionResultPercentage": self.detection_result_percentage,
            "createdAt": _iso(self.created_at),
        }

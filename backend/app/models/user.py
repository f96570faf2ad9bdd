from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship, validates
from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(254), unique=True, nullable=False, index=True)
    # E.164; NULL for users who never linked a phone (NULLs don't collide on UNIQUE)
    phone = Column(String(16), unique=True, nullable=True, index=True)
    password = Column(String(200), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @validates('email')
    def normalize_email(self, key, email_value):
        return email_value.strip().lower() if email_value else email_value

    @validates('phone')
    def normalize_phone(self, key, phone_value):
        if phone_value is None:
            return None
        phone_value = phone_value.strip()
        return phone_value or None

    diet_plans = relationship(
        "DietPlan",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

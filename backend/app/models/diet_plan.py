from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, DateTime, Index, UniqueConstraint, JSON, text
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from app.database import Base

# Plain JSON on SQLite (tests), JSONB on PostgreSQL
JSONType = JSON().with_variant(JSONB(), "postgresql")

# Tag stored alongside plan_data; the client renders each shape differently
PLAN_SCHEMA_LEGACY = 1
PLAN_SCHEMA_WEEKLY = 2


class DietPlan(Base):
    __tablename__ = "diet_plans"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    plan_data = Column(
        JSONType,
        nullable=False,
        comment="Validated plan as returned by the generator"
    )
    plan_schema_version = Column(Integer, nullable=False, default=PLAN_SCHEMA_WEEKLY)

    user_input = Column(
        JSONType,
        nullable=False,
        comment="Normalized health profile the plan was generated from"
    )

    version = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)

    last_accessed_at = Column(DateTime, default=datetime.utcnow)
    created_by = Column(String(50), default="system")
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="diet_plans")

    __table_args__ = (
        UniqueConstraint("user_id", "version", name="uq_diet_plans_user_version"),
        Index("ix_diet_plans_user_active", "user_id", "is_active"),
        # At most one active plan per user
        Index(
            "uq_diet_plans_one_active",
            "user_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

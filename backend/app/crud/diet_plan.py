from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ForbiddenError, PlanConflictError, PlanNotFoundError
from app.models.diet_plan import DietPlan, PLAN_SCHEMA_WEEKLY

"""
Diet Plan CRUD
--------------
Plan versioning: every user has at most one active plan, and versions
count up from 1 per user. Deactivating the old plan and inserting the new
one commit together; the partial unique index on (user_id) WHERE is_active
turns a concurrent double-generate into PlanConflictError instead of two
active plans.
"""


def create_plan_version(
    db: Session,
    user_id: int,
    plan_data: dict,
    user_input: dict,
    created_by: str = "system",
    plan_schema_version: int = PLAN_SCHEMA_WEEKLY
) -> DietPlan:
    try:
        # 1. Deactivate previous active plans
        db.query(DietPlan).filter(
            DietPlan.user_id == user_id,
            DietPlan.is_active == True  # noqa: E712
        ).update({DietPlan.is_active: False}, synchronize_session="fetch")

        # 2. Next version
        current_max = db.query(func.max(DietPlan.version)).filter(DietPlan.user_id == user_id).scalar()
        new_version = (current_max or 0) + 1

        # 3. Insert the new active plan
        db_plan = DietPlan(
            user_id=user_id,
            plan_data=plan_data,
            plan_schema_version=plan_schema_version,
            user_input=user_input,
            version=new_version,
            is_active=True,
            created_by=created_by,
        )
        db.add(db_plan)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise PlanConflictError(f"Concurrent plan version write for user {user_id}: {e.orig}") from e
    except Exception:
        db.rollback()
        raise

    db.refresh(db_plan)
    return db_plan


def find_active_plan(db: Session, user_id: int) -> Optional[DietPlan]:
    return db.query(DietPlan).filter(
        DietPlan.user_id == user_id,
        DietPlan.is_active == True  # noqa: E712
    ).order_by(DietPlan.version.desc()).first()


def get_latest_plan(db: Session, user_id: int) -> DietPlan:
    """
    Return the active plan and record the access.
    """
    db_plan = find_active_plan(db, user_id)
    if db_plan is None:
        raise PlanNotFoundError("No active diet plan found. Please generate one first.")

    db_plan.last_accessed_at = datetime.utcnow()
    db.commit()
    db.refresh(db_plan)
    return db_plan


def get_plan_for_user(db: Session, plan_id: int, user_id: int) -> DietPlan:
    db_plan = db.get(DietPlan, plan_id)
    if db_plan is None:
        raise PlanNotFoundError("Diet plan not found")
    if db_plan.user_id != user_id:
        raise ForbiddenError("You do not have permission to access this diet plan")
    return db_plan


def list_plans(db: Session, user_id: int) -> List[DietPlan]:
    return db.query(DietPlan).filter(DietPlan.user_id == user_id).order_by(DietPlan.version.desc()).all()

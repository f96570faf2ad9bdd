import logging
from io import BytesIO
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.api.auth import get_current_user
from app.api.deps import get_diet_generator
from app.crud import diet_plan as crud_diet_plan
from app.database import get_db
from app.models.diet_plan import DietPlan
from app.models.user import User
from app.schemas.diet_plan import DietProfileRequest, DietPlanResponse, DietPlanSummary, PlanOwner
from app.services.diet_service import DietPlanGenerator, generate_diet_plan
from app.services.plan_validator import plan_type_of, load_stored_plan
from app.utils.pdf_generator import render_diet_plan_pdf

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/diet",
    tags=["Diet Plans"]
)


def to_response(plan: DietPlan) -> DietPlanResponse:
    return DietPlanResponse(
        id=plan.id,
        user=PlanOwner.model_validate(plan.user),
        plan_type=plan_type_of(plan),
        plan_schema_version=plan.plan_schema_version,
        plan_data=plan.plan_data,
        user_input=plan.user_input,
        version=plan.version,
        is_active=plan.is_active,
        last_accessed_at=plan.last_accessed_at,
        created_by=plan.created_by,
        created_at=plan.created_at,
    )


@router.post("/generate", response_model=DietPlanResponse, status_code=status.HTTP_201_CREATED)
async def generate_diet_endpoint(
    profile: DietProfileRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    generator: DietPlanGenerator = Depends(get_diet_generator)
):
    logger.info(f"Generating diet plan for user {current_user.id}")
    diet_plan = await generate_diet_plan(db, current_user, profile, generator)
    logger.info(f"Stored diet plan v{diet_plan.version} for user {current_user.id}")
    return to_response(diet_plan)


@router.get("/latest", response_model=DietPlanResponse)
def get_latest_diet(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return to_response(crud_diet_plan.get_latest_plan(db, current_user.id))


@router.get("/history", response_model=List[DietPlanSummary])
def get_diet_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return [
        DietPlanSummary(
            id=plan.id,
            version=plan.version,
            is_active=plan.is_active,
            plan_type=plan_type_of(plan),
            calories_per_day=(plan.plan_data or {}).get("calories_per_day"),
            created_at=plan.created_at,
        )
        for plan in crud_diet_plan.list_plans(db, current_user.id)
    ]


@router.get("/{plan_id}", response_model=DietPlanResponse)
def get_diet_by_id(
    plan_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return to_response(crud_diet_plan.get_plan_for_user(db, plan_id, current_user.id))


@router.get("/{plan_id}/pdf")
def download_diet_pdf(
    plan_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    diet_plan = crud_diet_plan.get_plan_for_user(db, plan_id, current_user.id)
    pdf_bytes = render_diet_plan_pdf(load_stored_plan(diet_plan), current_user.name)

    file_name = f"DietPlan_{'_'.join(current_user.name.split())}_v{diet_plan.version}.pdf"
    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )

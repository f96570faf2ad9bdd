import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.api.deps import get_qa_client
from app.database import get_db
from app.schemas.whatsapp import WhatsAppQuery
from app.services import whatsapp_service
from app.services.llm_service import GenerationClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/whatsapp", tags=["WhatsApp"])


@router.post("/query", response_class=PlainTextResponse)
async def whatsapp_query(
    request: Request,
    db: Session = Depends(get_db),
    qa_client: GenerationClient = Depends(get_qa_client)
):
    """
    Webhook for the messaging automation.
    Input: { "phone": str, "message": str }. Output: plain text. No auth.
    """
    try:
        query = WhatsAppQuery.model_validate(await request.json())
    except ValidationError as e:
        issues = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])} - {err['msg']}" for err in e.errors()
        )
        return PlainTextResponse(f"Invalid input format. Issues: {issues}", status_code=status.HTTP_400_BAD_REQUEST)
    except ValueError:
        return PlainTextResponse("Invalid input format. Body must be JSON.", status_code=status.HTTP_400_BAD_REQUEST)

    logger.info(f"WhatsApp query received, message length: {len(query.message)}")

    try:
        answer = await whatsapp_service.handle_query(db, query.phone, query.message, qa_client)
    except Exception:
        logger.exception("WhatsApp query failed")
        return PlainTextResponse(
            "Internal server error. Please try again later.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return PlainTextResponse(answer)

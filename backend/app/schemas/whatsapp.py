from pydantic import BaseModel, Field


class WhatsAppQuery(BaseModel):
    phone: str = Field(..., min_length=10, pattern=r"^\+?[1-9]\d{1,14}$")
    message: str = Field(..., min_length=1, max_length=1000)

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error_code: str
    message: str


class ShortAnswer(BaseModel):
    query: str
    answer: str


class StatusResponse(BaseModel):
    integration: str
    configured: bool
    message: str

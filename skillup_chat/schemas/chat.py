"""Schemas for the chat endpoint (used for OpenAPI docs; the body is validated by hand)."""

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request body for POST /api/chat."""

    message: str = Field(..., min_length=1, description="User question for the assistant.")


class ChatResponse(BaseModel):
    """Response for POST /api/chat."""

    reply: str = Field(..., description="Assistant reply generated from the knowledge base.")

    model_config = {
        "json_schema_extra": {
            "examples": [{"reply": "We offer Full Stack Web Development, Data Science and Python Programming."}]
        }
    }


class ErrorResponse(BaseModel):
    """400 / 500 body."""

    error: str


class UpstreamErrorResponse(BaseModel):
    """502 body when every Gemini attempt failed."""

    error: str = "Upstream error"
    status: int = Field(..., description="HTTP status of the last upstream attempt.")
    details: str = Field(..., description="Raw response body of the last upstream attempt.")
    model: str = Field(..., description="Model name of the last attempt.")
    apiVersion: str = Field(..., description="API version of the last attempt (v1 or v1beta).")
    hint: str | None = Field(None, description="Suggested fix for 403/404 responses.")

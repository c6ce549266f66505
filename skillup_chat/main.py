# Run from project root: uvicorn skillup_chat.main:app --reload

import logging

from fastapi import FastAPI

from skillup_chat.api.routes import router

logging.basicConfig(level=logging.INFO)
# httpx logs full request URLs at INFO, and Gemini URLs carry ?key=<GOOGLE_API_KEY>
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


app = FastAPI(title="SkillUp Chat Backend")
app.include_router(router)

import logging
import os

from fastapi import FastAPI

from ai_tutor.Routes.chat_routes import chat_router
from ai_tutor.Routes.study_routes import study_router

logging.basicConfig(
    level=os.getenv("AI_TUTOR_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="AI Tutor")
app.include_router(chat_router)
app.include_router(study_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))

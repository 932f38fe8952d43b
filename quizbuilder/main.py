from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from quizbuilder.config import settings
from quizbuilder.routes import quizzes, attempts
import logging

logging.basicConfig(level=settings.log_level.upper())

app = FastAPI(title=settings.app_name, version="1.0.0", debug=settings.debug, description="Quiz authoring and grading API for the exam-review platform")

# CORS middleware for cross-origin requests (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers with prefixes and tags
app.include_router(quizzes.router, prefix="/quizzes", tags=["Quizzes"])
app.include_router(attempts.router, prefix="/quizzes", tags=["Quiz Attempts"])

# Root endpoint
@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "version": app.version}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

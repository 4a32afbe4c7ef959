from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os

# Only load .env file if not running on Google Cloud
if not os.getenv("K_SERVICE"):  # K_SERVICE is set by Cloud Run / App Hosting
    from dotenv import load_dotenv
    load_dotenv()
    print("🔧 Local development: Loaded .env file")
else:
    print("☁️ Running on Google Cloud: Using environment variables")

from config.settings import settings
from core.gemini import GeminiClient
from api import image_operations

@asynccontextmanager
async def lifespan(app: FastAPI):
    # One client per process, validated before the first request
    gemini_client = GeminiClient.from_settings(settings)
    gemini_client.validate_credentials(running_in_cloud=bool(os.getenv("K_SERVICE")))
    app.state.gemini_client = gemini_client
    yield

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(image_operations.router, prefix=settings.API_V1_STR)

@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} is running"}

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

@app.get("/api/health")
async def api_health_check():
    return {"status": "healthy", "service": "api"}

@app.get("/api/environment")
async def get_environment_info():
    is_cloud = bool(os.getenv("K_SERVICE"))
    return {
        "environment": "cloud_run" if is_cloud else "local",
        "is_cloud": is_cloud,
        "service": os.getenv("K_SERVICE"),
        "port": os.getenv("PORT", str(settings.PORT)),
        "config_source": "cloud_env" if is_cloud else "dotenv_file"
    }

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", settings.PORT))
    uvicorn.run(app, host="0.0.0.0", port=port)

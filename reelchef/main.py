import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reelchef.config import get_settings
from reelchef.errors import ReelChefError
from reelchef.routers import analyze, recipes, meal_plans, grocery

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="ReelChef API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Build allowed origins list (supports comma-separated FRONTEND_URL for multiple domains)
_origins = ["http://localhost:8081"]
for origin in settings.FRONTEND_URL.split(","):
    origin = origin.strip()
    if origin and origin not in _origins:
        _origins.append(origin)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReelChefError)
async def reelchef_error_handler(request: Request, exc: ReelChefError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "message": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
    return JSONResponse(
        status_code=400,
        content={"error": "ValidationError", "message": message},
    )


app.include_router(analyze.router, prefix="/api/v1/analyze", tags=["Analyze"])
app.include_router(recipes.router, prefix="/api/v1/recipes", tags=["Recipes"])
app.include_router(meal_plans.router, prefix="/api/v1/meal-plans", tags=["Meal Plans"])
app.include_router(grocery.router, prefix="/api/v1/grocery", tags=["Grocery"])


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/")
def root():
    return {"name": "ReelChef API", "version": app.version, "status": "running"}

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from paylinks.core.config import settings
from paylinks.core.database import init_db
from paylinks.routers import customers, pay, payment_links, webhooks

OPENAPI_TAGS = [
    {"name": "Payment Links", "description": "Create, list, cancel and delete payment links."},
    {"name": "Pay", "description": "Customer-facing card-on-file submission."},
    {"name": "Customers", "description": "Manage customer profiles at the payment processor."},
    {"name": "Webhooks", "description": "Inbound webhooks that create payment links."},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Single-use card-on-file payment links. "
        "Issue links, track their lifecycle and vault submitted cards at the processor."
    ),
    openapi_tags=OPENAPI_TAGS,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


app.include_router(
    payment_links.router,
    prefix="/v1/payment_links",
    tags=["Payment Links"],
)
app.include_router(pay.router, prefix="/v1/pay", tags=["Pay"])
app.include_router(customers.router, prefix="/v1/customers", tags=["Customers"])
app.include_router(webhooks.router, prefix="/v1/webhooks", tags=["Webhooks"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "url": settings.APP_URL,
        "status": "running",
        "processor": "configured" if settings.paytrace_configured else "not configured",
    }

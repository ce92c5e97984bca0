import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .clients.commercetools import CommercetoolsClient
from .logging_config import configure_logging
from .routes import graphql as graphql_router
from .services.registry import build_services
from .settings import settings

configure_logging(settings.log_level)
logger = structlog.get_logger(__name__)

app = FastAPI(title="Storefront GraphQL API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(graphql_router.router)

@app.get("/")
def root():
    return {"message": "Storefront GraphQL API is running"}

@app.on_event("startup")
async def _startup_platform_client():
    client = CommercetoolsClient(settings.platform_config())
    app.state.platform = client
    app.state.services = build_services(client, settings)
    logger.info("startup.platform_ready", project=client.config.project_key, api_url=client.config.api_url)

@app.on_event("shutdown")
async def _shutdown_platform_client():
    client = getattr(app.state, "platform", None)
    if client is not None:
        await client.aclose()

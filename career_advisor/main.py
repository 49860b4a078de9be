import logging

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import sentry_sdk

from career_advisor.api.v1.health import router as health_router
from career_advisor.api.v1.analyze import router as analyze_router
from career_advisor.api.v1.analytics import router as analytics_router
from career_advisor.core.error_responses import analysis_error_handler, rate_limit_exceeded_handler
from career_advisor.core.rate_limit import limiter
from career_advisor.core.config import settings
from career_advisor.core.lifespan import lifespan
from career_advisor.services.errors import AnalysisError

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="Career Advisor Analysis API", version="0.1.0", lifespan=lifespan)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(AnalysisError, analysis_error_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(analyze_router, prefix="/v1", tags=["Analysis"])
# Path used by the browser client's function invocation.
app.include_router(analyze_router, prefix="/functions/v1", tags=["Analysis"])
app.include_router(analytics_router, prefix="/v1", tags=["Analytics"])

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint for monitoring API status.

    Reports `degraded` when the bucket or region is missing; the service still
    runs but every S3 call will fail.
    """
    settings = request.app.state.settings
    configured = bool(settings.s3_bucket and settings.aws_region)
    return {
        "status": "ok" if configured else "degraded",
        "bucket_configured": bool(settings.s3_bucket),
        "region": settings.aws_region,
    }

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from ....application.services import WebhookExecutor
from ....infrastructure.logging import sanitize_for_logging
from ..dependencies import get_webhook_executor

router = APIRouter(prefix="/webhooks", tags=["webhooks"])
logger = structlog.get_logger()

SIGNATURE_HEADER = "Upstash-Signature"
MESSAGE_ID_HEADER = "Upstash-Message-Id"
RETRIED_HEADER = "Upstash-Retried"


@router.post(
    "/qstash/publish",
    response_class=PlainTextResponse,
    summary="Fire-time callback",
    description="Called by QStash when a scheduled post is due. Answers with a status code only.",
    include_in_schema=False,
)
async def publish_scheduled_post(
    request: Request,
    executor: WebhookExecutor = Depends(get_webhook_executor),
) -> PlainTextResponse:
    # Signature covers the exact bytes, so the body is never re-serialized
    body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)
    job_id = request.headers.get(MESSAGE_ID_HEADER)

    logger.info(
        "Scheduled delivery received",
        job_id=job_id,
        retried=request.headers.get(RETRIED_HEADER, "0"),
        signature=sanitize_for_logging(signature),
    )

    outcome = await executor.execute(body, signature, job_id=job_id)
    return PlainTextResponse(outcome.reason, status_code=outcome.status_code)

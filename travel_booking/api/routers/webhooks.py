from fastapi import APIRouter, Depends, Request, status

from travel_booking.api.dependencies import AppServices, get_services
from travel_booking.api.schemas.payments import WebhookResponse

router = APIRouter(prefix="/webhooks")


@router.post("/stripe", response_model=WebhookResponse, status_code=status.HTTP_200_OK)
async def stripe_webhook(
    request: Request,
    services: AppServices = Depends(get_services),
) -> WebhookResponse:
    raw_body = await request.body()
    signature = request.headers.get("Stripe-Signature")
    await services.handle_webhook.execute(raw_body=raw_body, signature=signature)
    return WebhookResponse(received=True)

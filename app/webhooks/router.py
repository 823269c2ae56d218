# app/webhooks/router.py
from fastapi import APIRouter

webhook_router = APIRouter()


# Import handlers inside a function to avoid circular imports
def register_handlers():
    from app.webhooks import telegram_handler
    webhook_router.include_router(telegram_handler.router, prefix="/telegram")


register_handlers()


@webhook_router.get("/")
async def webhook_info():
    return {
        "endpoints": {
            "telegram_updates": "/webhooks/telegram",
        },
        "note": "Set this URL as the bot webhook; only callback queries are handled"
    }

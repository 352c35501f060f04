from fastapi import FastAPI, Request, Depends
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import hmac
import logging
from interfaces.slack.core_slack_orchestration import SlackInterface, create_slack_app
from interfaces.slack.features.scheduled.daily_checkin import MemberListError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Cron secret handling
security = HTTPBearer(auto_error=False)


def cron_secret_matches(
    credentials: Optional[HTTPAuthorizationCredentials],
    cron_secret: Optional[str]
) -> bool:
    """Constant-time check of the scheduler's bearer token"""
    if not cron_secret or not credentials or not credentials.credentials:
        return False
    return hmac.compare_digest(credentials.credentials.encode(), cron_secret.encode())


def create_app(slack_interface: Optional[SlackInterface] = None) -> FastAPI:
    """Build the FastAPI application around a Slack interface"""
    slack_handler = slack_interface or create_slack_app()

    app = FastAPI(
        title="Mood Check-in - Slack Server",
        description="Slack webhook and scheduled check-in endpoints for mood tracking",
        version="1.0.0"
    )
    app.state.slack_interface = slack_handler

    @app.on_event("shutdown")
    async def shutdown_event():
        await slack_handler.close()
        logger.info("Mood check-in service stopped")

    # Slack webhook endpoint (challenges, slash commands, interactivity)
    @app.post("/slack/events")
    async def slack_events_endpoint(request: Request):
        """Endpoint for every Slack callback"""
        return await slack_handler.handle(request)

    @app.api_route("/api/cron/daily-checkin", methods=["GET", "POST"])
    async def daily_checkin_endpoint(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
    ):
        """Scheduler entry point: DM the mood prompt to every human member of the mood channel"""
        if not cron_secret_matches(credentials, slack_handler.config.cron_secret):
            logger.warning("Rejected daily check-in trigger with a bad cron secret")
            return JSONResponse({"error": "Unauthorized"}, status_code=401)

        try:
            summary = await slack_handler.daily_sender.run_cron()
        except MemberListError as e:
            logger.error(f"Failed to fetch channel members: {e}")
            return JSONResponse(
                {"message": "Failed to fetch channel members", "error": str(e)},
                status_code=500
            )

        logger.info(summary["message"])
        return summary

    @app.get("/health")
    async def health_check():
        """Health check for the check-in service"""
        return {"status": "healthy", "services": ["slack", "cron"]}

    @app.get("/")
    async def root():
        """Root endpoint with service information"""
        return {
            "service": "Mood Check-in Server",
            "slack_endpoints": ["/slack/events"],
            "cron_endpoints": ["/api/cron/daily-checkin"],
            "health": "/health"
        }

    return app


app = create_app()

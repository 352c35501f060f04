"""
Slack Webhook Router

Single entry point for every Slack callback delivered over HTTP:
1. capture the raw body (the signature covers the exact bytes)
2. echo url_verification challenges without checking the signature
3. verify the request signature and replay window
4. dispatch slash commands, interactivity payloads and events
"""

import json
import logging
from typing import Dict, Any
from urllib.parse import parse_qs

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from interfaces.slack.signature import (
    SlackSignatureVerifier, SlackSignatureError,
    TIMESTAMP_HEADER, SIGNATURE_HEADER
)

logger = logging.getLogger(__name__)


def parse_body(raw_body: bytes, content_type: str) -> Dict[str, Any]:
    """Decode a JSON, form-encoded or plain-text Slack body into a mapping"""
    content_type = (content_type or "").split(";")[0].strip().lower()
    text = raw_body.decode("utf-8", errors="replace")

    if content_type == "application/json":
        return _parse_json(text)
    if content_type == "application/x-www-form-urlencoded":
        return _parse_form(text)

    # text/plain and unlabelled bodies: whichever encoding fits
    return _parse_json(text) or _parse_form(text)


def _parse_json(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def _parse_form(text: str) -> Dict[str, Any]:
    return {key: values[0] for key, values in parse_qs(text, keep_blank_values=True).items()}


class SlackWebhookRouter:
    """Authenticates, classifies and dispatches Slack webhook requests"""

    def __init__(self, verifier: SlackSignatureVerifier, command_handler, interaction_handler):
        self.verifier = verifier
        self.command_handler = command_handler
        self.interaction_handler = interaction_handler

    async def handle(self, request: Request) -> Response:
        raw_body = await request.body()
        body = parse_body(raw_body, request.headers.get("content-type", ""))

        if body.get("type") == "url_verification":
            logger.info("Answering Slack url_verification challenge")
            return JSONResponse({"challenge": body.get("challenge")})

        try:
            self.verifier.verify(
                raw_body,
                request.headers.get(TIMESTAMP_HEADER),
                request.headers.get(SIGNATURE_HEADER)
            )
        except SlackSignatureError as e:
            logger.warning(f"Rejected Slack request: {e.reason}")
            return JSONResponse({"error": "Unauthorized"}, status_code=401)

        if "command" in body:
            reply = await self.command_handler.handle_command(body)
            return JSONResponse(reply)

        if "payload" in body:
            return self._handle_interaction(body["payload"])

        if body.get("type") == "event_callback":
            event_type = (body.get("event") or {}).get("type")
            logger.info(f"Acknowledging event_callback ({event_type})")

        return Response(status_code=200)

    def _handle_interaction(self, raw_payload: str) -> Response:
        try:
            payload = json.loads(raw_payload)
        except (TypeError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring interaction with undecodable payload: {e}")
            return Response(status_code=200)
        if not isinstance(payload, dict):
            return Response(status_code=200)

        # Slack expects the ack within 3 seconds; the task runs after the response is sent
        task = self.interaction_handler.route_interaction(payload)
        return Response(status_code=200, background=task)

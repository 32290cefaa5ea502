import orjson
from fastapi import Response
from fastapi.responses import PlainTextResponse

from Tierbot.discord_schemas import InteractionResponse, dump_response

__all__ = [
    "CORS_HEADERS",
    "orjson_response",
    "respond_interaction",
    "respond_preflight",
    "respond_unauthorized",
]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def orjson_response(data: dict, status_code: int = 200) -> Response:
    return Response(
        content=orjson.dumps(data),
        status_code=status_code,
        media_type="application/json",
        headers=CORS_HEADERS,
    )


def respond_interaction(resp: InteractionResponse) -> Response:
    return orjson_response(dump_response(resp))


def respond_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


def respond_unauthorized() -> Response:
    return PlainTextResponse("unauthorized", status_code=401, headers=CORS_HEADERS)

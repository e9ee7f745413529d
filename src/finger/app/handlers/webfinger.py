from aiohttp import hdrs, web

from finger.app.config import LoggerAppKey, WebFingersAppKey

JRD_CONTENT_TYPE = "application/jrd+json"


async def handle_webfinger(request: web.Request):
    """
    Answer a WebFinger query.

    The `resource` parameter is matched exactly against the subjects of the index. No
    normalization happens at query time, so `alice@example.com` does not find the subject
    `acct:alice@example.com`.
    """
    logger = request.app[LoggerAppKey]

    if request.method != hdrs.METH_GET:
        logger.debug("Method not allowed: %s", request.method)
        raise web.HTTPMethodNotAllowed(
            request.method, [hdrs.METH_GET], text="Method not allowed"
        )

    resource = request.query.get("resource", "")
    if not resource:
        logger.debug("No resource provided")
        raise web.HTTPBadRequest(text="No resource provided")

    webfinger = request.app[WebFingersAppKey].get(resource)
    if webfinger is None:
        logger.debug("Resource not found: %s", resource)
        raise web.HTTPNotFound(text="Resource not found")

    try:
        body = webfinger.to_jrd()
    except ValueError as e:
        # PydanticSerializationError is a ValueError.
        logger.error("Error encoding json for %s: %s", resource, e)
        raise web.HTTPInternalServerError(text="Error encoding json")

    logger.debug("Webfinger request successful: %s", resource)
    return web.Response(body=body, content_type=JRD_CONTENT_TYPE)

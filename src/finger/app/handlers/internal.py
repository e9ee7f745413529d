from aiohttp import web


async def handle_healthz(request: web.Request):
    return web.Response(status=200)

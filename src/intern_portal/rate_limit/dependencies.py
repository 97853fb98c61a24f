from functools import lru_cache

from fastapi import Depends, Request, Response

from intern_portal.config import get_settings
from intern_portal.rate_limit.limiter import RateLimiters


@lru_cache
def get_rate_limiters() -> RateLimiters:
    return RateLimiters.from_settings(get_settings())


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def api_rate_limit(
    request: Request,
    response: Response,
    limiters: RateLimiters = Depends(get_rate_limiters),
):
    ip = client_ip(request)
    limiters.api.consume(ip)
    response.headers.update(limiters.api.headers(ip))


def upload_rate_limit(request: Request, limiters: RateLimiters = Depends(get_rate_limiters)):
    limiters.upload.consume(client_ip(request))

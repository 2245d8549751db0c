from fastapi import Request

from .state import ProxyService


def get_proxy_service(request: Request) -> ProxyService:
    return request.app.state.proxy_service

from fastapi import Request

from mistock.services.container import Services


def get_services(request: Request) -> Services:
    """Services built for this application instance at startup."""
    return request.app.state.services

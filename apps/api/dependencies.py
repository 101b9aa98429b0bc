from fastapi import Request

from apps.market.caching import MarketCaches


def get_caches(request: Request) -> MarketCaches:
    """Caches created for this application in ``create_app``."""
    return request.app.state.caches

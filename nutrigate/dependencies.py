"""Global dependencies for the application."""

import httpx
from fastapi import Request


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """Dependency to get the shared outbound HTTP client.
    
    The client is created in the application lifespan and reused for both
    the identity service and the model provider so connections are pooled.
    
    Args:
        request: The FastAPI request object.
        
    Returns:
        The global httpx.AsyncClient instance.
    """
    return request.app.state.http_client

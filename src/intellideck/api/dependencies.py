"""
Shared dependencies for API routes
"""
from fastapi import Depends, Request
from typing import Annotated

from intellideck.api.app_context import AppContext


def get_context(request: Request) -> AppContext:
    return request.app.state.context


# Dependency shortcuts
Context = Annotated[AppContext, Depends(get_context)]

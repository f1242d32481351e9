from fastapi import Request

from .orchestrator import CompositeOrchestrator


def get_orchestrator(request: Request) -> CompositeOrchestrator:
    return CompositeOrchestrator(request.app.state.services)

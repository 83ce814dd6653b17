"""
ChatDock-AI Server Package.

Local control API for the agent runtime: capability policy, background tasks,
the heartbeat scheduler and a chat endpoint.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Settings and constants.
    exception_handlers: Application-wide error responses.
    services: Runtime holder and endpoint dependencies.
"""

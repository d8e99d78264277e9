"""
FastAPI routers grouped by audience (end users, internal jobs).

Each module exposes an APIRouter included by app.py. Endpoints stay thin:
resolve the caller, call a service, map its result to a response.
"""

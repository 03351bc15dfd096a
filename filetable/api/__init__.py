"""
API module.

FastAPI application and routers for workflow files.
"""

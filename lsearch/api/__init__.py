"""HTTP API - FastAPI app, models and routers"""

"""Domain packages - each exposes a FastAPI router"""

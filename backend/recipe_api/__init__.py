"""
FastAPI backend for the recipe library.

Provides:
- A relay that forwards recipe video URLs to the extraction workflow
- REST endpoints for recipes, favorites and profiles
- The client-side extraction controller that turns a video URL into a draft
"""

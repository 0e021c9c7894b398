"""
Import Test Script

Tests that all dependencies are installed and importable.
Run with: pytest tests/test_imports.py -v
"""


def test_fastapi():
    """FastAPI — Web framework for the dispatch backend."""
    import fastapi
    assert hasattr(fastapi, "FastAPI")
    print(f"  fastapi {fastapi.__version__}")


def test_uvicorn():
    """Uvicorn — ASGI server."""
    import uvicorn
    assert hasattr(uvicorn, "run")
    print(f"  uvicorn {uvicorn.__version__}")


def test_pydantic():
    """Pydantic — Data validation."""
    from pydantic import BaseModel
    assert BaseModel is not None
    import pydantic
    print(f"  pydantic {pydantic.__version__}")


def test_firebase_admin():
    """firebase-admin — FCM sends from the dispatch backend."""
    import firebase_admin
    from firebase_admin import messaging
    assert hasattr(messaging, "send_each_for_multicast")
    print(f"  firebase-admin {firebase_admin.__version__}")


def test_httpx():
    """httpx — Async HTTP client for token registration."""
    import httpx
    assert hasattr(httpx, "AsyncClient")
    print(f"  httpx {httpx.__version__}")


def test_python_dotenv():
    """python-dotenv — Environment variable management."""
    from dotenv import load_dotenv
    assert load_dotenv is not None
    print("  python-dotenv OK")


def test_pytest_asyncio():
    """pytest-asyncio — Async test support."""
    import pytest_asyncio
    assert pytest_asyncio is not None
    print("  pytest-asyncio OK")


def test_project_modules():
    """Every project module imports without side effects failing."""
    import whatsapp_clone.api.dispatch  # noqa: F401
    import whatsapp_clone.main  # noqa: F401
    import whatsapp_clone.services.delivery  # noqa: F401
    import whatsapp_clone.services.notification_center  # noqa: F401

"""
setup.py — Makes YTManager installable as a system-wide CLI command
=====================================================================
After running 'pip install .' (or 'pip install -e .'), you can drive your
YouTube live streams from anywhere on your system:

    ytmanager info
    ytmanager set-current-stream --subject Minecraft --subject-before-title
    ytmanager serve

INSTALLATION:
    # Development mode (changes to code take effect immediately)
    pip install -e ".[dev]"

    # As a package
    pip install .
"""

from setuptools import setup

setup(
    # ── Package metadata ──
    name="ytmanager",
    version="1.0.0",
    description="🎬 YTManager — Manage YouTube live streams and their vertical clips from the CLI or a REST API.",
    author="YTManager contributors",

    # py_modules: individual .py files (no package folder)
    py_modules=[
        "manager",
        "config",
        "logging_config",
        "errors",
        "models",
        "stream_settings",
        "stream_library",
        "uploader",
        "youtube_service",
        "playlist",
        "auth",
        "files",
        "actions",
        "server",
    ],

    # ── Dependencies ──
    install_requires=[
        "python-dotenv>=1.0.0",
        "pydantic>=2.0.0",
        "google-api-python-client>=2.100.0",
        "google-auth>=2.20.0",
        "google-auth-oauthlib>=1.0.0",
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        "Pillow>=10.0.0",
    ],

    # ── Optional dev dependencies ──
    extras_require={
        "dev": [
            "pytest>=7.0",
            "httpx>=0.27.0",  # fastapi.testclient
        ],
    },

    # Console script: 'ytmanager' runs main() from manager.py
    entry_points={
        "console_scripts": [
            "ytmanager=manager:main",
        ],
    },

    # pydantic evaluates "str | None" field annotations at runtime
    python_requires=">=3.10",
)

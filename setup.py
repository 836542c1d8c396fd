from __future__ import annotations

from setuptools import find_namespace_packages, setup

_LAYERS = ["application", "cli", "config", "domain", "infrastructure", "server"]

setup(
    name="rewatch",
    version="0.1.0",
    # Repo convention: backend code lives under `backend/`.
    # Layers are imported as top-level packages (`import domain`, `import server`, ...).
    package_dir={"": "backend"},
    # Some layer directories carry no __init__.py (namespace packages).
    packages=find_namespace_packages(
        where="backend",
        include=[name for layer in _LAYERS for name in (layer, f"{layer}.*")],
    ),
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0",
        "python-dotenv>=1.0",
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "asyncpg>=0.29",
        "aiohttp>=3.9",
        "bcrypt>=4.0",
    ],
    extras_require={
        # TestClient needs httpx.
        "test": ["pytest>=7.0", "httpx>=0.27"],
    },
    entry_points={
        "console_scripts": ["rewatch=cli.main:main"],
    },
)

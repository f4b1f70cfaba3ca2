from setuptools import find_packages, setup

setup(
    name="easydeck-backend",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["app", "database"],
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "sqlalchemy>=2.0",
        "pydantic>=2.5",
        "aiohttp>=3.9",
        "python-jose[cryptography]>=3.3",
        "python-dotenv>=1.0",
        "psycopg2-binary>=2.9",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "httpx>=0.26",
        ],
    },
    include_package_data=True,
    description="Backend package for Easy Deck (Google Slides decks, sync and chat)",
)

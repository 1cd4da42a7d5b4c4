from setuptools import setup, find_packages

setup(
    name="autoshop-service-desk",
    version="1.0.0",
    packages=find_packages(include=["service_desk", "service_desk.*"]),
    install_requires=[
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "httpx>=0.24",
        "python-dotenv>=1.0",
        "python-multipart>=0.0.6",
        "twilio>=8.10.0",
        "fastapi>=0.100",
        "uvicorn>=0.20",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "service-desk=service_desk.cli:main",
        ],
    },
    python_requires=">=3.9",
)

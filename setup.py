from setuptools import setup, find_packages

setup(
    name="pulse_events",
    version="0.1.0",
    packages=find_packages(include=["pulse", "pulse.*"]),
    install_requires=[
        "pydantic>=2.0",
        "pydantic-settings",
        "python-dotenv",
        "geopy",
        "aiohttp",
        "beautifulsoup4",
        "pytz",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    python_requires=">=3.9",
)

from setuptools import setup, find_packages

setup(
    name="pawvaidya-moderation",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "psycopg2-binary",
        "python-jose[cryptography]",
        "passlib[bcrypt]",
        "bcrypt<5",  # passlib reads bcrypt.__about__, removed in 5.x
        "python-multipart",
        "pydantic[email]",
        "pydantic-settings",
        "python-dotenv",
        "apscheduler>=3.10,<4",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
)

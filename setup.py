"""Setup script for the Lexiom admin API"""
from setuptools import find_packages, setup

setup(
    name="lexiom-admin",
    version="1.0.0",
    description="Lexiom admin panel - authentication, authorization and audit core",
    packages=find_packages(include=["lexiom_admin", "lexiom_admin.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Framework :: FastAPI",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110.0",
        "uvicorn[standard]>=0.27.0",
        "sqlalchemy>=2.0.25",
        "alembic>=1.13.0",
        "psycopg2-binary>=2.9.9",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "python-jose[cryptography]>=3.3.0",
        "cryptography>=42.0.0",
        "bcrypt>=4.1.0",
        "pyotp>=2.9.0",
        "qrcode[pil]>=7.4.2",
        "slowapi>=0.1.9",
        "limits>=3.6.0",
        "prometheus-client>=0.19.0",
        "prometheus-fastapi-instrumentator>=6.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "httpx>=0.26.0",
        ],
    },
)

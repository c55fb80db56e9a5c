"""
Setup script for market_pricing package.
"""

from setuptools import setup, find_packages

setup(
    name="market-pricing-engine",
    version="1.0.0",
    description="Moteur d'analyse de prix de marché et de recommandations par service",
    author="PricEye Team",
    packages=find_packages(include=["market_pricing", "market_pricing.*"]),
    install_requires=[
        "aiohttp>=3.9.0",
        "supabase>=2.0.0",
        "pandas>=2.0.0",
        "numpy>=1.24.0",
        "python-dotenv>=1.0.0",
        "pytz>=2023.3",
        "python-dateutil>=2.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "market-pricing-server=market_pricing.server:main",
        ],
    },
    python_requires=">=3.9",
)

# Package installation script

from setuptools import setup, find_namespace_packages

setup(
    name="gateway_bridge",
    version="0.1.0",
    description="Expose smart-home gateway child devices as host accessories",
    packages=find_namespace_packages(where="src", include=["gateway_bridge", "gateway_bridge.*"]),
    package_dir={"": "src"},
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "gateway-bridge=gateway_bridge.__main__:main",
        ],
    },
    install_requires=[
        "fastapi",
        "hypercorn",
        "pyyaml",
        "pydantic>=2",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.26.0",
        ],
    },
)

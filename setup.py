from setuptools import find_namespace_packages, setup

setup(
    name="supabase-lite-mcp",
    version="0.1.0",
    description="Lightweight MCP gateway exposing eight essential Supabase database commands",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src"),
    python_requires=">=3.11",
    install_requires=[
        "anyio>=4.1",
        "fastmcp>=2.10,<3",
        "mcp>=1.10",
        "pydantic>=2.0",
        "requests>=2.25.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "supabase-lite-mcp=supabase_lite.cli:main",
        ],
    },
)

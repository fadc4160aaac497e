from setuptools import find_packages, setup

setup(
    name="covmap",
    version="0.1",
    packages=find_packages(include=["covmap", "covmap.*"]),
    license="Apache 2.0",
    description="Decoder for coverage_map rows stored in ClickHouse",
    python_requires=">=3.9",
    install_requires=[
        "requests",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "covmap=covmap.__main__:main",
        ]
    },
)

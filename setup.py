from setuptools import find_packages, setup

setup(
    name="prowjob-model",
    version="0.1.0",
    packages=find_packages(
        include=[
            "prow_common",
            "prow_common.*",
            "prow_cli",
            "prow_cli.*",
        ]
    ),
    install_requires=[
        "click>=8.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-xdist>=3.3.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "prowjob=prow_cli.cli:main",
        ],
    },
    python_requires=">=3.11",
)

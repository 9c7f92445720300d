#!/usr/bin/env python3
from setuptools import setup, find_packages

setup(
    name="gridwm",
    version="0.1.0",
    description="Spatial reasoning and layout constraint engine for desktop windows",
    license="ISC",
    packages=find_packages(include=["gridwm", "gridwm.*"]),
    python_requires=">=3.8",
    install_requires=[
        "PyPubSub>=4.0",
        "click>=8.0",
    ],
    extras_require={
        "tests": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "gridwm=gridwm.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: ISC License (ISCL)",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Desktop Environment :: Window Managers",
    ],
)

#!/usr/bin/python3
# Setup file for gitlet
# Copyright (C) 2026 The Gitlet Authors
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup

setup(
    name="gitlet",
    version="0.1.0",
    description="Single-user version control with branches and three-way merges",
    license="Apache-2.0 OR GPL-2.0-or-later",
    python_requires=">=3.9",
    packages=["gitlet"],
    package_data={"gitlet": ["py.typed"]},
    # only the standard library is needed at runtime
    install_requires=[],
    extras_require={
        "dev": ["ruff", "mypy"],
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["gitlet=gitlet.cli:_main"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
)

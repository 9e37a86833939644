#!/usr/bin/env python3

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Setup configuration for synthetics_canary package.

This library manages an AWS CloudWatch Synthetics Canary including:
- Canary create/update with convergence polling
- IAM execution policy and role provisioning
- Start/stop, run results and run logs
- Removal of the canary and the resources the service creates for it
"""

from setuptools import find_packages, setup

setup(
    name="synthetics_canary",
    version="0.1.0",
    description="Lifecycle management for AWS CloudWatch Synthetics Canaries",
    package_dir={"": "lib"},
    packages=find_packages(where="lib"),
    python_requires=">=3.11",
    install_requires=[
        "boto3>=1.34.0",
        "botocore>=1.34.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
            "moto[s3]>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "synthetics-canary=synthetics_canary.cli:main",
        ],
    },
    author="Development Team",
    license="MIT-0",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)

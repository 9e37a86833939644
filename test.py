#!/usr/bin/env python3

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Synthetics Canary Test Runner

Installs the package with its test extras and runs the pytest suite.

Usage:
    python test.py
"""

import subprocess
import sys


class Colors:
    """ANSI color codes for terminal output."""
    OKBLUE = '\033[94m'
    OKGREEN = '\033[92m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'


def log_info(msg):
    print(f"{Colors.OKBLUE}ℹ {msg}{Colors.ENDC}")


def log_success(msg):
    print(f"{Colors.OKGREEN}✓ {msg}{Colors.ENDC}")


def log_error(msg):
    print(f"{Colors.FAIL}✗ {msg}{Colors.ENDC}")


def run_command(cmd, cwd=None):
    """Run shell command."""
    log_info(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, check=False, cwd=cwd)
    return result.returncode == 0


def check_python_version():
    """Check if Python 3.12+ is available."""
    version_info = sys.version_info

    if version_info[0] < 3 or (version_info[0] == 3 and version_info[1] < 12):
        log_error("Python 3.12+ is required")
        log_info(f"Current version: Python {version_info[0]}.{version_info[1]}.{version_info[2]}")
        sys.exit(1)

    log_success(f"Found Python {version_info[0]}.{version_info[1]}.{version_info[2]}")
    return True


def main():
    """Main test runner."""
    print(f"\n{'=' * 60}")
    print("Synthetics Canary Test Runner")
    print(f"{'=' * 60}\n")

    try:
        log_info("Checking prerequisites...")
        check_python_version()
        log_success("All prerequisites met\n")

        log_info("Installing package with test dependencies...")
        if not run_command([sys.executable, '-m', 'pip', 'install', '-e', '.[test]']):
            log_error("pip install failed")
            sys.exit(1)
        log_success("Dependencies installed\n")

        log_info("Running tests...")
        if not run_command([sys.executable, '-m', 'pytest', 'tests']):
            log_error("Tests failed")
            sys.exit(1)

        print(f"\n{'=' * 60}")
        log_success("All tests passed!")
        print(f"{'=' * 60}\n")

    except Exception as e:
        log_error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

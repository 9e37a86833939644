# Vulture whitelist for pytest fixtures and entry points
# These names are used by pytest/setuptools but not explicitly referenced in code

# Console script entry point (registered in setup.py)
main

# Pytest fixtures (injected by pytest, not direct calls)
clients
factory
store
component
config
code_path
iam_client
s3
source_zip

# Fixtures from tests/conftest.py
pytest_configure  # pytest hook

# CanaryStatus members only reached by iterating the enum
ERROR
READY
STOPPED

"""
Constants used throughout the synthetics canary component.

Centralizes default values and naming conventions so the reconciler,
removal procedure and tests agree on them.
"""

# =============================================================================
# Configuration Defaults
# =============================================================================

DEFAULT_REGION = "us-east-1"

DEFAULT_HANDLER = "index.handler"

DEFAULT_RUNTIME = "syn-nodejs-puppeteer-3.0"

# Maximum canary run timeout allowed by the service (14 minutes)
DEFAULT_TIMEOUT_SECONDS = 840

# Days to keep run artifacts
DEFAULT_FAILURE_RETENTION_DAYS = 31
DEFAULT_SUCCESS_RETENTION_DAYS = 31

# Schedule duration when none is declared; run once per start
DEFAULT_SCHEDULE_DURATION = 0

# Length of the random suffix for generated canary names
GENERATED_NAME_SUFFIX_LENGTH = 6


# =============================================================================
# Polling (in seconds)
# =============================================================================

POLL_INTERVAL_SECONDS = 1

# Upper bound for any single convergence wait (15 minutes)
MAX_WAIT_SECONDS = 900

# New IAM policies are not assumable by Lambda right away
IAM_PROPAGATION_SECONDS = 6


# =============================================================================
# Naming Conventions
# =============================================================================

POLICY_NAME_PREFIX = "CloudWatchSyntheticsPolicy-"
ROLE_NAME_PREFIX = "CloudWatchSyntheticsRole-"

# Prefix of the Lambda function and layer the service creates per canary
LAMBDA_NAME_PREFIX = "cwsyn-"

METRIC_NAMESPACE = "CloudWatchSynthetics"

LAMBDA_SERVICE_PRINCIPAL = "lambda.amazonaws.com"

# Layer runtimes load user code from this directory inside the archive
LAYER_MODULE_ROOT = ("nodejs", "node_modules")


# =============================================================================
# Run Results
# =============================================================================

# Number of runs returned by results()
RESULTS_LIMIT = 5

# Suffix of the plain-text log among a run's artifacts
LOG_FILE_SUFFIX = ".txt"

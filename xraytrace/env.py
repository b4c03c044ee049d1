"""Environment variable definitions for the xraytrace SDK.

This module defines all environment variables used to configure the SDK.
Each variable includes documentation on its purpose, expected values, and defaults.

Usage:
    import os
    from xraytrace.env import XRAYTRACE_SERVICE_NAME

    service_name = os.environ.get(XRAYTRACE_SERVICE_NAME)
"""

# =============================================================================
# Service Identity
# =============================================================================

XRAYTRACE_SERVICE_NAME = "XRAYTRACE_SERVICE_NAME"
"""
.. envvar:: XRAYTRACE_SERVICE_NAME

Logical name of the service. Used as the ``name`` of every root segment.

**Default:** ``unknown_service``
"""

# =============================================================================
# Connection
# =============================================================================

AWS_XRAY_DAEMON_ADDRESS = "AWS_XRAY_DAEMON_ADDRESS"
"""
.. envvar:: AWS_XRAY_DAEMON_ADDRESS

Address of the X-Ray daemon as ``host:port`` (or just ``port``).
Shares its name with the variable the AWS SDKs read, so a host configured
for them is configured for this SDK too.

**Default:** ``127.0.0.1:2000``
"""

# =============================================================================
# Queueing
# =============================================================================

XRAYTRACE_MAX_QUEUE_SIZE = "XRAYTRACE_MAX_QUEUE_SIZE"
"""
.. envvar:: XRAYTRACE_MAX_QUEUE_SIZE

Maximum number of segment snapshots waiting to be sent. Once full, new
snapshots are dropped rather than blocking the instrumented application.

**Default:** ``2048``
"""

# =============================================================================
# Feature Flags
# =============================================================================

XRAYTRACE_ENABLED = "XRAYTRACE_ENABLED"
"""
.. envvar:: XRAYTRACE_ENABLED

Enable or disable the SDK. When disabled, no socket is opened and no
segments are produced.
Accepts: "true", "false", "1", "0", "yes", "no", "on", "off" (case-insensitive)

**Default:** ``true``
"""

XRAYTRACE_DEBUG = "XRAYTRACE_DEBUG"
"""
.. envvar:: XRAYTRACE_DEBUG

Enable debug logging for the ``xraytrace`` logger.
Useful for seeing dropped or failed segment sends.

**Default:** ``false``
"""

"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks that several features use (settings and
logging, DB wiring, outbound mail). Feature-specific logic stays in its own
package (e.g. `telemetry/`, `auth/`).
"""

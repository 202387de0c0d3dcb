"""Pure reconciliation engine: matching, diffing and conflict detection.

Nothing in this package performs I/O; the schema and classification map are
read-only inputs that may be shared between concurrent calls.
"""

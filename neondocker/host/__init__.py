"""Host inspection: executable lookup, os-release, first-run dependencies."""

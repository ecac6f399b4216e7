"""Driver registry, installation advice and the extension readiness flow."""

"""Poll-cycle coordination: fan-out, collector lifecycle and CLI."""

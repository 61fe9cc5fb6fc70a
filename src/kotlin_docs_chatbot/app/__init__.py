"""Runtime wiring shared by the CLI and HTTP entry points."""

"""Claude Code hook entry points and their input/output schemas."""

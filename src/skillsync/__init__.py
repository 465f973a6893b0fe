"""skillsync: keep skill definitions in sync across coding tools."""

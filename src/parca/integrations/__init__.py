"""External collaborators: source hosts, version control, workspace, time."""

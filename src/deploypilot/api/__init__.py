"""REST API for DeployPilot."""

"""DeployPilot - deployment template resolution and execution pipeline."""

__version__ = "0.1.0"

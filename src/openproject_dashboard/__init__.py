"""Progress, risk, workload, and burndown dashboards for OpenProject."""

__version__ = "0.1.0"

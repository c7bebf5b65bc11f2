"""API routers for Laborobo core."""

from . import my_work, projects, tasks, team, tools, work_orders

__all__ = ["my_work", "projects", "tasks", "team", "tools", "work_orders"]

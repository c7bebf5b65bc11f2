"""Formatting functions for MCP responses."""
import json


def format_roles(roles: list) -> str:
    return ", ".join(roles) if roles else "none"


def format_my_work_project(proj: dict) -> str:
    """Format a My Work project row for display."""
    due_info = f"\nTarget end: {proj['targetEndDate']}" if proj.get('targetEndDate') else ""
    return f"""**{proj['name']}**
ID: {proj['id']}
Status: {proj['status']}
Your roles: {format_roles(proj.get('userRaciRoles'))}{due_info}"""


def format_my_work_work_order(wo: dict) -> str:
    """Format a My Work work order row for display."""
    due_info = f"\nDue: {wo['dueDate']}" if wo.get('dueDate') else ""
    project_info = f"\nProject: {wo['projectName']}" if wo.get('projectName') else ""
    return f"""**{wo['title']}**
ID: {wo['id']}
Status: {wo['status']} | Priority: {wo.get('priority', 'n/a')}{project_info}{due_info}
Your roles: {format_roles(wo.get('userRaciRoles'))}"""


def format_my_work_task(task: dict) -> str:
    """Format a My Work task row for display."""
    due_info = f" (due {task['dueDate']})" if task.get('dueDate') else ""
    blocked = " [BLOCKED]" if task.get('isBlocked') else ""
    return f"- [{task['status']}] {task['title']}{due_info}{blocked} (ID: {task['id']})"


def format_my_work(data: dict) -> str:
    """Format the full My Work payload."""
    sections = []

    projects = data.get("projects", [])
    sections.append(f"## Projects ({len(projects)})")
    sections.extend(format_my_work_project(p) for p in projects)

    work_orders = data.get("workOrders", [])
    sections.append(f"## Work Orders ({len(work_orders)})")
    sections.extend(format_my_work_work_order(wo) for wo in work_orders)

    tasks = data.get("tasks", [])
    sections.append(f"## Tasks ({len(tasks)})")
    sections.extend(format_my_work_task(t) for t in tasks)

    informed = "shown" if data.get("showInformed") else "hidden"
    sections.append(f"_Informed-only items are {informed}._")
    return "\n\n".join(sections)


def format_metrics(metrics: dict) -> str:
    """Format My Work metrics."""
    return f"""**My Work**
Accountable: {metrics['accountableCount']}
Responsible: {metrics['responsibleCount']}
Awaiting your review: {metrics['awaitingReviewCount']}
Assigned open tasks: {metrics['assignedTasksCount']}"""


def format_today(today: dict) -> str:
    """Format the daily summary and today metrics."""
    summary = today["dailySummary"]
    metrics = today["metrics"]
    priorities = "\n".join(f"{i}. {p}" for i, p in enumerate(summary["priorities"], 1))
    return f"""**Today**
{summary['summary']}

Priorities:
{priorities}

Suggested focus: {summary['suggestedFocus']}

Completed today: {metrics['tasksCompletedToday']}
Completed this week: {metrics['tasksCompletedThisWeek']}
Active blockers: {metrics['activeBlockers']}"""


def format_raci_change(change: dict) -> str:
    def _value(value):
        if isinstance(value, list):
            return ", ".join(str(v) for v in value) or "(none)"
        return "(none)" if value in (None, "") else str(value)

    return f"- {change['field']}: {_value(change.get('from'))} → {_value(change.get('to'))}"


def format_raci_result(result: dict) -> str:
    """Format a RACI update response, including pending confirmations."""
    if result.get("confirmation_required"):
        changes = "\n".join(format_raci_change(c) for c in result.get("changes", []))
        return f"""**Confirmation required**
{result['message']}

Changes:
{changes}

Call again with confirmed=true to apply."""

    entity = result.get("project") or result.get("work_order") or {}
    accountable = entity.get("accountable_name") or entity.get("accountable_id") or "(none)"
    responsible = entity.get("responsible_name") or entity.get("responsible_id") or "(none)"
    return f"""{result.get('message', 'RACI updated.')}
Accountable: {accountable}
Responsible: {responsible}
Consulted: {', '.join(entity.get('consulted_ids') or []) or '(none)'}
Informed: {', '.join(entity.get('informed_ids') or []) or '(none)'}"""


def format_tool_result(tool_name: str, result: dict) -> str:
    """Format a gateway ToolResult for display."""
    status = result.get("status")
    timing = f" in {result['execution_time_ms']:.1f}ms" if result.get("execution_time_ms") is not None else ""
    if status == "success":
        data = json.dumps(result.get("data"), indent=2, default=str)
        return f"**{tool_name}** succeeded{timing}\n\n```json\n{data}\n```"
    if status == "denied":
        return f"**{tool_name}** denied: {result.get('error')}"
    return f"**{tool_name}** failed{timing}: {result.get('error')}"

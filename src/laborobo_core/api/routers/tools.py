"""Agent tool API endpoints: discovery and gateway execution."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ... import models, schemas
from ...agent_tools import ToolGateway, build_default_registry, describe_tool
from ...context import RequestContext
from ...database import get_db
from ..dependencies import get_request_context

logger = logging.getLogger("laborobo-core.tools")

router = APIRouter(tags=["tools"])


def _agent_and_config(db: Session, team_id: int, agent_id: int) -> tuple[models.AIAgent, models.AgentConfiguration]:
    agent = db.query(models.AIAgent).filter(models.AIAgent.id == agent_id).first()
    if not agent:
        raise HTTPException(status_code=404, detail=f"Agent not found: {agent_id}")
    if not agent.is_active:
        raise HTTPException(status_code=403, detail=f"Agent {agent_id} is not active")

    config = (
        db.query(models.AgentConfiguration)
        .filter(models.AgentConfiguration.team_id == team_id)
        .filter(models.AgentConfiguration.ai_agent_id == agent_id)
        .first()
    )
    if not config or not config.enabled:
        raise HTTPException(status_code=403, detail=f"Agent {agent_id} is not enabled for team {team_id}")
    return agent, config


@router.get("/", response_model=list[schemas.ToolInfo])
def list_tools(
    agent_id: Optional[int] = Query(None, description="Only tools this agent may run in the team"),
    category: Optional[str] = Query(None, description="Filter by category"),
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """List registered agent tools and their parameters."""
    registry = build_default_registry(db)
    if agent_id is not None:
        _agent, config = _agent_and_config(db, context.team_id, agent_id)
        tools = ToolGateway(db, registry).get_available_tools(config)
    else:
        tools = registry.all()
    if category:
        tools = [tool for tool in tools if tool.category == category]

    return [schemas.ToolInfo(**describe_tool(tool, registry)) for tool in tools]


@router.post("/{tool_name}/execute", response_model=schemas.ToolResultResponse)
def execute_tool(
    tool_name: str,
    request: schemas.ToolExecuteRequest,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """
    Execute a tool through the gateway on behalf of an agent.

    Permission denials and tool failures are reported in the result body
    (**status** denied or failure), not as HTTP errors.
    """
    agent, config = _agent_and_config(db, context.team_id, request.agent_id)
    gateway = ToolGateway(db, build_default_registry(db))
    result = gateway.execute(agent, config, tool_name, request.params)
    return schemas.ToolResultResponse(**result.to_dict())

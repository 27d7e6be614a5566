"""
FastAPI Backend for GitHub Calendar

Exposes the calendar tools over HTTP for dashboards and manual testing.
"""

import logging
from datetime import datetime
from typing import Any, Optional
from contextlib import asynccontextmanager
from html import escape

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from .config import Config
from .tools import TOOL_NAMES, ToolDispatcher


logger = logging.getLogger(__name__)

# Report views and the tool that renders each one
REPORT_TOOLS = {
    "team-status": "get_team_status",
    "workload": "analyze_workload",
    "best-assignee": "find_best_assignee",
    "calendar": "get_calendar_events",
}


class ToolCallRequest(BaseModel):
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolCallResponse(BaseModel):
    content: list[dict[str, Any]]
    isError: bool = False


def create_app(dispatcher: Optional[ToolDispatcher] = None) -> FastAPI:
    """Build the app; tests pass their own dispatcher."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        logger.info("GitHub Calendar API starting up")
        yield
        logger.info("GitHub Calendar API shutting down")

    app = FastAPI(
        title="GitHub Calendar",
        description="Team calendar and workload tools over GitHub Projects",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.dispatcher = dispatcher

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_dispatcher() -> ToolDispatcher:
        if app.state.dispatcher is None:
            app.state.dispatcher = ToolDispatcher(Config().settings())
        return app.state.dispatcher

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "integrations": {
                "github": get_dispatcher().settings.token is not None
            }
        }

    @app.get("/api/tools")
    async def list_tools():
        """List available tools with their input schemas."""
        return {"tools": get_dispatcher().list_tools()}

    @app.post("/api/tools/{name}", response_model=ToolCallResponse)
    async def call_tool(name: str, request: Optional[ToolCallRequest] = None):
        """Call a tool. Tool failures come back with isError set, not as HTTP errors."""
        if name not in TOOL_NAMES:
            raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")

        arguments = request.arguments if request else {}
        result = await get_dispatcher().call_tool(name, arguments)
        return result.to_dict()

    @app.get("/api/reports/schedule/{login}", response_class=HTMLResponse)
    async def get_schedule_report(login: str, days: int = 7):
        """HTML schedule for one team member."""
        result = await get_dispatcher().call_tool("get_person_schedule", {"login": login, "days": days})
        if result.is_error:
            raise HTTPException(status_code=502, detail=result.text)
        return result.html

    @app.get("/api/reports/{view}", response_class=HTMLResponse)
    async def get_html_report(view: str):
        """HTML view for the team status, workload, best assignee or calendar."""
        tool = REPORT_TOOLS.get(view)
        if tool is None:
            raise HTTPException(status_code=404, detail=f"Unknown report: {view}")

        result = await get_dispatcher().call_tool(tool, {})
        if result.is_error:
            raise HTTPException(status_code=502, detail=result.text)
        if result.html is None:
            return f"<p>{escape(result.text)}</p>"
        return result.html

    return app


app = create_app()


# Run with: uvicorn github_calendar.api:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

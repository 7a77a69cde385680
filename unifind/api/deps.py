from typing import Annotated

from fastapi import Depends, Request

from unifind.workflow import WorkflowEngine


def get_workflow(request: Request) -> WorkflowEngine:
    """The application's workflow engine, built in create_app."""
    return request.app.state.workflow


Workflow = Annotated[WorkflowEngine, Depends(get_workflow)]

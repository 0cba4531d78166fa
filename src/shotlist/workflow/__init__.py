"""Operator workflow: step state machine and controller."""

from shotlist.workflow.controller import WorkflowController
from shotlist.workflow.fsm import WorkflowSM, check_transition, create_fsm

__all__ = ["WorkflowController", "WorkflowSM", "check_transition", "create_fsm"]
